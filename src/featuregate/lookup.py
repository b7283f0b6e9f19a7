"""Translate fixture names into the ids a backend assigned.

All fixtures give every element a unique ``name`` property, so tests can
refer to "marko" or "Garcia" and let these helpers find the real id.
"""

from __future__ import annotations

from typing import Any

from featuregate.exceptions import ElementNotFoundError


def vertex_for(graph: Any, vertex_name: str) -> Any:
    """The vertex whose ``name`` property is ``vertex_name``.

    Raises:
        ElementNotFoundError: If no vertex has that name.
    """
    for vertex in graph.vertices():
        if vertex.value("name") == vertex_name:
            return vertex
    raise ElementNotFoundError(f"vertex named '{vertex_name}'")


def vertex_id(graph: Any, vertex_name: str) -> Any:
    return vertex_for(graph, vertex_name).id


def edge_for(graph: Any, out_vertex_name: str, edge_label: str, in_vertex_name: str) -> Any:
    """The ``edge_label`` edge from the vertex named ``out_vertex_name`` to ``in_vertex_name``.

    Raises:
        ElementNotFoundError: If either vertex or the edge between them is missing.
    """
    out_vertex = vertex_for(graph, out_vertex_name)
    for edge in out_vertex.out_edges(edge_label):
        if edge.in_vertex().value("name") == in_vertex_name:
            return edge
    raise ElementNotFoundError(f"'{edge_label}' edge from '{out_vertex_name}' to '{in_vertex_name}'")


def edge_id(graph: Any, out_vertex_name: str, edge_label: str, in_vertex_name: str) -> Any:
    return edge_for(graph, out_vertex_name, edge_label, in_vertex_name).id
