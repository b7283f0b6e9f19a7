"""In-memory property graph backed by a networkx MultiDiGraph.

This is the reference backend the harness is tested against. It can
optionally persist itself as JSON to a directory and can optionally run
with snapshot transactions, so both sides of the persistence and
transaction capabilities are exercisable.
"""

from __future__ import annotations

import copy
import json
import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

import networkx as nx

from featuregate.exceptions import ElementNotFoundError, UnsupportedOperationError
from featuregate.features.catalog import (
    EdgeFeatures,
    EdgePropertyFeatures,
    Features,
    GraphFeatures,
    VertexFeatures,
    VertexPropertyFeatures,
)

if TYPE_CHECKING:
    from featuregate.strategy import GraphStrategy

logger = logging.getLogger(__name__)

GRAPH_FILE = "graph.json"

_PLAIN_TYPES = (bool, int, float, str, list, dict)


# =============================================================================
# Features
# =============================================================================


class NetworkXGraphFeatures(GraphFeatures):
    def __init__(self, *, persistent: bool, transactional: bool) -> None:
        self._persistent = persistent
        self._transactional = transactional

    def supports_computer(self) -> bool:
        return False

    def supports_persistence(self) -> bool:
        return self._persistent

    def supports_transactions(self) -> bool:
        return self._transactional

    def supports_threaded_transactions(self) -> bool:
        return False


class NetworkXVertexPropertyFeatures(VertexPropertyFeatures):
    def supports_serializable_values(self) -> bool:
        return False


class NetworkXEdgePropertyFeatures(EdgePropertyFeatures):
    def supports_serializable_values(self) -> bool:
        return False


class NetworkXVertexFeatures(VertexFeatures):
    def supports_multi_properties(self) -> bool:
        return False

    def supports_meta_properties(self) -> bool:
        return False

    def supports_custom_ids(self) -> bool:
        return False

    def supports_any_ids(self) -> bool:
        return False

    def properties(self) -> VertexPropertyFeatures:
        return NetworkXVertexPropertyFeatures()


class NetworkXEdgeFeatures(EdgeFeatures):
    def supports_custom_ids(self) -> bool:
        return False

    def supports_any_ids(self) -> bool:
        return False

    def properties(self) -> EdgePropertyFeatures:
        return NetworkXEdgePropertyFeatures()


# =============================================================================
# Elements
# =============================================================================


class Element:
    """A live view of a vertex or edge. Reads go to the graph every time."""

    kind = "element"

    def __init__(self, graph: NetworkXGraph, element_id: Any) -> None:
        self.graph = graph
        self.id = element_id

    @property
    def label(self) -> str:
        return self._attrs()["label"]

    @property
    def properties(self) -> dict[str, Any]:
        """Copy of the element's properties."""
        return dict(self._attrs()["properties"])

    def value(self, key: str, default: Any = None) -> Any:
        return self._attrs()["properties"].get(key, default)

    def property(self, key: str, value: Any) -> None:
        """Set a property on this element."""
        self.graph._set_property(self, key, value)

    def remove_property(self, key: str) -> None:
        self.graph._remove_property(self, key)

    def _attrs(self) -> dict[str, Any]:
        raise NotImplementedError

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self) and other.id == self.id and other.graph is self.graph

    def __hash__(self) -> int:
        return hash((self.kind, self.id))

    def __repr__(self) -> str:
        return f"{self.kind[0]}[{self.id}]"


class Vertex(Element):
    kind = "vertex"

    def _attrs(self) -> dict[str, Any]:
        try:
            return self.graph._nx.nodes[self.id]
        except KeyError:
            raise ElementNotFoundError(f"vertex with id {self.id!r}") from None

    def out_edges(self, *labels: str) -> Iterator[Edge]:
        self._attrs()
        for _, _, key, data in self.graph._nx.out_edges(self.id, keys=True, data=True):
            if not labels or data["label"] in labels:
                yield Edge(self.graph, key)

    def in_edges(self, *labels: str) -> Iterator[Edge]:
        self._attrs()
        for _, _, key, data in self.graph._nx.in_edges(self.id, keys=True, data=True):
            if not labels or data["label"] in labels:
                yield Edge(self.graph, key)

    def out_vertices(self, *labels: str) -> Iterator[Vertex]:
        for edge in self.out_edges(*labels):
            yield edge.in_vertex()

    def remove(self) -> None:
        self.graph._remove_vertex(self)


class Edge(Element):
    kind = "edge"

    def _endpoints(self) -> tuple[Any, Any]:
        try:
            return self.graph._edge_index[self.id]
        except KeyError:
            raise ElementNotFoundError(f"edge with id {self.id!r}") from None

    def _attrs(self) -> dict[str, Any]:
        out_id, in_id = self._endpoints()
        return self.graph._nx.edges[out_id, in_id, self.id]

    def out_vertex(self) -> Vertex:
        return Vertex(self.graph, self._endpoints()[0])

    def in_vertex(self) -> Vertex:
        return Vertex(self.graph, self._endpoints()[1])

    def remove(self) -> None:
        self.graph._remove_edge(self)


# =============================================================================
# Transactions
# =============================================================================


class Transaction:
    """Snapshot transaction: commit keeps the working state, rollback restores the last commit."""

    def __init__(self, graph: NetworkXGraph) -> None:
        self._graph = graph
        self._snapshot = graph._snapshot()

    def commit(self) -> None:
        self._snapshot = self._graph._snapshot()
        logger.debug("Committed transaction on %r", self._graph)

    def rollback(self) -> None:
        self._graph._restore(self._snapshot)
        logger.debug("Rolled back transaction on %r", self._graph)


# =============================================================================
# Graph
# =============================================================================


class NetworkXGraph:
    """Property graph stored in a networkx ``MultiDiGraph``.

    Vertices are networkx nodes, edges are keyed multi-edges whose key is
    the edge id. Every element holds a ``label`` and a ``properties`` dict.

    Args:
        location: Directory to persist to on :meth:`close`. Existing data
            there is loaded on construction. None keeps the graph in memory.
        transactions: Enable snapshot transactions via :meth:`tx`.
        strategy: Optional strategy consulted before every mutation.

    Example:
        >>> g = NetworkXGraph()
        >>> marko = g.add_vertex("person", name="marko")
        >>> lop = g.add_vertex("software", name="lop")
        >>> e = g.add_edge(marko, "created", lop, weight=0.4)
        >>> [v.value("name") for v in marko.out_vertices("created")]
        ['lop']
    """

    def __init__(
        self,
        location: str | Path | None = None,
        *,
        transactions: bool = False,
        strategy: GraphStrategy | None = None,
    ) -> None:
        self.location = Path(location) if location is not None else None
        self.strategy = strategy
        self._transactional = transactions
        self._nx: nx.MultiDiGraph = nx.MultiDiGraph()
        self._edge_index: dict[Any, tuple[Any, Any]] = {}
        self._variables: dict[str, Any] = {}
        self._next_id = 1
        self._closed = False
        if self.location is not None and (self.location / GRAPH_FILE).is_file():
            self._load(self.location / GRAPH_FILE)
        self._tx = Transaction(self) if transactions else None

    # === Capability query ===

    def features(self) -> Features:
        return Features(
            graph=NetworkXGraphFeatures(
                persistent=self.location is not None,
                transactional=self._transactional,
            ),
            vertex=NetworkXVertexFeatures(),
            edge=NetworkXEdgeFeatures(),
        )

    def tx(self) -> Transaction:
        if self._tx is None:
            raise UnsupportedOperationError("Graph does not support transactions")
        return self._tx

    # === Reads ===

    def vertices(self, *ids: Any) -> Iterator[Vertex]:
        """Iterate vertices, all of them or those with the given ids."""
        if not ids:
            return (Vertex(self, node_id) for node_id in list(self._nx.nodes))
        return (Vertex(self, node_id) for node_id in ids if node_id in self._nx)

    def edges(self, *ids: Any) -> Iterator[Edge]:
        if not ids:
            return (Edge(self, edge_id) for edge_id in list(self._edge_index))
        return (Edge(self, edge_id) for edge_id in ids if edge_id in self._edge_index)

    def vertex(self, vertex_id: Any) -> Vertex:
        if vertex_id not in self._nx:
            raise ElementNotFoundError(f"vertex with id {vertex_id!r}")
        return Vertex(self, vertex_id)

    def edge(self, edge_id: Any) -> Edge:
        if edge_id not in self._edge_index:
            raise ElementNotFoundError(f"edge with id {edge_id!r}")
        return Edge(self, edge_id)

    def variables(self) -> dict[str, Any]:
        """Graph-level variables. Mutable; persisted with the graph."""
        return self._variables

    @property
    def nx_graph(self) -> nx.MultiDiGraph:
        """Underlying NetworkX graph."""
        return self._nx

    # === Writes ===

    def add_vertex(self, label: str = "vertex", id: Any = None, **properties: Any) -> Vertex:
        self._before_mutation("add_vertex")
        self._check_values(properties)
        vertex_id = self._assign_id(id, self._nx)
        self._nx.add_node(vertex_id, label=label, properties=dict(properties))
        return Vertex(self, vertex_id)

    def add_edge(
        self,
        out_vertex: Vertex,
        label: str,
        in_vertex: Vertex,
        id: Any = None,
        **properties: Any,
    ) -> Edge:
        self._before_mutation("add_edge")
        self._check_values(properties)
        for endpoint in (out_vertex, in_vertex):
            if endpoint.id not in self._nx:
                raise ElementNotFoundError(f"vertex with id {endpoint.id!r}")
        edge_id = self._assign_id(id, self._edge_index)
        self._nx.add_edge(out_vertex.id, in_vertex.id, key=edge_id, label=label, properties=dict(properties))
        self._edge_index[edge_id] = (out_vertex.id, in_vertex.id)
        return Edge(self, edge_id)

    def _set_property(self, element: Element, key: str, value: Any) -> None:
        self._before_mutation("set_property", element)
        self._check_values({key: value})
        element._attrs()["properties"][key] = value

    def _remove_property(self, element: Element, key: str) -> None:
        self._before_mutation("remove_property", element)
        element._attrs()["properties"].pop(key, None)

    def _remove_vertex(self, vertex: Vertex) -> None:
        self._before_mutation("remove_vertex", vertex)
        vertex._attrs()
        for _, _, key in list(self._nx.in_edges(vertex.id, keys=True)) + list(self._nx.out_edges(vertex.id, keys=True)):
            self._edge_index.pop(key, None)
        self._nx.remove_node(vertex.id)

    def _remove_edge(self, edge: Edge) -> None:
        self._before_mutation("remove_edge", edge)
        out_id, in_id = edge._endpoints()
        self._nx.remove_edge(out_id, in_id, key=edge.id)
        del self._edge_index[edge.id]

    def _before_mutation(self, operation: str, target: Any = None) -> None:
        if self._closed:
            raise UnsupportedOperationError(f"Graph is closed: '{operation}' is not allowed")
        if self.strategy is not None:
            self.strategy.before_mutation(self, operation, target)

    @contextmanager
    def without_strategy(self) -> Iterator[NetworkXGraph]:
        """Temporarily disable the strategy, e.g. to load fixture data."""
        strategy, self.strategy = self.strategy, None
        try:
            yield self
        finally:
            self.strategy = strategy

    def _assign_id(self, requested: Any, existing: Any) -> Any:
        if requested is None:
            while self._next_id in self._nx or self._next_id in self._edge_index:
                self._next_id += 1
            assigned = self._next_id
            self._next_id += 1
            return assigned
        if isinstance(requested, uuid.UUID):
            requested = str(requested)
        if not isinstance(requested, (int, str)) or isinstance(requested, bool):
            raise UnsupportedOperationError(f"Unsupported id type: {type(requested).__name__}")
        if requested in existing:
            raise ValueError(f"Element with id {requested!r} already exists")
        return requested

    @staticmethod
    def _check_values(properties: dict[str, Any]) -> None:
        for key, value in properties.items():
            if value is not None and not isinstance(value, _PLAIN_TYPES):
                raise UnsupportedOperationError(
                    f"Property '{key}' has unsupported value type {type(value).__name__}"
                )

    # === Snapshots & persistence ===

    def _snapshot(self) -> dict[str, Any]:
        return {
            "nx": copy.deepcopy(self._nx),
            "edge_index": dict(self._edge_index),
            "variables": copy.deepcopy(self._variables),
            "next_id": self._next_id,
        }

    def _restore(self, snapshot: dict[str, Any]) -> None:
        self._nx = copy.deepcopy(snapshot["nx"])
        self._edge_index = dict(snapshot["edge_index"])
        self._variables = copy.deepcopy(snapshot["variables"])
        self._next_id = snapshot["next_id"]

    def to_dict(self) -> dict[str, Any]:
        """Vertices, edges and variables in the fixture JSON layout."""
        return {
            "vertices": [
                {"id": node_id, "label": data["label"], "properties": data["properties"]}
                for node_id, data in self._nx.nodes(data=True)
            ],
            "edges": [
                {"id": key, "out": u, "label": data["label"], "in": v, "properties": data["properties"]}
                for u, v, key, data in self._nx.edges(keys=True, data=True)
            ],
            "variables": self._variables,
        }

    def _load(self, path: Path) -> None:
        data = json.loads(path.read_text(encoding="utf-8"))
        for record in data.get("vertices", []):
            self._nx.add_node(record["id"], label=record["label"], properties=record["properties"])
        for record in data.get("edges", []):
            self._nx.add_edge(
                record["out"],
                record["in"],
                key=record["id"],
                label=record["label"],
                properties=record["properties"],
            )
            self._edge_index[record["id"]] = (record["out"], record["in"])
        self._variables = data.get("variables", {})
        logger.debug("Loaded %d vertices and %d edges from %s", len(self._nx), len(self._edge_index), path)

    def close(self) -> None:
        """Persist (if a location is configured) and refuse further writes."""
        if self._closed:
            return
        if self.location is not None:
            self.location.mkdir(parents=True, exist_ok=True)
            (self.location / GRAPH_FILE).write_text(json.dumps(self.to_dict()), encoding="utf-8")
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def __repr__(self) -> str:
        return f"NetworkXGraph[vertices:{self._nx.number_of_nodes()} edges:{len(self._edge_index)}]"
