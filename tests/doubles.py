"""Test doubles: a graph with scripted features and a recording provider."""

from __future__ import annotations

from typing import Any

from featuregate.backends.networkx_graph import NetworkXGraph
from featuregate.features.catalog import (
    Features,
    GraphFeatures,
    VertexFeatures,
)
from featuregate.provider import NetworkXGraphProvider


class ScriptedGraphFeatures(GraphFeatures):
    def __init__(self, transactions: bool) -> None:
        self._transactions = transactions

    def supports_transactions(self) -> bool:
        return self._transactions


class ScriptedVertexFeatures(VertexFeatures):
    def __init__(self, meta_properties: bool) -> None:
        self._meta_properties = meta_properties

    def supports_meta_properties(self) -> bool:
        return self._meta_properties


def scripted_features(*, transactions: bool = True, meta_properties: bool = True) -> Features:
    """Features that answer True everywhere except where scripted."""
    return Features(
        graph=ScriptedGraphFeatures(transactions),
        vertex=ScriptedVertexFeatures(meta_properties),
    )


class RecordingProvider(NetworkXGraphProvider):
    """NetworkXGraphProvider that records calls and can be told to fail.

    Args:
        fail_on: Stage names that raise RuntimeError ("configure",
            "clear_stale", "open", "load", "clear")
        graph_type: Graph class to open (for override tests)
    """

    def __init__(self, *, fail_on: set[str] | None = None, graph_type: type = NetworkXGraph, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.fail_on = fail_on or set()
        self.graph_type = graph_type
        self.calls: list[str] = []
        self.opened: list[Any] = []

    def _maybe_fail(self, stage: str) -> None:
        self.calls.append(stage)
        if stage in self.fail_on:
            raise RuntimeError(f"{stage} exploded")

    def standard_graph_configuration(self, identity):
        self._maybe_fail("configure")
        return super().standard_graph_configuration(identity)

    def clear(self, graph, configuration):
        self._maybe_fail("clear" if graph is not None else "clear_stale")
        super().clear(graph, configuration)

    def open_test_graph(self, configuration, strategy=None):
        self._maybe_fail("open")
        graph = self.graph_type(
            configuration.get("location"),
            transactions=configuration.get("transactions", False),
            strategy=strategy,
        )
        self.opened.append(graph)
        return graph

    def load_graph_data(self, graph, fixture):
        self._maybe_fail("load")
        super().load_graph_data(graph, fixture)
