"""Provider contract: how the harness obtains, resets, populates and disposes of graphs."""

from __future__ import annotations

import contextlib
import importlib
import logging
import shutil
import sys
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any

from featuregate.backends.networkx_graph import NetworkXGraph
from featuregate.exceptions import ProviderNotConfiguredError
from featuregate.fixtures import read_fixture

if TYPE_CHECKING:
    from featuregate.declarations import TestIdentity
    from featuregate.features.catalog import Features
    from featuregate.fixtures import FixtureSpec
    from featuregate.strategy import GraphStrategy

logger = logging.getLogger(__name__)

Configuration = dict[str, Any]


class GraphProvider(ABC):
    """Supplies fresh graph instances to the test lifecycle.

    Implementations must tolerate concurrent calls for distinct
    configurations; calls for the same configuration are sequential.
    """

    @abstractmethod
    def standard_graph_configuration(self, identity: TestIdentity) -> Configuration:
        """Configuration for a graph dedicated to the test ``identity``."""
        ...

    @abstractmethod
    def clear(self, graph: Any | None, configuration: Configuration) -> None:
        """Dispose of ``graph`` and any state kept for ``configuration``.

        ``graph`` is None when clearing leftovers of an unfinished earlier
        run. Must succeed when nothing exists yet.
        """
        ...

    @abstractmethod
    def open_test_graph(self, configuration: Configuration, strategy: GraphStrategy | None = None) -> Any:
        """Open a graph for ``configuration``, decorated by ``strategy`` if given."""
        ...

    def clear_configuration(self, configuration: Configuration) -> None:
        """Remove stale state for ``configuration`` before a graph is opened."""
        self.clear(None, configuration)

    def features(self, graph: Any) -> Features:
        """Capability query surface of ``graph``."""
        return graph.features()

    def load_graph_data(self, graph: Any, fixture: FixtureSpec) -> None:
        """Load ``fixture`` into ``graph``.

        Ids from the fixture are kept when the graph honors user supplied
        ids; otherwise the graph assigns its own and edges are wired through
        an id map.
        """
        data = read_fixture(fixture)
        features = self.features(graph)
        vertex_ids = features.vertex().supports_user_supplied_ids()
        edge_ids = features.edge().supports_user_supplied_ids()
        quiet = getattr(graph, "without_strategy", None)

        with quiet() if quiet else contextlib.nullcontext():
            vertices = {}
            for record in data.vertices:
                vertices[record["id"]] = graph.add_vertex(
                    record["label"],
                    id=record["id"] if vertex_ids else None,
                    **record["properties"],
                )
            for record in data.edges:
                graph.add_edge(
                    vertices[record["out"]],
                    record["label"],
                    vertices[record["in"]],
                    id=record["id"] if edge_ids else None,
                    **record["properties"],
                )
        logger.debug(
            "Loaded fixture '%s' (%d vertices, %d edges)",
            fixture.name,
            len(data.vertices),
            len(data.edges),
        )


class NetworkXGraphProvider(GraphProvider):
    """Provider for :class:`NetworkXGraph`.

    Args:
        base_dir: If given, each test gets a persistent graph in its own
            sub-directory named after the test identity.
        transactions: Open graphs with snapshot transactions enabled.
    """

    def __init__(self, base_dir: str | Path | None = None, *, transactions: bool = False) -> None:
        self.base_dir = Path(base_dir) if base_dir is not None else None
        self.transactions = transactions

    def standard_graph_configuration(self, identity: TestIdentity) -> Configuration:
        location = str(self.base_dir / identity.slug) if self.base_dir is not None else None
        return {
            "graph": f"{NetworkXGraph.__module__}.{NetworkXGraph.__qualname__}",
            "test": str(identity),
            "location": location,
            "transactions": self.transactions,
        }

    def clear(self, graph: Any | None, configuration: Configuration) -> None:
        if graph is not None:
            graph.close()
        location = configuration.get("location")
        if location and Path(location).exists():
            shutil.rmtree(location)
            logger.debug("Removed graph directory %s", location)

    def open_test_graph(self, configuration: Configuration, strategy: GraphStrategy | None = None) -> NetworkXGraph:
        return NetworkXGraph(
            configuration.get("location"),
            transactions=configuration.get("transactions", False),
            strategy=strategy,
        )


class GraphManager:
    """Process-wide holder of the active :class:`GraphProvider`."""

    _provider: GraphProvider | None = None
    _lock = threading.Lock()

    @classmethod
    def set_provider(cls, provider: GraphProvider | None) -> GraphProvider | None:
        """Install ``provider``; returns the one it replaced."""
        with cls._lock:
            previous, cls._provider = cls._provider, provider
        return previous

    @classmethod
    def installed(cls) -> GraphProvider | None:
        """The installed provider, or None."""
        with cls._lock:
            return cls._provider

    @classmethod
    def get_provider(cls) -> GraphProvider:
        with cls._lock:
            provider = cls._provider
        if provider is None:
            raise ProviderNotConfiguredError()
        return provider


def load_provider(target: str, **kwargs: Any) -> GraphProvider:
    """Import a provider from a ``module:attribute`` path.

    The attribute may be a provider instance or a provider class (which is
    instantiated with ``kwargs``).

    Examples:
        featuregate.provider:NetworkXGraphProvider
        my_backend.testing:provider
    """
    if ":" not in target:
        raise ProviderNotConfiguredError(f"Provider '{target}' must use 'module:attribute' format")
    module_name, attr_name = target.rsplit(":", 1)

    try:
        if "." not in sys.path:
            sys.path.insert(0, ".")
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ProviderNotConfiguredError(f"Could not import provider module '{module_name}': {e}") from e

    provider = getattr(module, attr_name, None)
    if provider is None:
        raise ProviderNotConfiguredError(f"Module '{module_name}' has no attribute '{attr_name}'")
    if isinstance(provider, type) and issubclass(provider, GraphProvider):
        provider = provider(**kwargs)
    if not isinstance(provider, GraphProvider):
        raise ProviderNotConfiguredError(
            f"'{target}' is not a GraphProvider (got {type(provider).__name__})"
        )
    return provider
