"""Graph strategies: decorators that intercept mutations of a graph.

A test class can be run once per strategy to check that a backend behaves
the same (or fails the right way) when a strategy is active. The provider
hands the strategy to the backend when it opens the test graph.
"""

from __future__ import annotations

from typing import Any

from featuregate.exceptions import UnsupportedOperationError


class GraphStrategy:
    """Base strategy. Allows everything."""

    name = "identity"

    def before_mutation(self, graph: Any, operation: str, target: Any = None) -> None:
        """Called before ``graph`` performs ``operation`` on ``target``.

        Raise to veto the mutation.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class ReadOnlyStrategy(GraphStrategy):
    """Rejects every mutation."""

    name = "read-only"

    def before_mutation(self, graph: Any, operation: str, target: Any = None) -> None:
        raise UnsupportedOperationError(f"Graph is read-only: '{operation}' is not allowed")


class SequenceStrategy(GraphStrategy):
    """Applies several strategies in order; the first veto wins."""

    name = "sequence"

    def __init__(self, *strategies: GraphStrategy) -> None:
        self.strategies = strategies

    def before_mutation(self, graph: Any, operation: str, target: Any = None) -> None:
        for strategy in self.strategies:
            strategy.before_mutation(graph, operation, target)

    def __repr__(self) -> str:
        inner = ", ".join(repr(s) for s in self.strategies)
        return f"SequenceStrategy({inner})"
