"""Commit/rollback helpers that do nothing on non-transactional graphs."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any


def supports_transactions(graph: Any) -> bool:
    return graph.features().graph().supports_transactions()


def try_commit(graph: Any, assertion: Callable[[Any], Any] | None = None) -> None:
    """Commit if the graph supports transactions.

    With ``assertion``, call it once before committing and, when a commit
    actually happens, once more after it. The assertion is expected to hold
    both times; raising from it is how a test reports that it did not.
    """
    if assertion is not None:
        assertion(graph)
    if supports_transactions(graph):
        graph.tx().commit()
        if assertion is not None:
            assertion(graph)


def try_rollback(graph: Any) -> None:
    """Roll back if the graph supports transactions."""
    if supports_transactions(graph):
        graph.tx().rollback()
