"""Graph backends shipped with featuregate."""

from featuregate.backends.networkx_graph import (
    Edge,
    NetworkXGraph,
    Transaction,
    Vertex,
)

__all__ = ["Edge", "NetworkXGraph", "Transaction", "Vertex"]
