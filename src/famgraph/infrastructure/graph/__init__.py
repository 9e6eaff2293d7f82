"""NetworkX views over a built family graph."""

from famgraph.infrastructure.graph.engine import GraphEngine

__all__ = ["GraphEngine"]
