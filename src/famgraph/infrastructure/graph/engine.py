"""GraphEngine — lazy-built NetworkX graphs from a node/edge listing.

Rebuilt per layout run, never cached across rebuilds. Node and edge
insertion follows the order of the input lists, which is what keeps
every traversal over these graphs deterministic.
"""

from __future__ import annotations

from collections.abc import Sequence

import networkx as nx

type _Graph = nx.MultiDiGraph
type EdgeTuple = tuple[str, str, str]  # (source, target, edge_type)


class GraphEngine:
    """Lazy-loading graph engine over typed edges."""

    def __init__(self, node_ids: Sequence[str], edges: Sequence[EdgeTuple]) -> None:
        self._node_ids = list(node_ids)
        self._edges = list(edges)
        self._graph: _Graph | None = None

    @property
    def graph(self) -> _Graph:
        """Return the full typed graph, building it on first access."""
        if self._graph is None:
            self._graph = self._build()
        return self._graph

    def directed(self, edge_type: str) -> nx.DiGraph:
        """DiGraph of every node plus only the edges of *edge_type*.

        Edges whose endpoints are not known nodes are skipped.
        """
        g: nx.DiGraph = nx.DiGraph()
        g.add_nodes_from(self._node_ids)
        for source, target, kind in self.graph.edges(keys=True):
            if kind == edge_type:
                g.add_edge(source, target)
        return g

    def pairs(self, *edge_types: str) -> list[tuple[str, str]]:
        """Endpoint pairs of the edges whose type is in *edge_types*, grouped by source node."""
        wanted = set(edge_types)
        return [(s, t) for s, t, kind in self.graph.edges(keys=True) if kind in wanted]

    def _build(self) -> _Graph:
        """Build a MultiDiGraph keyed by edge type.

        Loads all nodes first (so isolated nodes appear in the graph),
        then adds edges whose endpoints are both present.
        """
        g: _Graph = nx.MultiDiGraph()
        g.add_nodes_from(self._node_ids)
        for source, target, kind in self._edges:
            if source in g and target in g:
                g.add_edge(source, target, key=kind, edge_type=kind)
        return g
