"""LayeredLayoutEngine — deterministic rank-based (Sugiyama-style) layout.

Three phases over the PARENT edges of a built graph:

1. **Ranking**: longest-path layering on the PARENT DAG, so every child
   sits below each of its parents and parentless people sit on rank 0.
   Parent cycles (malformed data) are broken by dropping DFS back edges.
2. **Ordering**: barycenter sweeps within each rank to reduce crossings;
   the ordering with the fewest crossings seen is kept.
3. **Coordinates**: fixed slot and rank pitch from the node box plus
   separation constants; each rank is centred within the widest rank.

SPOUSE and SIBLING edges do not drive ranks unless ``align_partners`` is
on, but their endpoints still receive positions like every other node.

Output depends only on the input lists (order included). Nothing here
reads the clock, draws random numbers, or iterates an unordered set.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence

import networkx as nx

from famgraph.config.models import LayoutConfig
from famgraph.domain.graph import GraphNode, Point, TreeGraph
from famgraph.domain.types import RelationType
from famgraph.infrastructure.graph.engine import GraphEngine

logger = logging.getLogger(__name__)

type Ranks = dict[str, int]
type Layers = list[list[str]]


class LayeredLayoutEngine:
    """Compute a position for every node of a :class:`TreeGraph`."""

    def __init__(self, config: LayoutConfig | None = None) -> None:
        self._config = config or LayoutConfig()

    @property
    def config(self) -> LayoutConfig:
        return self._config

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def compute(self, graph: TreeGraph) -> dict[str, Point]:
        """Return node id -> top-left position for every node in *graph*."""
        if not graph.nodes:
            return {}
        engine = GraphEngine(
            graph.node_ids,
            [(e.source, e.target, e.type.value) for e in graph.edges],
        )
        dag = break_cycles(engine.directed(RelationType.PARENT.value))
        ranks = longest_path_ranks(dag)
        if self._config.align_partners:
            pairs = engine.pairs(RelationType.SPOUSE.value, RelationType.SIBLING.value)
            ranks = align_partner_ranks(dag, ranks, pairs)
        layers = order_layers(dag, ranks, graph.node_ids, sweeps=self._config.sweeps)
        return self._coordinates(layers)

    def apply(self, graph: TreeGraph) -> list[GraphNode]:
        """Return the nodes of *graph* with computed positions set."""
        positions = self.compute(graph)
        return [n.model_copy(update={"position": positions[n.id]}) for n in graph.nodes]

    # ------------------------------------------------------------------
    # Coordinates
    # ------------------------------------------------------------------

    def _coordinates(self, layers: Layers) -> dict[str, Point]:
        cfg = self._config
        horizontal = cfg.rank_dir == "TB"
        # Slot pitch runs along a rank, rank pitch across ranks.
        slot_box, rank_box = (
            (cfg.node_width, cfg.node_height) if horizontal else (cfg.node_height, cfg.node_width)
        )
        slot_pitch = slot_box + cfg.node_sep
        rank_pitch = rank_box + cfg.rank_sep
        widest = max(len(layer) for layer in layers)

        positions: dict[str, Point] = {}
        for rank, layer in enumerate(layers):
            offset = (widest - len(layer)) / 2
            for index, node_id in enumerate(layer):
                along = (index + offset) * slot_pitch + slot_box / 2
                across = rank * rank_pitch + rank_box / 2
                cx, cy = (along, across) if horizontal else (across, along)
                positions[node_id] = Point(
                    x=cx - cfg.node_width / 2,
                    y=cy - cfg.node_height / 2,
                )
        return positions


# ----------------------------------------------------------------------
# Phase 1: ranking
# ----------------------------------------------------------------------


def break_cycles(g: nx.DiGraph) -> nx.DiGraph:
    """Return a copy of *g* with DFS back edges removed.

    Roots and successors are visited in insertion order, so the same
    input always loses the same edges.
    """
    dag = g.copy()
    state: dict[str, int] = {}  # 1 = on stack, 2 = done
    for root in g.nodes:
        if root in state:
            continue
        state[root] = 1
        stack = [(root, iter(list(g.successors(root))))]
        while stack:
            node, children = stack[-1]
            for child in children:
                seen = state.get(child)
                if seen is None:
                    state[child] = 1
                    stack.append((child, iter(list(g.successors(child)))))
                    break
                if seen == 1:
                    logger.warning("Ignoring PARENT cycle edge %s -> %s for ranking", node, child)
                    dag.remove_edge(node, child)
            else:
                state[node] = 2
                stack.pop()
    return dag


def longest_path_ranks(dag: nx.DiGraph) -> Ranks:
    """Rank 0 for nodes without parents, otherwise one below the deepest parent."""
    ranks: Ranks = {}
    for node in nx.topological_sort(dag):
        ranks[node] = max((ranks[p] + 1 for p in dag.predecessors(node)), default=0)
    return ranks


def align_partner_ranks(
    dag: nx.DiGraph,
    ranks: Ranks,
    pairs: Sequence[tuple[str, str]],
) -> Ranks:
    """Lift partner pairs onto a shared rank without breaking PARENT order.

    Ranks only ever increase, alternating between equalising each pair and
    re-pushing children below their parents. If that has not settled after
    one pass per node, the constraints contradict each other (for example
    a spouse who is also an ancestor) and *ranks* is returned unchanged.
    """
    if not pairs:
        return ranks
    order = list(nx.topological_sort(dag))
    aligned = dict(ranks)
    for _ in range(len(order) + 1):
        changed = False
        for a, b in pairs:
            top = max(aligned[a], aligned[b])
            if aligned[a] != top or aligned[b] != top:
                aligned[a] = aligned[b] = top
                changed = True
        for node in order:
            need = max((aligned[p] + 1 for p in dag.predecessors(node)), default=0)
            if need > aligned[node]:
                aligned[node] = need
                changed = True
        if not changed:
            return aligned
    logger.info("Partner alignment conflicts with PARENT ranks; keeping plain ranks")
    return ranks


# ----------------------------------------------------------------------
# Phase 2: ordering within ranks
# ----------------------------------------------------------------------


def order_layers(
    dag: nx.DiGraph,
    ranks: Ranks,
    node_order: Sequence[str],
    *,
    sweeps: int = 4,
) -> Layers:
    """Group nodes by rank and reduce crossings with barycenter sweeps.

    Initial order within a rank is input order. Each sweep reorders ranks
    top-down by parent barycenter, then bottom-up by child barycenter.
    Ties keep their current relative order.
    """
    depth = max(ranks.values()) + 1
    layers: Layers = [[] for _ in range(depth)]
    for node in node_order:
        layers[ranks[node]].append(node)

    best = [list(layer) for layer in layers]
    best_crossings = count_crossings(dag, best, ranks)
    for _ in range(sweeps):
        if best_crossings == 0:
            break
        for r in range(1, depth):
            layers[r] = _reorder(layers, r, ranks, dag.predecessors)
        for r in range(depth - 2, -1, -1):
            layers[r] = _reorder(layers, r, ranks, dag.successors)
        crossings = count_crossings(dag, layers, ranks)
        if crossings < best_crossings:
            best = [list(layer) for layer in layers]
            best_crossings = crossings
    return best


def _reorder(
    layers: Layers,
    r: int,
    ranks: Ranks,
    neighbours: Callable[[str], Iterable[str]],
) -> list[str]:
    layer = layers[r]
    index = {n: i for layer_ in layers for i, n in enumerate(layer_)}
    width = len(layer)

    def barycenter(node: str) -> float:
        # Normalised so ranks of different widths are comparable.
        points = [
            (index[m] + 0.5) / len(layers[ranks[m]])
            for m in neighbours(node)
            if ranks[m] != r
        ]
        if not points:
            return (index[node] + 0.5) / width
        return sum(points) / len(points)

    keyed = [(barycenter(n), i, n) for i, n in enumerate(layer)]
    keyed.sort(key=lambda item: (item[0], item[1]))
    return [n for _, _, n in keyed]


def count_crossings(dag: nx.DiGraph, layers: Layers, ranks: Ranks) -> int:
    """Crossings between edges that join adjacent ranks."""
    index = {n: i for layer in layers for i, n in enumerate(layer)}
    total = 0
    for r in range(len(layers) - 1):
        segments = sorted(
            (index[u], index[v])
            for u in layers[r]
            for v in dag.successors(u)
            if ranks[v] == r + 1
        )
        for i, (u1, v1) in enumerate(segments):
            for u2, v2 in segments[i + 1 :]:
                if u2 > u1 and v2 < v1:
                    total += 1
    return total
