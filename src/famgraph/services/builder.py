"""GraphBuilder — deduplicated typed nodes and edges from people + index.

Pure function of its inputs: no hidden state, no I/O. Every emitted edge
connects two ids that received a node in the same build; relations that
reference an unknown (deleted or not yet loaded) person are dropped.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from famgraph.domain.graph import GraphEdge, GraphNode, Selection, TreeGraph, style_for
from famgraph.domain.people import Person
from famgraph.domain.relations import RelationIndex, UndirectedRelation, sorted_ids
from famgraph.domain.types import Gender, RelationType

logger = logging.getLogger(__name__)


def build_nodes(persons: Sequence[Person], selection: Selection | None = None) -> list[GraphNode]:
    """One node per person with an id. The first person with a given id wins."""
    sel = selection or Selection()
    nodes: list[GraphNode] = []
    seen: set[str] = set()
    for person in persons:
        node_id = person.node_id
        if node_id is None:
            continue
        if node_id in seen:
            logger.debug("Duplicate person id %s ignored", node_id)
            continue
        seen.add(node_id)
        nodes.append(
            GraphNode(
                id=node_id,
                label=person.name if person.name is not None else f"Person {node_id}",
                gender=person.gender or Gender.UNKNOWN,
                selected_a=sel.selected_a == node_id,
                selected_b=sel.selected_b == node_id,
                is_me=sel.me == node_id,
            )
        )
    return nodes


def _edge(edge_id: str, source: str, target: str, kind: RelationType) -> GraphEdge:
    return GraphEdge(id=edge_id, source=source, target=target, type=kind, style=style_for(kind))


def build_edges(node_ids: Sequence[str], index: RelationIndex) -> list[GraphEdge]:
    """PARENT, SPOUSE and SIBLING edges between ids in *node_ids*.

    Edges are emitted per node in *node_ids* order (parents, then spouses),
    followed by a sibling pass, with related ids visited in numeric-aware
    order so the result never depends on set iteration order.
    """
    valid = set(node_ids)
    edges: list[GraphEdge] = []
    edge_ids: set[str] = set()

    for pid in node_ids:
        for parent in sorted_ids(index.parents_of.get(pid, set())):
            if parent not in valid:
                continue
            edge_id = f"{parent}-{pid}-PARENT"
            if edge_id in edge_ids:
                continue
            edge_ids.add(edge_id)
            edges.append(_edge(edge_id, parent, pid, RelationType.PARENT))

        for spouse in sorted_ids(index.spouses_of.get(pid, set())):
            if spouse not in valid:
                continue
            pair = UndirectedRelation(kind=RelationType.SPOUSE, a=pid, b=spouse).pair_key
            edge_id = "-".join(pair) + "-SPOUSE"
            if edge_id in edge_ids:
                continue
            edge_ids.add(edge_id)
            edges.append(_edge(edge_id, pid, spouse, RelationType.SPOUSE))

    seen_pairs: set[tuple[str, str]] = set()
    for pid in node_ids:
        for sibling in sorted_ids(index.siblings_of.get(pid, set())):
            if sibling not in valid:
                continue
            pair = UndirectedRelation(kind=RelationType.SIBLING, a=pid, b=sibling).pair_key
            if pair in seen_pairs:
                continue
            seen_pairs.add(pair)
            edges.append(_edge(f"{pid}-{sibling}-SIBLING", pid, sibling, RelationType.SIBLING))

    return edges


def build_graph(
    persons: Sequence[Person],
    index: RelationIndex,
    *,
    selection: Selection | None = None,
) -> TreeGraph:
    """Nodes for every identified person plus the edges between them."""
    nodes = build_nodes(persons, selection)
    edges = build_edges([n.id for n in nodes], index)
    logger.debug("Built graph: %d nodes, %d edges", len(nodes), len(edges))
    return TreeGraph(nodes=nodes, edges=edges)
