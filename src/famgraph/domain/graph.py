"""Typed nodes and edges handed to the renderer.

Nodes and edges are rebuilt from scratch on every data change; only
their positions outlive a rebuild (see :mod:`famgraph.domain.layouts`).
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from famgraph.domain.types import Gender, RelationType


class Point(BaseModel):
    """Top-left corner of a node box, in logical canvas units."""

    model_config = {"frozen": True}

    x: float = 0.0
    y: float = 0.0


class Selection(BaseModel):
    """Which nodes the user has picked for relation lookup, and who "me" is."""

    model_config = {"frozen": True}

    selected_a: str | None = None
    selected_b: str | None = None
    me: str | None = None


class GraphNode(BaseModel):
    """One person on the canvas. ``id`` is the stringified person id."""

    model_config = {"frozen": True}

    id: str
    label: str
    gender: Gender = Gender.UNKNOWN
    position: Point = Field(default_factory=Point)
    selected_a: bool = False
    selected_b: bool = False
    is_me: bool = False
    type: str = "person"


class EdgeStyle(BaseModel):
    """Presentation hints for an edge; the renderer decides how to use them."""

    model_config = {"frozen": True}

    stroke: str
    stroke_width: int = 3
    stroke_dasharray: str | None = None
    animated: bool = False
    marker_end: str | None = None
    label: str = ""
    source_handle: str | None = None
    target_handle: str | None = None


_EDGE_STYLES: dict[RelationType, EdgeStyle] = {
    RelationType.PARENT: EdgeStyle(
        stroke="#10b981",
        marker_end="arrowclosed",
        label=RelationType.PARENT.value,
    ),
    RelationType.SIBLING: EdgeStyle(
        stroke="#6366f1",
        stroke_dasharray="6 6",
        label=RelationType.SIBLING.value,
        source_handle="sibling-left",
        target_handle="sibling-right-target",
    ),
    RelationType.SPOUSE: EdgeStyle(
        stroke="#ec4899",
        animated=True,
        marker_end="arrowclosed",
        label=RelationType.SPOUSE.value,
        source_handle="spouse-right",
        target_handle="spouse-left",
    ),
}


def style_for(relation_type: RelationType) -> EdgeStyle:
    """Return the edge style for *relation_type*."""
    return _EDGE_STYLES[relation_type]


class GraphEdge(BaseModel):
    """A typed edge between two node ids present in the same graph."""

    model_config = {"frozen": True}

    id: str
    source: str
    target: str
    type: RelationType
    style: EdgeStyle


class TreeGraph(BaseModel):
    """Deduplicated node and edge lists produced by one build."""

    model_config = {"frozen": True}

    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)

    @property
    def node_ids(self) -> list[str]:
        return [n.id for n in self.nodes]
