"""Saved layouts, layout keys, and the stored-over-computed merge rule.

A Layout is a list of per-node position records. Two copies may exist:
the remote one tied to a family id and a local cached one tied to a
layout key. Whichever is loaded overrides computed positions for the
node ids it names; computed positions fill in everything else.
"""

from __future__ import annotations

import json
from collections.abc import Iterable

from pydantic import BaseModel, Field, TypeAdapter

from famgraph.domain.graph import GraphNode, Point
from famgraph.domain.relations import sorted_ids

LAYOUT_KEY_PREFIX = "family-tree-layout-"


class PositionRecord(BaseModel):
    """Saved position of one node."""

    model_config = {"frozen": True, "populate_by_name": True}

    node_id: str = Field(alias="nodeId")
    x: float
    y: float


class Layout(BaseModel):
    """A named list of position records, optionally scoped to a family."""

    model_config = {"frozen": True, "populate_by_name": True}

    family_id: int | None = Field(default=None, alias="familyId")
    positions: list[PositionRecord] = Field(default_factory=list)

    def as_mapping(self) -> dict[str, Point]:
        """node id -> saved point. Later records win over earlier duplicates."""
        return {p.node_id: Point(x=p.x, y=p.y) for p in self.positions}


_POSITION_LIST = TypeAdapter(list[PositionRecord])


def layout_key(family_id: int | None, person_ids: Iterable[str]) -> str:
    """Cache key for the layout that applies to the current person set.

    With a family id the key depends on the family alone, so it survives
    people being added or removed. Without one the key is the sorted,
    de-duplicated id list, which changes whenever the population does.

    Examples:
        >>> layout_key(7, ["3", "1"])
        'family-tree-layout-family-7'
        >>> layout_key(None, ["10", "2", "2"])
        'family-tree-layout-2,10'
    """
    if family_id is not None:
        return f"{LAYOUT_KEY_PREFIX}family-{family_id}"
    return LAYOUT_KEY_PREFIX + ",".join(sorted_ids(set(person_ids)))


def merge_positions(nodes: list[GraphNode], loaded: Layout | None) -> list[GraphNode]:
    """Apply *loaded* positions over the computed positions of *nodes*.

    Loaded records for ids that have no node are ignored.
    """
    if loaded is None or not loaded.positions:
        return list(nodes)
    saved = loaded.as_mapping()
    return [
        n.model_copy(update={"position": saved[n.id]}) if n.id in saved else n for n in nodes
    ]


def extract_positions(nodes: Iterable[GraphNode], *, family_id: int | None = None) -> Layout:
    """Snapshot the current node positions as a Layout."""
    return Layout(
        family_id=family_id,
        positions=[
            PositionRecord(node_id=n.id, x=n.position.x, y=n.position.y) for n in nodes
        ],
    )


def dump_positions(positions: Iterable[PositionRecord]) -> str:
    """Serialize a position list as ``[{"nodeId", "x", "y"}, ...]``."""
    return json.dumps([p.model_dump(by_alias=True) for p in positions], separators=(",", ":"))


def load_positions(raw: str) -> list[PositionRecord]:
    """Parse a serialized position list.

    Raises ValueError (including pydantic's ValidationError) when *raw* is
    not valid JSON or does not describe a list of position records.
    """
    return _POSITION_LIST.validate_python(json.loads(raw))


def load_layout_document(raw: str) -> list[PositionRecord]:
    """Parse the remote layout document ``{"positions": [...]}``.

    Raises ValueError on anything that is not such a document.
    """
    doc = json.loads(raw)
    if not isinstance(doc, dict) or "positions" not in doc:
        msg = "layout document has no 'positions' list"
        raise ValueError(msg)
    return _POSITION_LIST.validate_python(doc["positions"])
