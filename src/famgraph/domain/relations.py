"""Tagged relation variants and the adjacency index built from them.

A PARENT record is directed (parent -> child). SPOUSE and SIBLING records
are undirected; their identity is the canonical sorted pair so that the
two directional records describing one pair collapse into one relation.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from famgraph.domain.types import RelationType


def id_sort_key(node_id: str) -> tuple[int, int, str]:
    """Order stringified ids numerically when they are integers.

    Numeric ids sort before any non-numeric id; ties fall back to the text.

    Examples:
        >>> sorted(["10", "9", "x"], key=id_sort_key)
        ['9', '10', 'x']
    """
    if node_id.lstrip("-").isdigit():
        return (0, int(node_id), node_id)
    return (1, 0, node_id)


def sorted_ids(ids: set[str] | frozenset[str] | list[str]) -> list[str]:
    """Return *ids* in deterministic numeric-aware order."""
    return sorted(ids, key=id_sort_key)


@dataclass(frozen=True)
class DirectedRelation:
    """``parent`` is a PARENT of ``child``."""

    parent: str
    child: str

    @property
    def kind(self) -> RelationType:
        return RelationType.PARENT


@dataclass(frozen=True)
class UndirectedRelation:
    """A symmetric SPOUSE or SIBLING relation between ``a`` and ``b``."""

    kind: RelationType
    a: str
    b: str

    @property
    def pair_key(self) -> tuple[str, str]:
        """Canonical (lexicographically sorted) endpoint pair."""
        first, second = sorted((self.a, self.b))
        return (first, second)


type Relation = DirectedRelation | UndirectedRelation


@dataclass
class RelationIndex:
    """Adjacency maps keyed by stringified person id."""

    children_of: dict[str, set[str]] = field(default_factory=dict)
    parents_of: dict[str, set[str]] = field(default_factory=dict)
    spouses_of: dict[str, set[str]] = field(default_factory=dict)
    siblings_of: dict[str, set[str]] = field(default_factory=dict)

    def add(self, relation: Relation) -> None:
        """Record *relation* in the relevant maps (idempotent)."""
        if isinstance(relation, DirectedRelation):
            _push(self.children_of, relation.parent, relation.child)
            _push(self.parents_of, relation.child, relation.parent)
            return
        target = self.spouses_of if relation.kind is RelationType.SPOUSE else self.siblings_of
        _push(target, relation.a, relation.b)
        _push(target, relation.b, relation.a)


def _push(index: dict[str, set[str]], key: str, value: str) -> None:
    index.setdefault(key, set()).add(value)
