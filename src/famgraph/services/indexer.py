"""RelationIndexer — adjacency indices from embedded relation records.

A PARENT record sits on the parent ("I am PARENT of other"). SPOUSE and
SIBLING records are symmetric and indexed in both directions. Records
with a missing id, a missing counterpart, an unknown type, or that point
back at their holder are skipped without error. O(persons + records).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from famgraph.domain.people import Person
from famgraph.domain.relations import (
    DirectedRelation,
    Relation,
    RelationIndex,
    UndirectedRelation,
)
from famgraph.domain.types import RelationType

logger = logging.getLogger(__name__)


def iter_relations(persons: Iterable[Person]) -> Iterator[Relation]:
    """Yield one tagged relation per usable record, in input order."""
    for person in persons:
        holder = person.node_id
        if holder is None:
            continue
        for record in person.relations or ():
            if record.other_person_id is None or record.relation_type is None:
                continue
            other = str(record.other_person_id)
            if other == holder:
                logger.debug("Skipping self relation on person %s", holder)
                continue
            if record.relation_type is RelationType.PARENT:
                yield DirectedRelation(parent=holder, child=other)
            else:
                yield UndirectedRelation(kind=record.relation_type, a=holder, b=other)


def index_relations(persons: Iterable[Person]) -> RelationIndex:
    """Build ``children_of``, ``parents_of``, ``spouses_of`` and ``siblings_of``.

    Each entry is a set, so repeated identical records collapse and
    indexing the same input twice yields the same maps.
    """
    index = RelationIndex()
    for relation in iter_relations(persons):
        index.add(relation)
    return index
