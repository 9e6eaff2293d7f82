"""Gender and relation-type enums shared by every layer.

Only the three relation kinds below are modelled. Anything else coming
from the person API is treated as unknown and ignored during indexing.
"""

from __future__ import annotations

from enum import StrEnum


class Gender(StrEnum):
    """Gender as reported by the person API."""

    MALE = "MALE"
    FEMALE = "FEMALE"
    UNKNOWN = "UNKNOWN"


class RelationType(StrEnum):
    """Relation kinds carried on a person's embedded relation records."""

    PARENT = "PARENT"
    SIBLING = "SIBLING"
    SPOUSE = "SPOUSE"


SYMMETRIC_RELATIONS: frozenset[RelationType] = frozenset(
    {RelationType.SIBLING, RelationType.SPOUSE}
)
