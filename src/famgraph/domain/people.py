"""Person and embedded relation records, as served by the person API.

The embedded ``relations`` list is a person-local, possibly redundant and
possibly stale view of the global relation set. Records are parsed
leniently: an unknown relation type or gender, or a non-integer related id,
becomes ``None`` instead of failing the whole person list, since the data
is externally owned.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, Field, TypeAdapter, field_validator, model_validator

from famgraph.domain.types import Gender, RelationType


class RelationRecord(BaseModel):
    """One relation held by a person: "I am <type> of <other_person_id>"."""

    model_config = {"frozen": True, "populate_by_name": True}

    other_person_id: int | None = Field(default=None, alias="otherPersonId")
    relation_type: RelationType | None = Field(default=None, alias="relationType")

    @model_validator(mode="before")
    @classmethod
    def _accept_nested_person(cls, data: Any) -> Any:
        # The person API nests the counterpart: {"person": {"id": 2}, "relationType": ...}
        if isinstance(data, dict) and "otherPersonId" not in data and "other_person_id" not in data:
            other = data.get("person")
            if isinstance(other, dict):
                return {**data, "otherPersonId": other.get("id")}
        return data

    @field_validator("other_person_id", mode="before")
    @classmethod
    def _non_integer_id_is_none(cls, value: Any) -> Any:
        if isinstance(value, bool):
            return None
        if value is None or isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value) if value.is_integer() else None
        try:
            return int(str(value).strip())
        except ValueError:
            return None

    @field_validator("relation_type", mode="before")
    @classmethod
    def _unknown_type_is_none(cls, value: Any) -> Any:
        if value is None or isinstance(value, RelationType):
            return value
        try:
            return RelationType(str(value).upper())
        except ValueError:
            return None


class Person(BaseModel):
    """A person with optional identity, display data and embedded relations."""

    model_config = {"frozen": True}

    id: int | None = None
    name: str | None = None
    gender: Gender | None = None
    relations: list[RelationRecord] | None = None

    @field_validator("gender", mode="before")
    @classmethod
    def _unknown_gender_is_none(cls, value: Any) -> Any:
        if value is None or isinstance(value, Gender):
            return value
        try:
            return Gender(str(value).upper())
        except ValueError:
            return None

    @property
    def node_id(self) -> str | None:
        """Stringified id used as the graph node identity, or None."""
        return None if self.id is None else str(self.id)


_PERSON_LIST = TypeAdapter(list[Person])


def parse_persons(raw: Any) -> list[Person]:
    """Validate a decoded JSON payload (a list of person objects)."""
    return _PERSON_LIST.validate_python(raw)


def person_ids(persons: Iterable[Person]) -> list[str]:
    """Stringified ids of every person that has one, in input order."""
    return [p.node_id for p in persons if p.node_id is not None]
