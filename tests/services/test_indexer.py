"""Tests for relation extraction and indexing."""

from __future__ import annotations

from famgraph.domain.people import parse_persons
from famgraph.domain.relations import DirectedRelation, UndirectedRelation
from famgraph.domain.types import RelationType
from famgraph.services.indexer import index_relations, iter_relations
from tests.conftest import family, person, rel


class TestIterRelations:
    def test_tags_records_in_input_order(self) -> None:
        persons = parse_persons(
            [person(1, "A", rel(2, "PARENT"), rel(3, "SPOUSE")), person(2, "B", rel(4, "SIBLING"))]
        )
        assert list(iter_relations(persons)) == [
            DirectedRelation(parent="1", child="2"),
            UndirectedRelation(kind=RelationType.SPOUSE, a="1", b="3"),
            UndirectedRelation(kind=RelationType.SIBLING, a="2", b="4"),
        ]

    def test_skips_unusable_records(self) -> None:
        persons = parse_persons(
            [
                person(None, "no id", rel(2, "PARENT")),
                person(
                    1,
                    "A",
                    rel(None, "PARENT"),
                    rel(2, None),
                    rel(3, "COUSIN"),
                    rel(1, "SPOUSE"),
                ),
            ]
        )
        assert list(iter_relations(persons)) == []

    def test_null_relations_list(self) -> None:
        persons = parse_persons([{"id": 1, "relations": None}])
        assert list(iter_relations(persons)) == []


class TestIndexRelations:
    def test_family_maps(self) -> None:
        index = index_relations(family())
        assert index.children_of == {"1": {"2", "3", "4"}, "5": {"2"}, "6": {"99"}}
        assert index.parents_of == {"2": {"1", "5"}, "3": {"1"}, "4": {"1"}, "99": {"6"}}
        assert index.spouses_of == {"1": {"5"}, "5": {"1"}}
        assert index.siblings_of["2"] == {"3", "4"}
        assert index.siblings_of["4"] == {"2", "3"}

    def test_parent_record_read_from_holder(self) -> None:
        # "1 is PARENT of 2": 1 is the parent, 2 the child.
        index = index_relations(parse_persons([person(1, "A", rel(2, "PARENT")), person(2, "B")]))
        assert index.children_of == {"1": {"2"}}
        assert index.parents_of == {"2": {"1"}}

    def test_one_sided_symmetric_record(self) -> None:
        index = index_relations(parse_persons([person(1, "A", rel(2, "SPOUSE")), person(2, "B")]))
        assert index.spouses_of == {"1": {"2"}, "2": {"1"}}

    def test_redundant_records_collapse(self) -> None:
        persons = parse_persons(
            [
                person(1, "A", rel(2, "SIBLING"), rel(2, "SIBLING")),
                person(2, "B", rel(1, "SIBLING")),
            ]
        )
        index = index_relations(persons)
        assert index.siblings_of == {"1": {"2"}, "2": {"1"}}

    def test_idempotent(self) -> None:
        assert index_relations(family()) == index_relations(family())

    def test_empty_input(self) -> None:
        index = index_relations([])
        assert index.children_of == {}
        assert index.siblings_of == {}
