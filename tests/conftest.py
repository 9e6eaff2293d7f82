"""Shared pytest fixtures and test helpers for famgraph tests."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import httpx
import pytest
from click.testing import CliRunner

from famgraph.domain.people import Person, parse_persons
from famgraph.infrastructure.layout_cache import LocalLayoutCache
from famgraph.infrastructure.remote import API_PREFIX, FamilyApiClient

BASE_URL = "http://family.test"


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def cache(tmp_path: Path) -> Iterator[LocalLayoutCache]:
    """Layout cache backed by a fresh SQLite file."""
    c = LocalLayoutCache.open(tmp_path / "cache" / "layouts.db")
    try:
        yield c
    finally:
        c.close()


@pytest.fixture
def _isolated_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run the CLI from an empty temp directory with no famgraph env vars.

    Use via ``@pytest.mark.usefixtures("_isolated_root")`` on command test
    classes. The local cache lands in ``tmp_path/.famgraph``.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("FAMGRAPH_CONFIG", raising=False)
    monkeypatch.delenv("FAMGRAPH_REMOTE__BASE_URL", raising=False)
    monkeypatch.delenv("FAMGRAPH_CACHE__PATH", raising=False)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def rel(other: int | None, relation_type: str | None) -> dict[str, Any]:
    """A relation record in the person API's wire shape."""
    return {"otherPersonId": other, "relationType": relation_type}


def person(
    pid: int | None,
    name: str | None = None,
    *relations: dict[str, Any],
    **extra: Any,
) -> dict[str, Any]:
    """A person object in the person API's wire shape."""
    return {"id": pid, "name": name, "relations": list(relations), **extra}


def family_payload() -> list[dict[str, Any]]:
    """Two parents, three children, one dangling reference.

    1 and 5 are spouses and both parents of 2; 1 is also parent of 3 and
    4. The children are siblings of each other. Person 6 claims to be the
    parent of 99, who is not in the list.
    """
    return [
        person(
            1,
            "Ada",
            rel(2, "PARENT"),
            rel(3, "PARENT"),
            rel(4, "PARENT"),
            rel(5, "SPOUSE"),
            gender="FEMALE",
        ),
        person(2, "Ben", rel(3, "SIBLING"), rel(4, "SIBLING"), gender="MALE"),
        person(3, "Cy", rel(2, "SIBLING"), rel(4, "SIBLING")),
        person(4, "Di", rel(2, "SIBLING"), rel(3, "SIBLING"), gender="FEMALE"),
        person(5, "Ed", rel(1, "SPOUSE"), rel(2, "PARENT"), gender="MALE"),
        person(6, "Flo", rel(99, "PARENT")),
    ]


def family() -> list[Person]:
    return parse_persons(family_payload())


def write_persons(path: Path, payload: list[dict[str, Any]] | None = None) -> Path:
    """Write *payload* (default: :func:`family_payload`) as JSON to *path*."""
    path.write_text(json.dumps(payload if payload is not None else family_payload()))
    return path


class FakeFamilyApi:
    """In-memory family API served through ``httpx.MockTransport``.

    ``layouts`` maps family id to the stored layout string. Set ``down``
    to simulate a transport failure and ``fail_saves`` to answer layout
    writes with a 500.
    """

    def __init__(self, persons: list[dict[str, Any]] | None = None) -> None:
        self.persons = persons if persons is not None else family_payload()
        self.families: list[dict[str, Any]] = [{"id": 7, "name": "Lovelace"}]
        self.layouts: dict[int, str] = {}
        self.down = False
        self.fail_saves = False
        self.requests: list[httpx.Request] = []

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    def client(self, token: str | None = None) -> FamilyApiClient:
        return FamilyApiClient(BASE_URL, token=token, transport=self.transport)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.down:
            raise httpx.ConnectError("connection refused", request=request)

        path = request.url.path.removeprefix(API_PREFIX)
        parts = path.strip("/").split("/")
        if parts == ["persons"]:
            return httpx.Response(200, json=self.persons)
        if parts == ["families"]:
            return httpx.Response(200, json=self.families)
        if len(parts) == 3 and parts[0] == "families" and parts[2] == "persons":
            return httpx.Response(200, json=self.persons)
        if len(parts) == 3 and parts[0] == "families" and parts[2] == "layout":
            family_id = int(parts[1])
            if request.method == "POST":
                if self.fail_saves:
                    return httpx.Response(500, json={"message": "boom"})
                self.layouts[family_id] = request.content.decode()
                return httpx.Response(200, json=self._record(family_id))
            if family_id not in self.layouts:
                return httpx.Response(404, json={"message": "not found"})
            return httpx.Response(200, json=self._record(family_id))
        return httpx.Response(404, json={"message": f"no route {path}"})

    def _record(self, family_id: int) -> dict[str, Any]:
        return {"id": 1, "familyId": family_id, "layout": self.layouts[family_id]}


@pytest.fixture
def fake_api() -> FakeFamilyApi:
    return FakeFamilyApi()
