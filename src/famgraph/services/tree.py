"""TreeService — one-shot graph, layout and save operations for the CLI.

Each call opens the local cache (and the remote client when a base URL
is configured), runs a single :class:`GraphViewController` session and
returns a ServiceResult. People come from a JSON file or, with
``remote=True``, from the family API.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from famgraph.domain.graph import GraphEdge, GraphNode
from famgraph.domain.people import Person, parse_persons, person_ids
from famgraph.infrastructure.layout_cache import LocalLayoutCache
from famgraph.infrastructure.remote import ApiError, FamilyApiClient
from famgraph.services.builder import build_graph
from famgraph.services.controller import GraphViewController, ViewSnapshot
from famgraph.services.indexer import index_relations
from famgraph.services.layout import LayeredLayoutEngine
from famgraph.services.positions import PositionStore
from famgraph.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from famgraph.config.settings import FamgraphSettings

logger = logging.getLogger(__name__)


class PersonSourceError(Exception):
    """People could not be read from the requested source."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


@dataclass(frozen=True)
class PersonSource:
    """Where to read people from: a JSON file, or the remote API."""

    path: Path | None = None
    remote: bool = False


def load_persons(path: Path) -> list[Person]:
    """Read people from a JSON file holding a list (or ``{"persons": [...]}``)."""
    try:
        raw: Any = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise PersonSourceError("INVALID_INPUT", f"Cannot read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise PersonSourceError("INVALID_INPUT", f"{path} is not valid JSON: {exc}") from exc
    if isinstance(raw, dict) and "persons" in raw:
        raw = raw["persons"]
    try:
        return parse_persons(raw)
    except ValidationError as exc:
        msg = f"{path} does not contain a person list: {exc.error_count()} error(s)"
        raise PersonSourceError("INVALID_INPUT", msg) from exc


@dataclass
class _Session:
    store: PositionStore
    client: FamilyApiClient | None


class TreeService:
    """Runs the graph engine against configured storage."""

    def __init__(
        self,
        settings: FamgraphSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def graph(self, source: PersonSource, *, family_id: int | None = None) -> ServiceResult:
        """Nodes and edges only, without positions."""
        return asyncio.run(self._graph(source, family_id))

    def layout(
        self,
        source: PersonSource,
        *,
        family_id: int | None = None,
        use_stored: bool = True,
    ) -> ServiceResult:
        """Computed layout merged with any saved positions."""
        return asyncio.run(self._layout(source, family_id, use_stored))

    def save(
        self,
        source: PersonSource,
        *,
        family_id: int | None = None,
        moves: Sequence[tuple[str, float, float]] = (),
    ) -> ServiceResult:
        """Rebuild, apply *moves* as drags, then save the arrangement."""
        return asyncio.run(self._save(source, family_id, moves))

    def clear(self, source: PersonSource, *, family_id: int | None = None) -> ServiceResult:
        """Forget the locally cached layout for the family or person set."""
        return asyncio.run(self._clear(source, family_id))

    # ------------------------------------------------------------------
    # Async bodies
    # ------------------------------------------------------------------

    async def _graph(self, source: PersonSource, family_id: int | None) -> ServiceResult:
        op = "graph"
        async with self._client() as client:
            try:
                persons = await self._read_persons(source, family_id, client)
            except PersonSourceError as exc:
                return _failure(op, exc)
        graph = build_graph(persons, index_relations(persons))
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "node_count": len(graph.nodes),
                "edge_count": len(graph.edges),
                "nodes": [_node_row(n, with_position=False) for n in graph.nodes],
                "edges": [_edge_row(e) for e in graph.edges],
            },
        )

    async def _layout(
        self,
        source: PersonSource,
        family_id: int | None,
        use_stored: bool,
    ) -> ServiceResult:
        op = "layout"
        async with self._session() as session:
            try:
                persons = await self._read_persons(source, family_id, session.client)
            except PersonSourceError as exc:
                return _failure(op, exc)
            controller = self._controller(session, family_id)
            snapshot = await controller.rebuild(persons, use_stored=use_stored)
        if snapshot is None:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(code="SUPERSEDED", message="Layout was rebuilt while loading"),
            )
        return ServiceResult(ok=True, op=op, data=_snapshot_data(snapshot))

    async def _save(
        self,
        source: PersonSource,
        family_id: int | None,
        moves: Sequence[tuple[str, float, float]],
    ) -> ServiceResult:
        op = "save_layout"
        warnings: list[str] = []
        async with self._session() as session:
            try:
                persons = await self._read_persons(source, family_id, session.client)
            except PersonSourceError as exc:
                return _failure(op, exc)
            controller = self._controller(session, family_id)
            await controller.rebuild(persons)
            for node_id, x, y in moves:
                if not controller.move_node(node_id, x, y):
                    warnings.append(f"Unknown node '{node_id}' not moved")
            result = await controller.save_current_layout()
        if warnings:
            result = result.model_copy(update={"warnings": [*result.warnings, *warnings]})
        return result

    async def _clear(self, source: PersonSource, family_id: int | None) -> ServiceResult:
        op = "clear_layout"
        async with self._session() as session:
            ids: list[str] = []
            if family_id is None:
                try:
                    ids = person_ids(await self._read_persons(source, family_id, session.client))
                except PersonSourceError as exc:
                    return _failure(op, exc)
            key = session.store.layout_key(family_id, ids)
            removed = session.store.clear_layout(family_id, ids)
        return ServiceResult(ok=True, op=op, data={"layout_key": key, "removed": removed})

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[FamilyApiClient | None]:
        remote = self._settings.remote
        if not remote.base_url:
            yield None
            return
        client = FamilyApiClient(
            remote.base_url,
            token=remote.token,
            timeout=remote.timeout,
            transport=self._transport,
        )
        try:
            yield client
        finally:
            await client.aclose()

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[_Session]:
        cache = LocalLayoutCache.open(self._settings.cache_path)
        try:
            async with self._client() as client:
                yield _Session(store=PositionStore(cache, client), client=client)
        finally:
            cache.close()

    def _controller(self, session: _Session, family_id: int | None) -> GraphViewController:
        return GraphViewController(
            session.store,
            family_id=family_id,
            layout_engine=LayeredLayoutEngine(self._settings.layout),
        )

    async def _read_persons(
        self,
        source: PersonSource,
        family_id: int | None,
        client: FamilyApiClient | None,
    ) -> list[Person]:
        if source.remote:
            if client is None:
                raise PersonSourceError("NO_REMOTE", "No [remote] base_url configured")
            try:
                if family_id is not None:
                    raw = await client.get_persons_by_family(family_id)
                else:
                    raw = await client.get_persons()
                return parse_persons(raw)
            except (httpx.HTTPError, ApiError) as exc:
                raise PersonSourceError("REMOTE_ERROR", f"Could not fetch people: {exc}") from exc
            except ValidationError as exc:
                raise PersonSourceError("INVALID_INPUT", f"Malformed person list: {exc}") from exc
        if source.path is None:
            raise PersonSourceError("NO_SOURCE", "Give a persons file or use --remote")
        return load_persons(source.path)


def _failure(op: str, exc: PersonSourceError) -> ServiceResult:
    return ServiceResult(ok=False, op=op, error=ServiceError(code=exc.code, message=str(exc)))


def _node_row(node: GraphNode, *, with_position: bool = True) -> dict[str, Any]:
    row: dict[str, Any] = {"id": node.id, "label": node.label, "gender": node.gender.value}
    if with_position:
        row["x"] = node.position.x
        row["y"] = node.position.y
    return row


def _edge_row(edge: GraphEdge) -> dict[str, Any]:
    return {"id": edge.id, "source": edge.source, "target": edge.target, "type": edge.type.value}


def _snapshot_data(snapshot: ViewSnapshot) -> dict[str, Any]:
    return {
        "layout_key": snapshot.layout_key,
        "family_id": snapshot.family_id,
        "stored_layout_applied": snapshot.stored_layout_applied,
        "node_count": len(snapshot.nodes),
        "edge_count": len(snapshot.edges),
        "nodes": [_node_row(n) for n in snapshot.nodes],
        "edges": [_edge_row(e) for e in snapshot.edges],
    }
