"""PositionStore — two-tier storage for saved node positions.

Tiers:
- **Remote** (authoritative): the family's layout document on the API.
- **Local** (fallback): the SQLite layout cache, keyed by layout key.

Reads go remote-first when a family id is known and refresh the local
copy on success (read-through). Any remote failure, a missing document
or a malformed one falls back to the local copy. Saves write remote
first, then refresh the local copy (write-through); without a family id
or a remote client a save is local-only.

INVARIANT: load failures are logged and never raised; save failures are
always raised as :class:`LayoutSaveError`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

import httpx
from sqlalchemy.exc import SQLAlchemyError

from famgraph.domain.layouts import (
    Layout,
    PositionRecord,
    dump_positions,
    layout_key,
    load_layout_document,
    load_positions,
)
from famgraph.infrastructure.layout_cache import LocalLayoutCache
from famgraph.infrastructure.remote import ApiError, FamilyApiClient

logger = logging.getLogger(__name__)

_REMOTE_ERRORS = (httpx.HTTPError, ApiError)


class LayoutSaveError(Exception):
    """A layout could not be persisted. The caller may retry."""

    def __init__(self, message: str, *, layout_key: str, family_id: int | None = None) -> None:
        super().__init__(message)
        self.layout_key = layout_key
        self.family_id = family_id


class PositionStore:
    """Load and save Layouts through the remote and local tiers."""

    def __init__(self, cache: LocalLayoutCache, remote: FamilyApiClient | None = None) -> None:
        self._cache = cache
        self._remote = remote

    @staticmethod
    def layout_key(family_id: int | None, person_ids: Iterable[str]) -> str:
        """See :func:`famgraph.domain.layouts.layout_key`."""
        return layout_key(family_id, person_ids)

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    async def load_layout(
        self,
        family_id: int | None,
        person_ids: Iterable[str] = (),
    ) -> Layout | None:
        """Return the saved layout that applies, or None if there is none."""
        key = layout_key(family_id, person_ids)
        if family_id is not None and self._remote is not None:
            remote = await self._load_remote(family_id)
            if remote is not None:
                self._refresh_local(key, remote.positions)
                return remote
        return self._load_local(key, family_id)

    async def _load_remote(self, family_id: int) -> Layout | None:
        assert self._remote is not None
        try:
            record = await self._remote.get_tree_layout(family_id)
        except _REMOTE_ERRORS as exc:
            logger.warning("Remote layout load failed for family %s: %s", family_id, exc)
            return None
        if record is None:
            logger.debug("No remote layout for family %s", family_id)
            return None
        positions = _parse_record(record)
        if positions is None:
            logger.warning("Malformed remote layout for family %s; ignoring it", family_id)
            return None
        return Layout(family_id=family_id, positions=positions)

    def _load_local(self, key: str, family_id: int | None) -> Layout | None:
        try:
            raw = self._cache.read(key)
        except SQLAlchemyError as exc:
            logger.warning("Local layout cache read failed for %s: %s", key, exc)
            return None
        if raw is None:
            return None
        try:
            positions = load_positions(raw)
        except ValueError:
            logger.warning("Malformed cached layout under %s; ignoring it", key)
            return None
        return Layout(family_id=family_id, positions=positions)

    def _refresh_local(self, key: str, positions: Sequence[PositionRecord]) -> None:
        try:
            self._cache.write(key, dump_positions(positions))
        except SQLAlchemyError as exc:
            logger.warning("Local layout cache refresh failed for %s: %s", key, exc)

    # ------------------------------------------------------------------
    # Save / clear
    # ------------------------------------------------------------------

    async def save_layout(
        self,
        family_id: int | None,
        positions: Sequence[PositionRecord],
        person_ids: Iterable[str] = (),
    ) -> Layout:
        """Persist the full position list. Raises LayoutSaveError on failure."""
        key = layout_key(family_id, person_ids)
        if family_id is not None and self._remote is not None:
            payload = [p.model_dump(by_alias=True) for p in positions]
            try:
                record = await self._remote.save_tree_layout(family_id, payload)
            except _REMOTE_ERRORS as exc:
                msg = f"Could not save layout for family {family_id}: {exc}"
                raise LayoutSaveError(msg, layout_key=key, family_id=family_id) from exc
            stored = _parse_record(record)
            if stored is None:
                logger.warning("Save for family %s returned an unreadable record", family_id)
                stored = list(positions)
            self._refresh_local(key, stored)
            return Layout(family_id=family_id, positions=stored)

        try:
            self._cache.write(key, dump_positions(positions))
        except SQLAlchemyError as exc:
            msg = f"Could not write layout cache entry {key}: {exc}"
            raise LayoutSaveError(msg, layout_key=key, family_id=family_id) from exc
        return Layout(family_id=family_id, positions=list(positions))

    def clear_layout(self, family_id: int | None, person_ids: Iterable[str] = ()) -> bool:
        """Forget the locally cached layout. Returns whether one existed."""
        key = layout_key(family_id, person_ids)
        removed = self._cache.delete(key)
        logger.debug("Cleared cached layout %s (existed=%s)", key, removed)
        return removed


def _parse_record(record: dict[str, Any]) -> list[PositionRecord] | None:
    """Positions from a stored ``{"layout": "<json>"}`` record, or None if unreadable."""
    raw = record.get("layout")
    if not isinstance(raw, str):
        return None
    try:
        return load_layout_document(raw)
    except ValueError:
        return None
