"""LocalLayoutCache — persistent key -> serialized position list.

The value stored under a layout key is the JSON text of the position
list, exactly as handed in. Parsing (and deciding what a malformed value
means) is left to the caller.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.engine import Engine

from famgraph.infrastructure.database.engine import init_database
from famgraph.infrastructure.database.schema import layout_cache

logger = logging.getLogger(__name__)


class LocalLayoutCache:
    """Read, write and delete serialized layouts by layout key."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @classmethod
    def open(cls, db_path: Path) -> LocalLayoutCache:
        """Open (creating if needed) the cache database at *db_path*."""
        return cls(init_database(db_path))

    @property
    def engine(self) -> Engine:
        return self._engine

    def read(self, key: str) -> str | None:
        """Return the stored value for *key*, or None."""
        with self._engine.connect() as conn:
            return conn.execute(
                select(layout_cache.c.positions).where(layout_cache.c.key == key)
            ).scalar_one_or_none()

    def write(self, key: str, value: str) -> None:
        """Insert or replace the value stored under *key*."""
        stmt = insert(layout_cache).values(
            key=key, positions=value, updated=datetime.now(UTC).isoformat()
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[layout_cache.c.key],
            set_={"positions": stmt.excluded.positions, "updated": stmt.excluded.updated},
        )
        with self._engine.begin() as conn:
            conn.execute(stmt)
        logger.debug("Cached layout under %s", key)

    def delete(self, key: str) -> bool:
        """Remove *key*. Returns whether a row was deleted."""
        with self._engine.begin() as conn:
            result = conn.execute(delete(layout_cache).where(layout_cache.c.key == key))
        return result.rowcount > 0

    def keys(self) -> list[str]:
        """All cached layout keys, sorted."""
        with self._engine.connect() as conn:
            rows = conn.execute(select(layout_cache.c.key).order_by(layout_cache.c.key))
            return [row.key for row in rows]

    def close(self) -> None:
        self._engine.dispose()
