"""SQLite engine for the local layout cache (SQLAlchemy Core, one row per layout key)."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from famgraph.infrastructure.database.schema import metadata


def create_db_engine(db_path: Path) -> Engine:
    """Engine for *db_path* with WAL journaling and a short busy timeout."""
    engine = create_engine(f"sqlite:///{db_path}")

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_conn: Any, _record: Any) -> None:
        cursor = dbapi_conn.cursor()
        try:
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA busy_timeout=2000")
        finally:
            cursor.close()

    return engine


def init_database(db_path: Path) -> Engine:
    """Open the cache at *db_path*, creating the file, its directory and tables as needed."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_db_engine(db_path)
    metadata.create_all(engine)
    return engine
