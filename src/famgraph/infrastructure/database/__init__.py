"""SQLite engine and schema for the local layout cache via SQLAlchemy Core."""

from famgraph.infrastructure.database.engine import create_db_engine, init_database
from famgraph.infrastructure.database.schema import layout_cache, metadata

__all__ = [
    "create_db_engine",
    "init_database",
    "layout_cache",
    "metadata",
]
