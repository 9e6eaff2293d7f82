"""SQLAlchemy Core table definitions for the local layout cache."""

from __future__ import annotations

from sqlalchemy import Column, MetaData, Table, Text

metadata = MetaData()

layout_cache = Table(
    "layout_cache",
    metadata,
    Column("key", Text, primary_key=True),  # layout key
    Column("positions", Text, nullable=False),  # JSON [{nodeId, x, y}, ...]
    Column("updated", Text, nullable=False),
)
