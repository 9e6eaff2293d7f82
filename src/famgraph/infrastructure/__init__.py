"""Infrastructure layer — local SQLite cache, remote API client, graph engine.

This layer depends on stdlib and third-party libs (SQLAlchemy, httpx,
NetworkX). It must never import from services, commands, or output.
"""
