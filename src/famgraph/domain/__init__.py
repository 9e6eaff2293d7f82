"""Domain layer — people, relations, graph and layout value types.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
