"""Service layer — graph construction, layout and layout persistence.

Services may import from domain and infrastructure layers.
They must never import from commands or output.
"""
