"""famgraph — family relationship graph construction and layout persistence."""

__version__ = "0.1.0"
