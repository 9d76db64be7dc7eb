"""graph-explorer: traversal and retrieval tools over labeled property graphs."""

__version__ = "0.1.0"
