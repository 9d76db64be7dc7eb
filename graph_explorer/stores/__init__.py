"""
Store adapters: the four read primitives over parquet, PostgreSQL or Neo4j.
"""

from graph_explorer.stores.base import GraphStore
from graph_explorer.stores.factory import create_store

__all__ = ["GraphStore", "create_store"]
