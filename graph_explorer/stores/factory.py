"""
Store factory: picks the backing store at startup from settings.

Only the selected backend's driver is imported, so a deployment that
serves parquet files never needs asyncpg or neo4j installed.
"""

import logging

from graph_explorer.shared.config import BaseExplorerSettings
from graph_explorer.shared.exceptions import ConfigurationError
from graph_explorer.stores.base import GraphStore

logger = logging.getLogger("graph_explorer.stores.factory")

BACKENDS = ("parquet", "postgres", "neo4j")


def create_store(settings: BaseExplorerSettings) -> GraphStore:
    """Build (but do not connect) the store named by ``settings.store_backend``.

    Raises:
        ConfigurationError: Unknown backend or missing connection settings.
    """
    backend = settings.store_backend.strip().lower()
    logger.info("Creating %s graph store", backend)

    if backend == "parquet":
        from graph_explorer.stores.parquet_store import ParquetGraphStore

        return ParquetGraphStore(
            settings.data_dir,
            timeout_seconds=settings.store_timeout_seconds,
        )

    if backend == "postgres":
        from graph_explorer.stores.postgres_store import PostgresGraphStore

        return PostgresGraphStore(
            settings.postgres_dsn,
            timeout_seconds=settings.store_timeout_seconds,
            min_pool_size=settings.postgres_min_pool_size,
            max_pool_size=settings.postgres_max_pool_size,
        )

    if backend == "neo4j":
        from graph_explorer.shared.database import Neo4jHandler
        from graph_explorer.stores.neo4j_store import Neo4jGraphStore

        try:
            handler = Neo4jHandler(
                uri=settings.neo4j_uri or None,
                username=settings.neo4j_username or None,
                password=settings.neo4j_password or None,
                database=settings.neo4j_database or None,
            )
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        return Neo4jGraphStore(handler, timeout_seconds=settings.store_timeout_seconds)

    raise ConfigurationError(
        f"Unknown store backend {settings.store_backend!r}. Valid: {list(BACKENDS)}"
    )
