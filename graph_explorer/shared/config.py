"""
Base configuration for the graph explorer.

Uses Pydantic Settings for environment-based configuration.
The query service extends BaseExplorerSettings with its own prefix.
"""

from pydantic_settings import BaseSettings


class BaseExplorerSettings(BaseSettings):
    """Settings shared by every component that talks to a graph store."""

    service_name: str = "base"

    # Backing store: "parquet", "postgres" or "neo4j"
    store_backend: str = "parquet"

    # Parquet: one sub-directory per graph (graph.json, nodes.parquet, edges.parquet)
    data_dir: str = "data"

    # PostgreSQL
    postgres_dsn: str = ""
    postgres_min_pool_size: int = 1
    postgres_max_pool_size: int = 10

    # Neo4j connection
    neo4j_uri: str = ""
    neo4j_username: str = "neo4j"
    neo4j_password: str = ""
    neo4j_database: str = "neo4j"

    # Store call limits
    store_timeout_seconds: float = 30.0
    max_concurrency: int = 8

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
