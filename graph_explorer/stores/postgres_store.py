"""
PostgreSQL Graph Store: asyncpg pool over the relational schema.

Expected tables::

    knowledge_graph (id bigint PK, name text, description text)
    node  ("knowledgeGraphId" bigint, id text, name text, type varchar, properties text)
    edge  ("knowledgeGraphId" bigint, "from" text, "to" text, type varchar, properties text)

All queries are parameterised; graph ids are passed as a ``bigint[]``.
"""

import logging
from typing import Any

import asyncpg

from graph_explorer.shared.exceptions import ConfigurationError
from graph_explorer.shared.models import Edge, KnowledgeGraphMeta, Node
from graph_explorer.stores.base import GraphStore

logger = logging.getLogger("graph_explorer.stores.postgres")

_NODE_COLUMNS = '"knowledgeGraphId", id, name, type, properties'
_EDGE_COLUMNS = '"knowledgeGraphId", "from", "to", type, properties'


class PostgresGraphStore(GraphStore):
    """Relational store backed by an asyncpg connection pool."""

    backend = "postgres"
    driver_errors = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)

    def __init__(
        self,
        dsn: str,
        timeout_seconds: float = 30.0,
        min_pool_size: int = 1,
        max_pool_size: int = 10,
    ):
        super().__init__(timeout_seconds)
        if not dsn:
            raise ConfigurationError("postgres_dsn is required for the postgres backend")
        self._dsn = dsn
        self._min_pool_size = min_pool_size
        self._max_pool_size = max_pool_size
        self._pool: asyncpg.Pool | None = None

    # ─── Lifecycle ──────────────────────────────────────────

    async def connect(self) -> "PostgresGraphStore":
        if self._pool is None:
            self._pool = await self._guard(
                "connect",
                asyncpg.create_pool(
                    dsn=self._dsn,
                    min_size=self._min_pool_size,
                    max_size=self._max_pool_size,
                ),
            )
            logger.info("Postgres pool ready (max_size=%d)", self._max_pool_size)
        return self

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("Postgres pool closed")

    async def _fetch(self, sql: str, *params: Any) -> list[asyncpg.Record]:
        if self._pool is None:
            raise RuntimeError("PostgresGraphStore is not connected — call connect() first")
        logger.debug("postgres: %s | %s", " ".join(sql.split()), params)
        async with self._pool.acquire() as con:
            return await con.fetch(sql, *params)

    # ─── Backend hooks ──────────────────────────────────────

    async def _list_graphs(self) -> list[KnowledgeGraphMeta]:
        rows = await self._fetch(
            "SELECT id, name, description FROM knowledge_graph ORDER BY id"
        )
        return [
            KnowledgeGraphMeta(
                id=row["id"], name=row["name"], description=row["description"] or ""
            )
            for row in rows
        ]

    async def _find_nodes_by_name(
        self, graph_ids: list[int], text: str, limit: int
    ) -> list[Node]:
        rows = await self._fetch(
            f"SELECT {_NODE_COLUMNS} FROM node "
            'WHERE "knowledgeGraphId" = ANY($1::bigint[]) '
            "  AND strpos(lower(name), lower($2)) > 0 "
            "LIMIT $3",
            graph_ids, text, limit,
        )
        return [_node(row) for row in rows]

    async def _get_nodes_by_ids(self, graph_ids: list[int], ids: list[str]) -> list[Node]:
        rows = await self._fetch(
            f"SELECT {_NODE_COLUMNS} FROM node "
            'WHERE "knowledgeGraphId" = ANY($1::bigint[]) '
            "  AND id = ANY($2::text[])",
            graph_ids, ids,
        )
        return [_node(row) for row in rows]

    async def _get_neighbor_ids(
        self, graph_ids: list[int], node_id: str, edge_type: str | None
    ) -> list[str]:
        rows = await self._fetch(
            'SELECT CASE WHEN "from" = $2 THEN "to" ELSE "from" END AS neighbor '
            "FROM edge "
            'WHERE "knowledgeGraphId" = ANY($1::bigint[]) '
            '  AND ("from" = $2 OR "to" = $2) '
            "  AND ($3::text IS NULL OR type = $3::text)",
            graph_ids, node_id, edge_type,
        )
        return [row["neighbor"] for row in rows]

    async def _get_edges_between(
        self, graph_ids: list[int], id1: str, id2: str
    ) -> list[Edge]:
        rows = await self._fetch(
            f"SELECT {_EDGE_COLUMNS} FROM edge "
            'WHERE "knowledgeGraphId" = ANY($1::bigint[]) '
            '  AND (("from" = $2 AND "to" = $3) OR ("from" = $3 AND "to" = $2))',
            graph_ids, id1, id2,
        )
        return [_edge(row) for row in rows]


def _node(row: asyncpg.Record) -> Node:
    return Node(
        graph_id=row["knowledgeGraphId"],
        id=row["id"],
        name=row["name"],
        type=row["type"],
        properties=row["properties"],
    )


def _edge(row: asyncpg.Record) -> Edge:
    return Edge(
        graph_id=row["knowledgeGraphId"],
        from_=row["from"],
        to=row["to"],
        type=row["type"],
        properties=row["properties"],
    )
