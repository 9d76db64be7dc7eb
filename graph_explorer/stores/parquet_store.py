"""
Parquet Graph Store: DuckDB SQL run directly against parquet files.

Layout of the data directory (one sub-directory per graph)::

    data/
      primekg/
        graph.json       {"id": 1, "name": "PrimeKG", "description": ...}
        nodes.parquet    id, name, type, properties
        edges.parquet    from, to, type, properties

Startup only reads the ``graph.json`` files.  Every primitive is a SQL
query over ``read_parquet`` (a ``UNION ALL`` across graphs, with the graph
id injected as ``knowledgeGraphId``); nothing is loaded into memory.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import duckdb

from graph_explorer.shared.exceptions import ConfigurationError, UnknownGraphError
from graph_explorer.shared.models import Edge, KnowledgeGraphMeta, Node
from graph_explorer.stores.base import GraphStore

logger = logging.getLogger("graph_explorer.stores.parquet")

GRAPH_META_FILE = "graph.json"
NODES_FILE = "nodes.parquet"
EDGES_FILE = "edges.parquet"


@dataclass(frozen=True)
class GraphFiles:
    """Parquet file paths for a single graph."""

    graph_id: int
    nodes_path: Path
    edges_path: Path


def _sql_literal(value: str) -> str:
    """Quote a string for a SQL single-quoted literal."""
    return "'" + value.replace("'", "''") + "'"


def discover_graphs(data_dir: Path) -> tuple[list[KnowledgeGraphMeta], dict[int, GraphFiles]]:
    """Scan ``data_dir`` for graph directories.

    Directories missing any of the three files are skipped.
    """
    metas: list[KnowledgeGraphMeta] = []
    files: dict[int, GraphFiles] = {}

    for entry in sorted(data_dir.iterdir()):
        if not entry.is_dir():
            continue
        meta_path = entry / GRAPH_META_FILE
        nodes_path = entry / NODES_FILE
        edges_path = entry / EDGES_FILE
        if not (meta_path.exists() and nodes_path.exists() and edges_path.exists()):
            logger.warning("Skipping %s: missing graph.json or parquet files", entry)
            continue

        raw = json.loads(meta_path.read_text(encoding="utf-8"))
        meta = KnowledgeGraphMeta.model_validate(raw)
        if meta.id in files:
            raise ConfigurationError(
                f"Duplicate graph id={meta.id} in {entry} and "
                f"{files[meta.id].nodes_path.parent}"
            )
        metas.append(meta)
        files[meta.id] = GraphFiles(meta.id, nodes_path.resolve(), edges_path.resolve())

    return metas, files


class ParquetGraphStore(GraphStore):
    """File-columnar store backed by an in-process DuckDB database."""

    backend = "parquet"
    driver_errors = (duckdb.Error, OSError)

    def __init__(self, data_dir: str | Path, timeout_seconds: float = 30.0):
        super().__init__(timeout_seconds)
        self._data_dir = Path(data_dir)
        self._metas: list[KnowledgeGraphMeta] = []
        self._files: dict[int, GraphFiles] = {}
        self._conn: duckdb.DuckDBPyConnection | None = None

    # ─── Lifecycle ──────────────────────────────────────────

    async def connect(self) -> "ParquetGraphStore":
        if self._conn is not None:
            return self
        if not self._data_dir.is_dir():
            raise ConfigurationError(f"Data directory not found: {self._data_dir}")

        self._metas, self._files = discover_graphs(self._data_dir)
        self._conn = duckdb.connect(":memory:")
        logger.info(
            "Parquet store ready: %d graph(s) in %s: %s",
            len(self._metas),
            self._data_dir,
            [f"{m.name} (id={m.id})" for m in self._metas],
        )
        return self

    async def close(self) -> None:
        if self._conn is not None:
            await asyncio.to_thread(self._conn.close)
            self._conn = None
            logger.info("Parquet store closed")

    # ─── Sources ────────────────────────────────────────────

    def _source(self, graph_ids: list[int], kind: str) -> str:
        """SQL relation for the nodes or edges of ``graph_ids``."""
        parts = []
        for graph_id in graph_ids:
            graph_files = self._files.get(graph_id)
            if graph_files is None:
                raise UnknownGraphError(graph_id)
            path = graph_files.nodes_path if kind == "nodes" else graph_files.edges_path
            parts.append(
                f'SELECT {int(graph_id)} AS "knowledgeGraphId", * '
                f"FROM read_parquet({_sql_literal(str(path))})"
            )
        return "(" + " UNION ALL ".join(parts) + ")"

    async def _fetch(self, sql: str, params: list[Any]) -> list[dict[str, Any]]:
        if self._conn is None:
            raise RuntimeError("ParquetGraphStore is not connected — call connect() first")
        conn = self._conn

        def _execute() -> list[dict[str, Any]]:
            cursor = conn.cursor()
            try:
                cursor.execute(sql, params)
                cols = [desc[0] for desc in cursor.description] if cursor.description else []
                return [dict(zip(cols, row)) for row in cursor.fetchall()]
            finally:
                cursor.close()

        logger.debug("duckdb: %s | %s", " ".join(sql.split()), params)
        return await asyncio.to_thread(_execute)

    # ─── Backend hooks ──────────────────────────────────────

    async def _list_graphs(self) -> list[KnowledgeGraphMeta]:
        return list(self._metas)

    async def _find_nodes_by_name(
        self, graph_ids: list[int], text: str, limit: int
    ) -> list[Node]:
        sql = f"""
            SELECT n."knowledgeGraphId", n.id, n.name, n.type, n.properties
            FROM {self._source(graph_ids, "nodes")} AS n
            WHERE n.name IS NOT NULL AND contains(lower(n.name), lower(?))
            LIMIT {int(limit)}
        """
        rows = await self._fetch(sql, [text])
        return [_node(row) for row in rows]

    async def _get_nodes_by_ids(self, graph_ids: list[int], ids: list[str]) -> list[Node]:
        sql = f"""
            SELECT n."knowledgeGraphId", n.id, n.name, n.type, n.properties
            FROM {self._source(graph_ids, "nodes")} AS n
            WHERE list_contains(?::VARCHAR[], CAST(n.id AS VARCHAR))
        """
        rows = await self._fetch(sql, [ids])
        return [_node(row) for row in rows]

    async def _get_neighbor_ids(
        self, graph_ids: list[int], node_id: str, edge_type: str | None
    ) -> list[str]:
        type_filter = "AND e.type = ?" if edge_type else ""
        params: list[Any] = [node_id, node_id, node_id]
        if edge_type:
            params.append(edge_type)
        sql = f"""
            SELECT CASE WHEN CAST(e."from" AS VARCHAR) = ?
                        THEN CAST(e."to" AS VARCHAR)
                        ELSE CAST(e."from" AS VARCHAR) END AS neighbor
            FROM {self._source(graph_ids, "edges")} AS e
            WHERE (CAST(e."from" AS VARCHAR) = ? OR CAST(e."to" AS VARCHAR) = ?)
            {type_filter}
        """
        rows = await self._fetch(sql, params)
        return [str(row["neighbor"]) for row in rows]

    async def _get_edges_between(
        self, graph_ids: list[int], id1: str, id2: str
    ) -> list[Edge]:
        sql = f"""
            SELECT e."knowledgeGraphId", e."from", e."to", e.type, e.properties
            FROM {self._source(graph_ids, "edges")} AS e
            WHERE (CAST(e."from" AS VARCHAR) = ? AND CAST(e."to" AS VARCHAR) = ?)
               OR (CAST(e."from" AS VARCHAR) = ? AND CAST(e."to" AS VARCHAR) = ?)
        """
        rows = await self._fetch(sql, [id1, id2, id2, id1])
        return [_edge(row) for row in rows]


def _node(row: dict[str, Any]) -> Node:
    return Node(
        graph_id=row["knowledgeGraphId"],
        id=str(row["id"]),
        name=row.get("name"),
        type=row.get("type"),
        properties=row.get("properties"),
    )


def _edge(row: dict[str, Any]) -> Edge:
    return Edge(
        graph_id=row["knowledgeGraphId"],
        from_=str(row["from"]),
        to=str(row["to"]),
        type=row.get("type"),
        properties=row.get("properties"),
    )
