"""
Neo4j Graph Store: Cypher read queries through the shared Neo4jHandler.

Graph model::

    (:KnowledgeGraph {id, name, description, category, shortDescription, order})
    (:Node {graphId, id, name, type, properties})
    (:Node)-[:EDGE {graphId, type, properties}]->(:Node)

Edge types are a relationship *property* so they can be parameterised;
relationship types cannot be.
"""

import logging
from typing import Any

from neo4j.exceptions import DriverError, Neo4jError

from graph_explorer.shared.database import Neo4jHandler
from graph_explorer.shared.models import Edge, KnowledgeGraphMeta, Node
from graph_explorer.stores.base import GraphStore

logger = logging.getLogger("graph_explorer.stores.neo4j")

_NODE_PROJECTION = (
    "n.graphId AS graphId, n.id AS id, n.name AS name, "
    "n.type AS type, n.properties AS properties"
)


class Neo4jGraphStore(GraphStore):
    """Graph-database store backed by an async Neo4j driver."""

    backend = "neo4j"
    driver_errors = (Neo4jError, DriverError, OSError)

    def __init__(self, handler: Neo4jHandler, timeout_seconds: float = 30.0):
        super().__init__(timeout_seconds)
        self._handler = handler

    async def connect(self) -> "Neo4jGraphStore":
        await self._guard("connect", self._handler.connect())
        return self

    async def close(self) -> None:
        await self._handler.close()

    async def _query(self, cypher: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        logger.debug("cypher: %s | %s", " ".join(cypher.split()), params)
        return await self._handler.run(cypher, params)

    # ─── Backend hooks ──────────────────────────────────────

    async def _list_graphs(self) -> list[KnowledgeGraphMeta]:
        rows = await self._query(
            "MATCH (g:KnowledgeGraph) "
            "RETURN g.id AS id, g.name AS name, g.description AS description, "
            "       g.category AS category, g.shortDescription AS shortDescription, "
            "       g.order AS `order` "
            "ORDER BY g.id",
            {},
        )
        return [
            KnowledgeGraphMeta(
                id=row["id"],
                name=row["name"],
                description=row.get("description") or "",
                category=row.get("category"),
                short_description=row.get("shortDescription"),
                order=row.get("order"),
            )
            for row in rows
        ]

    async def _find_nodes_by_name(
        self, graph_ids: list[int], text: str, limit: int
    ) -> list[Node]:
        rows = await self._query(
            "MATCH (n:Node) "
            "WHERE n.graphId IN $graph_ids "
            "  AND n.name IS NOT NULL "
            "  AND toLower(n.name) CONTAINS toLower($text) "
            f"RETURN {_NODE_PROJECTION} "
            "LIMIT $lim",
            {"graph_ids": graph_ids, "text": text, "lim": limit},
        )
        return [_node(row) for row in rows]

    async def _get_nodes_by_ids(self, graph_ids: list[int], ids: list[str]) -> list[Node]:
        rows = await self._query(
            "MATCH (n:Node) "
            "WHERE n.graphId IN $graph_ids AND n.id IN $ids "
            f"RETURN {_NODE_PROJECTION}",
            {"graph_ids": graph_ids, "ids": ids},
        )
        return [_node(row) for row in rows]

    async def _get_neighbor_ids(
        self, graph_ids: list[int], node_id: str, edge_type: str | None
    ) -> list[str]:
        rows = await self._query(
            "MATCH (a:Node)-[r:EDGE]->(b:Node) "
            "WHERE r.graphId IN $graph_ids "
            "  AND (a.id = $node_id OR b.id = $node_id) "
            "  AND ($edge_type IS NULL OR r.type = $edge_type) "
            "RETURN CASE WHEN a.id = $node_id THEN b.id ELSE a.id END AS neighbor",
            {"graph_ids": graph_ids, "node_id": node_id, "edge_type": edge_type},
        )
        return [row["neighbor"] for row in rows]

    async def _get_edges_between(
        self, graph_ids: list[int], id1: str, id2: str
    ) -> list[Edge]:
        rows = await self._query(
            "MATCH (a:Node)-[r:EDGE]->(b:Node) "
            "WHERE r.graphId IN $graph_ids "
            "  AND ((a.id = $id1 AND b.id = $id2) OR (a.id = $id2 AND b.id = $id1)) "
            "RETURN r.graphId AS graphId, a.id AS `from`, b.id AS `to`, "
            "       r.type AS type, r.properties AS properties",
            {"graph_ids": graph_ids, "id1": id1, "id2": id2},
        )
        return [_edge(row) for row in rows]


def _node(row: dict[str, Any]) -> Node:
    return Node(
        graph_id=row["graphId"],
        id=row["id"],
        name=row.get("name"),
        type=row.get("type"),
        properties=row.get("properties"),
    )


def _edge(row: dict[str, Any]) -> Edge:
    return Edge(
        graph_id=row["graphId"],
        from_=row["from"],
        to=row["to"],
        type=row.get("type"),
        properties=row.get("properties"),
    )
