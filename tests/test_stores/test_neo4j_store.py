"""Tests for the Neo4j store with a mocked Neo4jHandler."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from neo4j.exceptions import ServiceUnavailable

from graph_explorer.shared.exceptions import StoreUnavailableError, UnknownGraphError
from graph_explorer.stores.neo4j_store import Neo4jGraphStore

CATALOG = [
    {"id": 1, "name": "PrimeKG", "description": "kg", "category": "bio",
     "shortDescription": "prime", "order": 1},
]


def make_handler(rows=None, error=None):
    handler = MagicMock()
    handler.connect = AsyncMock(return_value=handler)
    handler.close = AsyncMock()

    async def run(cypher, params=None):
        if "MATCH (g:KnowledgeGraph)" in cypher:
            return CATALOG
        if error is not None:
            raise error
        return rows or []

    handler.run = AsyncMock(side_effect=run)
    return handler


def data_calls(handler):
    return [c for c in handler.run.call_args_list if "KnowledgeGraph" not in c.args[0]]


class TestNeo4jGraphStore:
    async def test_connect_and_close_delegate_to_handler(self):
        handler = make_handler()
        async with Neo4jGraphStore(handler) as store:
            assert store.backend == "neo4j"
        handler.connect.assert_awaited_once()
        handler.close.assert_awaited_once()

    async def test_list_graphs(self):
        graphs = await Neo4jGraphStore(make_handler()).list_graphs()
        assert graphs[0].short_description == "prime"
        assert graphs[0].order == 1

    async def test_find_nodes_by_name(self):
        handler = make_handler(
            [{"graphId": 1, "id": "A", "name": "Metformin", "type": "drug", "properties": None}]
        )
        nodes = await Neo4jGraphStore(handler).find_nodes_by_name([1], "metf", 4)
        assert [(n.id, n.name) for n in nodes] == [("A", "Metformin")]
        cypher, params = data_calls(handler)[0].args
        assert "toLower(n.name) CONTAINS toLower($text)" in cypher
        assert params == {"graph_ids": [1], "text": "metf", "lim": 4}

    async def test_neighbor_ids(self):
        handler = make_handler([{"neighbor": "B"}, {"neighbor": "B"}, {"neighbor": "C"}])
        store = Neo4jGraphStore(handler)
        assert await store.get_neighbor_ids([1], "A", "") == ["B", "C"]
        _, params = data_calls(handler)[0].args
        assert params == {"graph_ids": [1], "node_id": "A", "edge_type": None}

    async def test_edges_between(self):
        handler = make_handler(
            [{"graphId": 1, "from": "A", "to": "B", "type": "treats", "properties": None}]
        )
        edges = await Neo4jGraphStore(handler).get_edges_between([1], "B", "A")
        assert [(e.from_, e.to, e.type) for e in edges] == [("A", "B", "treats")]
        _, params = data_calls(handler)[0].args
        assert params == {"graph_ids": [1], "id1": "B", "id2": "A"}

    async def test_get_nodes_by_ids(self):
        handler = make_handler([])
        await Neo4jGraphStore(handler).get_nodes_by_ids([1], ["A", "A", "B"])
        _, params = data_calls(handler)[0].args
        assert params == {"graph_ids": [1], "ids": ["A", "B"]}

    async def test_unknown_graph(self):
        with pytest.raises(UnknownGraphError):
            await Neo4jGraphStore(make_handler()).get_neighbor_ids([5], "A")

    async def test_driver_error_is_store_unavailable(self):
        handler = make_handler(error=ServiceUnavailable("database down"))
        with pytest.raises(StoreUnavailableError, match="database down"):
            await Neo4jGraphStore(handler).get_neighbor_ids([1], "A")
