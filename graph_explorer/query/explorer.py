"""
GraphExplorer: binds a store to the graph ids a caller may read.

Every operation reads through the store on each call; nothing is cached
between calls apart from the open connection itself.
"""

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

from graph_explorer.query.neighbors import neighbor_ids
from graph_explorer.query.paths import find_paths
from graph_explorer.query.surroundings import search_surroundings
from graph_explorer.shared.models import KnowledgeGraphMeta, Node, Path, SurroundingsResult
from graph_explorer.shared.properties import parse_properties
from graph_explorer.stores.base import DEFAULT_SEARCH_LIMIT, GraphStore

logger = logging.getLogger("graph_explorer.query.explorer")


class GraphExplorer:
    """Read-only exploration API over a ``GraphStore``.

    Args:
        store: Backing store; connected lazily on first use.
        graph_ids: Graph ids every operation is restricted to.
        max_concurrency: Upper bound on in-flight store calls per operation.
        search_limit: Default cap for ``find_nodes_by_name``.
    """

    def __init__(
        self,
        store: GraphStore,
        graph_ids: Sequence[int],
        max_concurrency: int = 8,
        search_limit: int = DEFAULT_SEARCH_LIMIT,
    ):
        self._store = store
        self._graph_ids = list(dict.fromkeys(graph_ids))
        self._max_concurrency = max_concurrency
        self._search_limit = search_limit
        self._connect_lock = asyncio.Lock()
        self._connected = False

    @property
    def store(self) -> GraphStore:
        return self._store

    @property
    def graph_ids(self) -> list[int]:
        return list(self._graph_ids)

    async def _ready(self) -> GraphStore:
        if not self._connected:
            async with self._connect_lock:
                if not self._connected:
                    await self._store.connect()
                    self._connected = True
        return self._store

    async def close(self) -> None:
        async with self._connect_lock:
            if self._connected:
                await self._store.close()
                self._connected = False

    # ─── Catalog ────────────────────────────────────────────

    async def list_available_graphs(self) -> list[dict[str, Any]]:
        """Catalog entries for the authorised graphs, ``id`` as a string."""
        store = await self._ready()
        allowed = set(self._graph_ids)
        return [
            {
                "id": str(meta.id),
                "name": meta.name,
                "description": meta.description,
                "category": meta.category,
                "shortDescription": meta.short_description,
            }
            for meta in await store.list_graphs()
            if meta.id in allowed
        ]

    # ─── Lookups ────────────────────────────────────────────

    async def find_nodes_by_name(self, name: str, limit: int | None = None) -> list[Node]:
        store = await self._ready()
        return await store.find_nodes_by_name(
            self._graph_ids, name, self._search_limit if limit is None else limit
        )

    async def get_node_details(self, node_id: str) -> list[dict[str, Any]]:
        """Every record with ``node_id`` across the authorised graphs.

        Each record gains ``knowledgeGraphName`` and ``parsedProperties``
        (``None`` when the properties text cannot be parsed).  An unknown id
        yields an empty list.
        """
        store = await self._ready()
        nodes = await store.get_nodes_by_ids(self._graph_ids, [node_id])
        if not nodes:
            return []
        names = {meta.id: meta.name for meta in await store.list_graphs()}
        details = []
        for node in nodes:
            record = node.to_json_dict()
            record["knowledgeGraphName"] = names.get(node.graph_id, f"Graph #{node.graph_id}")
            record["parsedProperties"] = parse_properties(node.properties)
            details.append(record)
        return details

    # ─── Traversal ──────────────────────────────────────────

    async def neighbors(
        self, node_id: str, hops: int = 1, edge_type: str | None = None
    ) -> list[str]:
        store = await self._ready()
        return await neighbor_ids(
            store, self._graph_ids, node_id, hops, edge_type, self._max_concurrency
        )

    async def search_surroundings(
        self,
        node_id: str,
        hops: int = 1,
        query: str | None = None,
        node_type: str | None = None,
        edge_type: str | None = None,
    ) -> SurroundingsResult:
        store = await self._ready()
        return await search_surroundings(
            store,
            self._graph_ids,
            node_id,
            hops=hops,
            query=query,
            node_type=node_type,
            edge_type=edge_type,
            max_concurrency=self._max_concurrency,
        )

    async def find_paths(self, source_id: str, destination_id: str) -> list[Path]:
        store = await self._ready()
        return await find_paths(
            store, self._graph_ids, source_id, destination_id, self._max_concurrency
        )


async def catalog_graph_ids(store: GraphStore) -> list[int]:
    """Ids of every graph the store serves, in display order."""
    graphs: list[KnowledgeGraphMeta] = await store.list_graphs()
    return [meta.id for meta in graphs]
