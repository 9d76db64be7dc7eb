"""
Graph Store: the read contract the query core depends on.

Every backend implements four read primitives plus the graph catalog.
All of them take the list of graph ids the caller is authorised for and
behave as if querying the union of those graphs, tagging each record with
its originating graph id.

The public primitives are template methods: they validate graph ids
against the catalog, apply the per-call timeout and translate driver
failures into ``StoreUnavailableError``.  Backends implement the
underscore-prefixed hooks.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Iterable, Sequence
from typing import TypeVar

from graph_explorer.shared.exceptions import (
    ExplorerError,
    InvalidArgumentError,
    StoreUnavailableError,
    UnknownGraphError,
)
from graph_explorer.shared.models import Edge, KnowledgeGraphMeta, Node

logger = logging.getLogger("graph_explorer.stores")

T = TypeVar("T")

DEFAULT_SEARCH_LIMIT = 10


def dedupe(ids: Iterable[str]) -> list[str]:
    """Drop repeated ids, keeping first-discovery order."""
    seen: set[str] = set()
    ordered: list[str] = []
    for node_id in ids:
        if node_id not in seen:
            seen.add(node_id)
            ordered.append(node_id)
    return ordered


class GraphStore(ABC):
    """Abstract read-only graph store."""

    backend: str = "abstract"

    #: Exceptions raised by the driver that mean "the store is unavailable".
    driver_errors: tuple[type[BaseException], ...] = (OSError,)

    def __init__(self, timeout_seconds: float = 30.0):
        self._timeout_seconds = timeout_seconds

    # ─── Lifecycle ──────────────────────────────────────────

    async def connect(self) -> "GraphStore":
        """Open connections / pools. Idempotent."""
        return self

    async def close(self) -> None:
        """Release connections / pools."""

    async def __aenter__(self) -> "GraphStore":
        return await self.connect()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # ─── Catalog ────────────────────────────────────────────

    async def list_graphs(self) -> list[KnowledgeGraphMeta]:
        """Catalog of every graph this store serves, in display order."""
        graphs = await self._guard("list_graphs", self._list_graphs())
        return sorted(
            graphs,
            key=lambda g: (g.order is None, g.order if g.order is not None else 0, g.id),
        )

    async def _require_graphs(self, graph_ids: Sequence[int]) -> list[int]:
        """Validate graph ids against the catalog.

        Raises:
            InvalidArgumentError: If no graph id was given.
            UnknownGraphError: For the first id the catalog does not know.
        """
        if not graph_ids:
            raise InvalidArgumentError("At least one graph id is required")
        known = {g.id for g in await self.list_graphs()}
        for graph_id in graph_ids:
            if graph_id not in known:
                raise UnknownGraphError(graph_id)
        return list(dict.fromkeys(graph_ids))

    # ─── Read primitives ────────────────────────────────────

    async def find_nodes_by_name(
        self,
        graph_ids: Sequence[int],
        text: str,
        limit: int = DEFAULT_SEARCH_LIMIT,
    ) -> list[Node]:
        """Nodes whose name contains ``text`` (case-insensitive), at most ``limit``.

        An empty ``text`` matches every node that has a name.
        """
        graph_ids = await self._require_graphs(graph_ids)
        return await self._guard(
            "find_nodes_by_name",
            self._find_nodes_by_name(graph_ids, text or "", max(0, int(limit))),
        )

    async def get_nodes_by_ids(
        self,
        graph_ids: Sequence[int],
        ids: Sequence[str],
    ) -> list[Node]:
        """Batched exact-id lookup. Empty ``ids`` returns [] with no store call."""
        if not ids:
            return []
        graph_ids = await self._require_graphs(graph_ids)
        return await self._guard(
            "get_nodes_by_ids",
            self._get_nodes_by_ids(graph_ids, dedupe(ids)),
        )

    async def get_neighbor_ids(
        self,
        graph_ids: Sequence[int],
        node_id: str,
        edge_type: str | None = None,
    ) -> list[str]:
        """Distinct ids connected to ``node_id`` by an edge in either direction."""
        graph_ids = await self._require_graphs(graph_ids)
        rows = await self._guard(
            "get_neighbor_ids",
            self._get_neighbor_ids(graph_ids, node_id, edge_type or None),
        )
        return dedupe(rows)

    async def get_edges_between(
        self,
        graph_ids: Sequence[int],
        id1: str,
        id2: str,
    ) -> list[Edge]:
        """Every edge joining the unordered pair ``{id1, id2}``."""
        graph_ids = await self._require_graphs(graph_ids)
        return await self._guard(
            "get_edges_between",
            self._get_edges_between(graph_ids, id1, id2),
        )

    # ─── Backend hooks ──────────────────────────────────────

    @abstractmethod
    async def _list_graphs(self) -> list[KnowledgeGraphMeta]: ...

    @abstractmethod
    async def _find_nodes_by_name(
        self, graph_ids: list[int], text: str, limit: int
    ) -> list[Node]: ...

    @abstractmethod
    async def _get_nodes_by_ids(self, graph_ids: list[int], ids: list[str]) -> list[Node]: ...

    @abstractmethod
    async def _get_neighbor_ids(
        self, graph_ids: list[int], node_id: str, edge_type: str | None
    ) -> list[str]:
        """One neighbor id per incident edge, in store order (may repeat)."""

    @abstractmethod
    async def _get_edges_between(
        self, graph_ids: list[int], id1: str, id2: str
    ) -> list[Edge]: ...

    # ─── Helpers ────────────────────────────────────────────

    async def _guard(self, operation: str, call: Awaitable[T]) -> T:
        """Await a backend call under the timeout, translating failures."""
        try:
            return await asyncio.wait_for(call, timeout=self._timeout_seconds)
        except ExplorerError:
            raise
        except asyncio.TimeoutError as exc:
            logger.warning(
                "%s store call %s timed out after %ss",
                self.backend, operation, self._timeout_seconds,
            )
            raise StoreUnavailableError(
                f"{self.backend} store timed out during {operation} "
                f"after {self._timeout_seconds}s"
            ) from exc
        except self.driver_errors as exc:
            logger.error("%s store call %s failed: %s", self.backend, operation, exc)
            raise StoreUnavailableError(
                f"{self.backend} store failed during {operation}: {exc}"
            ) from exc
