"""
Neighbor Expansion: 1-hop and 2-hop neighbor-id sets.

The result is an ordered set: 1-hop ids first, then ids only reachable in
two hops, each band in first-discovery order.  2-hop expansion does not
support edge-type filtering; callers are told so and may branch on the
``InvalidArgument`` error.
"""

import logging
from collections.abc import Sequence

from graph_explorer.query.concurrency import gather_bounded
from graph_explorer.shared.exceptions import InvalidArgumentError
from graph_explorer.stores.base import GraphStore

logger = logging.getLogger("graph_explorer.query.neighbors")

VALID_HOPS = (1, 2)


def validate_hops(hops: int, edge_type: str | None = None) -> int:
    """Check a hop count and its combination with an edge-type filter.

    Raises:
        InvalidArgumentError: ``hops`` not in {1, 2}, or ``edge_type`` given with ``hops=2``.
    """
    if isinstance(hops, bool) or hops not in VALID_HOPS:
        raise InvalidArgumentError(f"hops must be 1 or 2, got {hops!r}")
    if hops == 2 and edge_type:
        raise InvalidArgumentError(
            f"Filtering by edge type is not supported when hops=2 (edge_type={edge_type!r})"
        )
    return hops


async def neighbor_ids(
    store: GraphStore,
    graph_ids: Sequence[int],
    node_id: str,
    hops: int = 1,
    edge_type: str | None = None,
    max_concurrency: int = 8,
) -> list[str]:
    """Ids within ``hops`` edges of ``node_id`` (edges treated as undirected).

    ``node_id`` itself only appears when a self-loop connects it.
    """
    hops = validate_hops(hops, edge_type)

    one_hop = await store.get_neighbor_ids(graph_ids, node_id, edge_type)
    if hops == 1:
        return one_hop

    async def _expand(neighbor_id: str) -> list[str]:
        return await store.get_neighbor_ids(graph_ids, neighbor_id)

    expansions = await gather_bounded(_expand, one_hop, max_concurrency)

    known = set(one_hop)
    known.add(node_id)
    two_hop: list[str] = []
    for expansion in expansions:
        for candidate in expansion:
            if candidate not in known:
                known.add(candidate)
                two_hop.append(candidate)

    logger.debug(
        "neighbors(%s): %d one-hop, %d two-hop", node_id, len(one_hop), len(two_hop)
    )
    return one_hop + two_hop
