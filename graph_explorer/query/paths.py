"""
Path Finder: two-leg paths ``source → intermediate → destination``.

Built only from the store's read primitives: the intermediates are the
common neighbors of both endpoints, and every pairing of a source-side
edge with a destination-side edge yields one path.
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from graph_explorer.query.concurrency import gather_bounded
from graph_explorer.shared.models import Edge, Node, Path, PathLeg
from graph_explorer.stores.base import GraphStore

logger = logging.getLogger("graph_explorer.query.paths")


@dataclass(frozen=True)
class _Intersection:
    intermediate_id: str
    source_edge: Edge
    destination_edge: Edge


def _first_by_id(nodes: Sequence[Node]) -> dict[str, Node]:
    by_id: dict[str, Node] = {}
    for node in nodes:
        by_id.setdefault(node.id, node)
    return by_id


async def find_paths(
    store: GraphStore,
    graph_ids: Sequence[int],
    source_id: str,
    destination_id: str,
    max_concurrency: int = 8,
) -> list[Path]:
    """Every two-leg path between ``source_id`` and ``destination_id``.

    Edges are followed in either direction.  Returns ``[]`` when there is
    no common neighbor or when either endpoint does not exist.
    """
    source_neighbors, destination_neighbors = await asyncio.gather(
        store.get_neighbor_ids(graph_ids, source_id),
        store.get_neighbor_ids(graph_ids, destination_id),
    )
    reachable = set(destination_neighbors)
    intermediates = [m for m in source_neighbors if m in reachable]
    if not intermediates:
        logger.debug("paths(%s, %s): no common neighbors", source_id, destination_id)
        return []

    # one store call in flight per slot
    async def _edges_via(intermediate_id: str) -> tuple[list[Edge], list[Edge]]:
        source_edges = await store.get_edges_between(graph_ids, source_id, intermediate_id)
        destination_edges = await store.get_edges_between(
            graph_ids, intermediate_id, destination_id
        )
        return source_edges, destination_edges

    edge_pairs = await gather_bounded(_edges_via, intermediates, max_concurrency)

    intersections = [
        _Intersection(intermediate_id, source_edge, destination_edge)
        for intermediate_id, (source_edges, destination_edges) in zip(intermediates, edge_pairs)
        for source_edge in source_edges
        for destination_edge in destination_edges
    ]
    if not intersections:
        return []

    nodes = _first_by_id(
        await store.get_nodes_by_ids(
            graph_ids, [source_id, destination_id, *intermediates]
        )
    )
    source = nodes.get(source_id)
    destination = nodes.get(destination_id)
    if source is None or destination is None:
        logger.debug(
            "paths(%s, %s): endpoint missing from authorised graphs",
            source_id, destination_id,
        )
        return []

    paths = []
    for hit in intersections:
        intermediate = nodes.get(hit.intermediate_id)
        if intermediate is None:
            continue
        if not hit.source_edge.type or not hit.destination_edge.type:
            continue
        paths.append(
            Path(
                legs=[
                    PathLeg(
                        tail_node=source,
                        edge_type=hit.source_edge.type,
                        head_node=intermediate,
                    ),
                    PathLeg(
                        tail_node=intermediate,
                        edge_type=hit.destination_edge.type,
                        head_node=destination,
                    ),
                ]
            )
        )

    logger.debug(
        "paths(%s, %s): %d intermediate(s), %d path(s)",
        source_id, destination_id, len(intermediates), len(paths),
    )
    return paths
