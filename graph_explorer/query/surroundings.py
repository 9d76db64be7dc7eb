"""
Surroundings Ranker: keyword search over a node's neighborhood.

Candidates are the neighbors of a reference node.  With a query they are
split into name matches (the whole query appears in the name) and
property matches (at least one keyword token appears in the raw
``properties`` text), the latter ranked by how many distinct tokens they
contain.  Matching is plain substring search; properties are never parsed
here.
"""

import logging
from collections.abc import Sequence

from graph_explorer.query.concurrency import gather_bounded
from graph_explorer.query.neighbors import neighbor_ids, validate_hops
from graph_explorer.shared.exceptions import NodeNotFoundError
from graph_explorer.shared.models import Edge, Node, RankedCandidate, SurroundingsResult
from graph_explorer.stores.base import GraphStore

logger = logging.getLogger("graph_explorer.query.surroundings")

STOPWORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
        "of", "with", "by", "is", "are", "was", "were", "be", "been", "have",
        "has", "had", "do", "does", "did", "will", "would", "could", "should",
        "may", "might", "can", "must", "shall", "this", "that", "these",
        "those", "i", "you", "he", "she", "it", "we", "they", "me", "him",
        "her", "us", "them",
    }
)


def tokenize_query(query: str) -> list[str]:
    """Lower-cased keyword tokens of ``query``, stop words removed, in order."""
    words = query.replace("-", " ").lower().split()
    return list(dict.fromkeys(w for w in words if w not in STOPWORDS))


def match_explanation(found: Sequence[str]) -> str:
    count = len(found)
    return f"{count} match{'' if count == 1 else 'es'}: {', '.join(found)}"


def order_by_neighbor_set(nodes: Sequence[Node], ordered_ids: Sequence[str]) -> list[Node]:
    """Sort fetched records into NeighborSet order.

    Records sharing an id (one per graph) keep the order the store
    returned them in.
    """
    position = {node_id: index for index, node_id in enumerate(ordered_ids)}
    return sorted(nodes, key=lambda node: position.get(node.id, len(position)))


def rank_candidates(candidates: Sequence[Node], query: str) -> list[RankedCandidate]:
    """Name matches first, then property matches by descending relevance.

    Candidates matching neither way are dropped.
    """
    lowered_query = query.lower()
    tokens = tokenize_query(query)

    name_matches: list[RankedCandidate] = []
    scored: list[tuple[int, RankedCandidate]] = []

    for node in candidates:
        if node.name and lowered_query in node.name.lower():
            name_matches.append(RankedCandidate.from_node(node))
            continue
        if not node.properties:
            continue
        haystack = node.properties.lower()
        found = [token for token in tokens if token in haystack]
        if found:
            scored.append(
                (
                    len(found),
                    RankedCandidate.from_node(
                        node, match_explanation=match_explanation(found)
                    ),
                )
            )

    # sorted() is stable: equal relevance keeps neighbor order
    property_matches = [c for _, c in sorted(scored, key=lambda item: -item[0])]
    return name_matches + property_matches


def split_edge_types(edges: Sequence[Edge], node_id: str) -> tuple[list[str | None], list[str | None]]:
    """Edge types leaving ``node_id`` and edge types entering it."""
    outgoing = [edge.type for edge in edges if edge.from_ == node_id]
    incoming = [edge.type for edge in edges if edge.to == node_id]
    return outgoing, incoming


async def search_surroundings(
    store: GraphStore,
    graph_ids: Sequence[int],
    node_id: str,
    hops: int = 1,
    query: str | None = None,
    node_type: str | None = None,
    edge_type: str | None = None,
    max_concurrency: int = 8,
) -> SurroundingsResult:
    """Neighborhood of ``node_id``, optionally filtered by type and ranked by ``query``.

    Raises:
        InvalidArgumentError: Bad ``hops`` or ``edge_type`` combined with ``hops=2``.
        NodeNotFoundError: ``node_id`` is not in any authorised graph.
    """
    hops = validate_hops(hops, edge_type)

    found = await store.get_nodes_by_ids(graph_ids, [node_id])
    if not found:
        raise NodeNotFoundError(node_id)
    main_node = found[0]

    ids = await neighbor_ids(
        store, graph_ids, node_id, hops, edge_type or None, max_concurrency
    )
    candidates = order_by_neighbor_set(
        await store.get_nodes_by_ids(graph_ids, ids), ids
    )
    if node_type:
        candidates = [node for node in candidates if node.type == node_type]

    if query:
        ranked = rank_candidates(candidates, query)
    else:
        ranked = [RankedCandidate.from_node(node) for node in candidates]

    logger.debug(
        "surroundings(%s, hops=%d, query=%r): %d neighbor id(s), %d candidate(s)",
        node_id, hops, query, len(ids), len(ranked),
    )

    if hops == 2:
        # 2-hop neighbors carry the bare node fields only
        bare = [RankedCandidate.from_node(candidate) for candidate in ranked]
        return SurroundingsResult(main_node=main_node, neighbors=bare)

    async def _edges_for(candidate: RankedCandidate) -> list[Edge]:
        return await store.get_edges_between(graph_ids, node_id, candidate.id)

    edge_lists = await gather_bounded(_edges_for, ranked, max_concurrency)

    with_edges = []
    for candidate, edges in zip(ranked, edge_lists):
        outgoing, incoming = split_edge_types(edges, node_id)
        with_edges.append(
            candidate.model_copy(
                update={
                    "edges_to_candidate": outgoing,
                    "edges_from_candidate": incoming,
                }
            )
        )
    return SurroundingsResult(main_node=main_node, neighbors=with_edges)
