"""
Graph Explorer — MCP Server

Exposes read-only tools over one or more knowledge graphs held in the
configured store (parquet files, PostgreSQL or Neo4j).  Each tool's
docstring is read by the calling LLM so it knows *when* and *how* to
call it.  Tools return JSON strings; failures surface as tool errors
whose text starts with the error kind, e.g. ``[NodeNotFound] ...``.

Run as:  python -m graph_explorer.query.server        (SSE transport)
"""

import asyncio
import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings
from starlette.requests import Request
from starlette.responses import JSONResponse

from graph_explorer.query.config import ExplorerSettings
from graph_explorer.query.explorer import GraphExplorer, catalog_graph_ids
from graph_explorer.shared.exceptions import ExplorerError, InvalidArgumentError
from graph_explorer.shared.logging import generate_correlation_id, setup_logging
from graph_explorer.shared.models import Node, Path
from graph_explorer.shared.observability import (
    init_langfuse,
    shutdown_langfuse,
    trace_function,
)
from graph_explorer.stores import create_store

logger = logging.getLogger("graph_explorer.server")

# ─── Shared resources (lazy init) ─────────────────────────

_settings: ExplorerSettings | None = None


def _get_settings() -> ExplorerSettings:
    """Lazy-initialise settings from environment variables."""
    global _settings
    if _settings is None:
        _settings = ExplorerSettings()
    return _settings


def _transport_security(settings: ExplorerSettings) -> TransportSecuritySettings:
    # Allow Docker service names
    return TransportSecuritySettings(
        enable_dns_rebinding_protection=False,
        allowed_hosts=[
            "graph_explorer",
            f"graph_explorer:{settings.port}",
            "localhost",
            "127.0.0.1",
            "0.0.0.0",
        ],
        allowed_origins=["*"],
    )


# ─── Response shaping ─────────────────────────────────────


def dumps(payload: Any) -> str:
    return json.dumps(payload, default=str)


def parse_hops(k: str | int) -> int:
    """Parse the ``k`` tool argument ("1" or "2")."""
    try:
        hops = int(str(k).strip())
    except ValueError as exc:
        raise InvalidArgumentError(f'k must be "1" or "2", got {k!r}') from exc
    if hops not in (1, 2):
        raise InvalidArgumentError(f'k must be "1" or "2", got {k!r}')
    return hops


def path_node(node: Node | None, node_id: str) -> dict[str, Any]:
    """``{id, name, type}`` view of a node used in path responses."""
    if node is None:
        return {"id": node_id, "name": None, "type": None}
    return {"id": node.id, "name": node.name, "type": node.type}


def find_paths_response(
    paths: list[Path], source_id: str, destination_id: str
) -> dict[str, Any]:
    """Shape path-finder output for the LLM.

    Endpoint names come from the first path; with no paths the endpoints
    are reported by id only.
    """
    source = paths[0].legs[0].tail_node if paths else None
    destination = paths[0].legs[-1].head_node if paths else None
    return {
        "sourceNode": path_node(source, source_id),
        "destinationNode": path_node(destination, destination_id),
        "pathCount": len(paths),
        "paths": [
            {
                "legs": [
                    {
                        "tailNode": path_node(leg.tail_node, leg.tail_node.id),
                        "edgeType": leg.edge_type,
                        "headNode": path_node(leg.head_node, leg.head_node.id),
                    }
                    for leg in path.legs
                ]
            }
            for path in paths
        ],
    }


# ─── Server factory ───────────────────────────────────────


def create_server(
    explorer: GraphExplorer, settings: ExplorerSettings | None = None
) -> FastMCP:
    """Build the MCP server for ``explorer``.

    With no authorised graph ids only ``list_available_graphs`` is
    registered.
    """
    settings = settings or _get_settings()
    mcp = FastMCP("GraphExplorer", transport_security=_transport_security(settings))

    @mcp.custom_route("/health", methods=["GET"])
    async def health(request: Request) -> JSONResponse:
        try:
            graphs = await explorer.list_available_graphs()
        except ExplorerError as exc:
            logger.warning("Health check failed: %s", exc)
            return JSONResponse(
                {
                    "status": "unavailable",
                    "backend": explorer.store.backend,
                    "error": str(exc),
                },
                status_code=503,
            )
        return JSONResponse(
            {
                "status": "ok",
                "backend": explorer.store.backend,
                "graphCount": len(graphs),
                "graphIds": explorer.graph_ids,
            }
        )

    # ─── Tool 1 ──────────────────────────────────────────

    @mcp.tool()
    @trace_function(name="list_available_graphs")
    async def list_available_graphs() -> str:
        """List all available knowledge graphs for querying.

        Returns id (as a string), name, description, category and short
        description for every graph these tools can read.
        """
        return dumps(await explorer.list_available_graphs())

    if not explorer.graph_ids:
        logger.warning("No authorised graph ids; only list_available_graphs is served")
        return mcp

    # ─── Tool 2 ──────────────────────────────────────────

    @mcp.tool()
    @trace_function(name="find_nodes_by_name")
    async def find_nodes_by_name(name: str, limit: int = settings.search_limit) -> str:
        """Find nodes in the knowledge graph by their name.

        Use this FIRST to turn an entity mentioned by the user
        ("metformin", "BRCA1") into node ids for the other tools.
        Matching is a case-insensitive substring match on the name.

        Args:
            name: The name (or part of it) of the node to search for.
            limit: Maximum number of nodes to return.
        """
        cid = generate_correlation_id()
        logger.info("[%s] find_nodes_by_name name=%r limit=%d", cid, name, limit)
        nodes = await explorer.find_nodes_by_name(name, limit)
        return dumps([node.to_json_dict() for node in nodes])

    # ─── Tool 3 ──────────────────────────────────────────

    @mcp.tool()
    @trace_function(name="get_node_details")
    async def get_node_details(node_id: str) -> str:
        """Get the details of a specific node by its ID.

        Returns one record per graph that contains the id, with the
        graph's name and the node's properties parsed into an object
        (``parsedProperties`` is null when they cannot be parsed).

        Args:
            node_id: The ID of the node to get details for.
        """
        cid = generate_correlation_id()
        logger.info("[%s] get_node_details node_id=%s", cid, node_id)
        return dumps(await explorer.get_node_details(node_id))

    # ─── Tool 4 ──────────────────────────────────────────

    @mcp.tool()
    @trace_function(name="get_neighbors_by_node_id")
    async def get_neighbors_by_node_id(node_id: str, edge_type: str = "") -> str:
        """Get the ids of the direct neighbors of a node.

        Edges are followed in both directions.

        Args:
            node_id: The ID of the node to get neighbors for.
            edge_type: Optional filter by edge type.  Empty = any type.
        """
        cid = generate_correlation_id()
        logger.info(
            "[%s] get_neighbors_by_node_id node_id=%s edge_type=%r", cid, node_id, edge_type
        )
        return dumps(await explorer.neighbors(node_id, 1, edge_type or None))

    # ─── Tool 5 ──────────────────────────────────────────

    @mcp.tool()
    @trace_function(name="search_in_surroundings")
    async def search_in_surroundings(
        node_id: str,
        query: str = "",
        node_type: str = "",
        edge_type: str = "",
        k: str = "1",
    ) -> str:
        """Search the 1- or 2-hop surroundings of a node for a keyword.

        Use to answer "which X is related to Y?" questions.  Neighbors whose
        name contains the whole query come first; then neighbors whose
        properties contain query keywords, most keywords first.  For k="1"
        property matches carry a ``matchExplanation`` and every neighbor lists
        the edge types from the reference node to it (``edgesToCandidate``)
        and from it to the reference node (``edgesFromCandidate``).  For k="2"
        neighbors carry their node fields only.

        Args:
            node_id: The ID of the node to search around.
            query: Keywords to look for.  Empty = return every neighbor.
            node_type: Only keep neighbors of this node type.  Empty = any.
            edge_type: Only follow edges of this type.  Not supported with
                  k="2" (the call fails with InvalidArgument).
            k: Radius, "1" or "2".
        """
        hops = parse_hops(k)
        cid = generate_correlation_id()
        logger.info(
            "[%s] search_in_surroundings node_id=%s k=%d query=%r node_type=%r edge_type=%r",
            cid, node_id, hops, query, node_type, edge_type,
        )
        result = await explorer.search_surroundings(
            node_id,
            hops=hops,
            query=query or None,
            node_type=node_type or None,
            edge_type=edge_type or None,
        )
        return dumps(result.to_json_dict())

    # ─── Tool 6 ──────────────────────────────────────────

    @mcp.tool()
    @trace_function(name="find_paths")
    async def find_paths(source_node_id: str, destination_node_id: str) -> str:
        """Find every two-step path source → intermediate → destination.

        Use to explain how two entities are connected.  Edges are followed
        in either direction; each leg reports the edge type.  An empty
        result (pathCount 0) means there is no common neighbor or one of the
        nodes does not exist.

        Args:
            source_node_id: ID of the node the paths start from.
            destination_node_id: ID of the node the paths end at.
        """
        cid = generate_correlation_id()
        logger.info(
            "[%s] find_paths %s -> %s", cid, source_node_id, destination_node_id
        )
        paths = await explorer.find_paths(source_node_id, destination_node_id)
        return dumps(find_paths_response(paths, source_node_id, destination_node_id))

    return mcp


async def resolve_graph_ids(settings: ExplorerSettings) -> list[int]:
    """Configured graph ids, or every catalogued graph when none are configured.

    Uses a short-lived store connection so the serving store is opened on
    the server's own event loop.
    """
    if settings.graph_ids:
        return list(settings.graph_ids)
    async with create_store(settings) as store:
        return await catalog_graph_ids(store)


def build_app(settings: ExplorerSettings | None = None):
    """Create the SSE ASGI app for the configured store."""
    settings = settings or _get_settings()
    graph_ids = asyncio.run(resolve_graph_ids(settings))
    explorer = GraphExplorer(
        create_store(settings),
        graph_ids,
        max_concurrency=settings.max_concurrency,
        search_limit=settings.search_limit,
    )
    logger.info(
        "Serving %s store, graph ids %s", explorer.store.backend, graph_ids
    )
    return create_server(explorer, settings).sse_app()


# ─── Entry point ──────────────────────────────────────────


def main() -> None:
    import uvicorn

    settings = _get_settings()
    setup_logging("graph_explorer", level=settings.log_level)
    init_langfuse()

    logger.info(
        "Starting Graph Explorer MCP server (SSE transport on %s:%d)",
        settings.host, settings.port,
    )
    try:
        uvicorn.run(
            build_app(settings),
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level.lower(),
        )
    finally:
        shutdown_langfuse()


if __name__ == "__main__":
    main()
