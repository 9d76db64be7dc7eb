"""Query core: neighbor expansion, surroundings ranking, path finding and the MCP server."""

from graph_explorer.query.explorer import GraphExplorer

__all__ = ["GraphExplorer"]
