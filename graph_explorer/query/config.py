"""Graph explorer service configuration."""

from graph_explorer.shared.config import BaseExplorerSettings


class ExplorerSettings(BaseExplorerSettings):
    """Settings specific to the graph explorer MCP server."""

    service_name: str = "graph_explorer"
    host: str = "0.0.0.0"
    port: int = 8005

    # Graph ids the tools may read; empty = every graph in the store catalog
    graph_ids: list[int] = []

    # Default result cap for find_nodes_by_name
    search_limit: int = 10

    class Config(BaseExplorerSettings.Config):
        env_prefix = "GRAPH_EXPLORER_"
