"""
Custom exception hierarchy for the graph explorer.

All errors inherit from ExplorerError so they can be caught
uniformly at the tool facade.  ``kind`` is the stable error name
that agents branch on.
"""


class ExplorerError(Exception):
    """Base exception for all graph explorer errors."""

    kind = "ExplorerError"

    def __init__(self, message: str, kind: str | None = None):
        if kind is not None:
            self.kind = kind
        self.message = message
        super().__init__(f"[{self.kind}] {message}")


class UnknownGraphError(ExplorerError):
    """A graph id is not recognised by the backing store."""

    kind = "UnknownGraph"

    def __init__(self, graph_id: int):
        self.graph_id = graph_id
        super().__init__(f"Unknown graph id={graph_id}")


class InvalidArgumentError(ExplorerError):
    """Malformed hop count or an unsupported argument combination."""

    kind = "InvalidArgument"


class NodeNotFoundError(ExplorerError):
    """A required node is absent from the authorised graphs."""

    kind = "NodeNotFound"

    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Node with id {node_id} not found.")


class StoreUnavailableError(ExplorerError):
    """The underlying store call failed or timed out."""

    kind = "StoreUnavailable"


class ConfigurationError(ExplorerError):
    """Startup settings are invalid (unknown backend, missing DSN, ...)."""

    kind = "Configuration"
