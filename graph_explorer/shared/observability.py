"""
Langfuse observability integration.

Traces tool calls served by the MCP server.
Only activates when LANGFUSE_PUBLIC_KEY and LANGFUSE_SECRET_KEY are provided in .env
"""

import os
from typing import Callable, Optional

from langfuse import Langfuse, observe

from graph_explorer.shared.logging import setup_logging

logger = setup_logging("graph_explorer.observability", level="INFO")

# Global Langfuse client
_langfuse_client: Optional[Langfuse] = None
_langfuse_enabled: bool = False


def init_langfuse() -> Optional[Langfuse]:
    """
    Initialize Langfuse client if environment variables are set.

    Required environment variables:
    - LANGFUSE_PUBLIC_KEY
    - LANGFUSE_SECRET_KEY
    - LANGFUSE_HOST (optional, defaults to https://cloud.langfuse.com)

    Returns:
        Langfuse client if initialized, None otherwise
    """
    global _langfuse_client, _langfuse_enabled

    public_key = os.getenv("LANGFUSE_PUBLIC_KEY")
    secret_key = os.getenv("LANGFUSE_SECRET_KEY")
    host = os.getenv("LANGFUSE_HOST", "https://cloud.langfuse.com")

    if not public_key or not secret_key:
        logger.info("Langfuse not configured - observability disabled")
        _langfuse_enabled = False
        return None

    try:
        _langfuse_client = Langfuse(
            public_key=public_key,
            secret_key=secret_key,
            host=host,
        )
        _langfuse_enabled = True
        logger.info("Langfuse initialized - host: %s", host)
        return _langfuse_client

    except Exception as e:
        logger.error("Failed to initialize Langfuse: %s", e)
        _langfuse_enabled = False
        return None


def is_langfuse_enabled() -> bool:
    """Check if Langfuse is enabled."""
    return _langfuse_enabled


def shutdown_langfuse() -> None:
    """Flush and shutdown Langfuse client."""
    global _langfuse_client, _langfuse_enabled

    if _langfuse_client:
        logger.info("Shutting down Langfuse - flushing pending traces")
        try:
            _langfuse_client.flush()
        except Exception as e:
            logger.error("Error flushing Langfuse: %s", e)
        finally:
            _langfuse_client = None
            _langfuse_enabled = False


def trace_function(
    name: Optional[str] = None,
    capture_input: bool = True,
    capture_output: bool = True,
    as_type: str = "span",
):
    """
    Decorator for tracing functions with Langfuse.

    The enabled check happens at decoration time, so call init_langfuse()
    before the decorated functions are defined.

    Args:
        name: Custom name for the trace (defaults to function name)
        capture_input: Whether to capture function arguments
        capture_output: Whether to capture function return value
        as_type: Observation type ("span", "event", ...)

    Usage:
        @trace_function(name="find_paths")
        async def find_paths(source_node_id: str, destination_node_id: str) -> str:
            ...
    """
    def decorator(func: Callable) -> Callable:
        if not is_langfuse_enabled():
            return func

        return observe(
            name=name or func.__name__,
            capture_input=capture_input,
            capture_output=capture_output,
            as_type=as_type,
        )(func)

    return decorator
