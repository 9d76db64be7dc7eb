"""
Logging setup with correlation IDs.

Provides a consistent logging setup for the MCP server and the store
adapters so that a tool call can be traced through its store reads.
"""

import logging
import uuid

LOG_FORMAT = "%(asctime)s  %(name)-34s  %(levelname)-7s  %(message)s"


def setup_logging(name: str, level: str = "INFO") -> logging.Logger:
    """
    Configure logging and return a named logger.

    The root handler is installed once; later calls only adjust the
    level of ``name`` (and so of its children).

    Args:
        name: Logger name (e.g. 'graph_explorer.server').
        level: Log level string (e.g. 'INFO', 'DEBUG').

    Returns:
        Configured logger instance.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)
    logger = logging.getLogger(name)
    logger.setLevel(numeric_level)
    return logger


def generate_correlation_id() -> str:
    """Generate a short unique ID for tracing one tool call."""
    return uuid.uuid4().hex[:12]
