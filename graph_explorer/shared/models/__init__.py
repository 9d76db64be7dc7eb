"""Pydantic record models for nodes, edges, catalog entries and query results."""

from .graph import (
    Edge,
    GraphRecord,
    KnowledgeGraphMeta,
    Node,
    Path,
    PathLeg,
    RankedCandidate,
    SurroundingsResult,
)

__all__ = [
    "Edge",
    "GraphRecord",
    "KnowledgeGraphMeta",
    "Node",
    "Path",
    "PathLeg",
    "RankedCandidate",
    "SurroundingsResult",
]
