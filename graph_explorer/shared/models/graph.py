"""
Graph record models shared by the store adapters, the query core and the
tool facade.

Field names are snake_case in Python and camelCase on the wire
(``graphId``, ``matchExplanation``, ``tailNode`` ...).  Dump with
``by_alias=True`` for JSON output.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class GraphRecord(BaseModel):
    """Base for every record that crosses the store/facade boundary."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_json_dict(self) -> dict:
        """Serialise with wire names, keeping explicitly-set nulls."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class Node(GraphRecord):
    """A node in one knowledge graph. ``(graph_id, id)`` is unique."""

    graph_id: int = Field(description="Id of the graph partition the node belongs to")
    id: str
    name: str | None = None
    type: str | None = None
    properties: str | None = Field(
        default=None,
        description="Opaque JSON (or Python-literal flavoured JSON) text",
    )


class Edge(GraphRecord):
    """A directed, typed edge. ``(graph_id, from, to, type)`` is unique."""

    graph_id: int
    from_: str = Field(alias="from")
    to: str
    type: str | None = None
    properties: str | None = None


class KnowledgeGraphMeta(GraphRecord):
    """Catalog entry for one graph partition."""

    id: int
    name: str
    description: str = ""
    category: str | None = None
    short_description: str | None = None
    order: int | None = Field(
        default=None,
        description="Display order; graphs without one sort after, by id",
    )


class RankedCandidate(Node):
    """A neighbor returned by the surroundings search.

    ``match_explanation`` and the edge lists are only set for 1-hop
    searches, the former only for property matches of a keyword query.
    """

    match_explanation: str | None = None
    edges_to_candidate: list[str | None] | None = None
    edges_from_candidate: list[str | None] | None = None

    @classmethod
    def from_node(cls, node: Node, **extra) -> "RankedCandidate":
        fields = {name: getattr(node, name) for name in Node.model_fields}
        return cls(**fields, **extra)


class SurroundingsResult(GraphRecord):
    """Reference node plus its (optionally ranked) neighborhood."""

    main_node: Node
    neighbors: list[RankedCandidate] = Field(default_factory=list)

    def to_json_dict(self) -> dict:
        return {
            "mainNode": self.main_node.to_json_dict(),
            "neighbors": [c.to_json_dict() for c in self.neighbors],
        }


class PathLeg(GraphRecord):
    """One hop of a path. Direction follows the path, not the stored edge."""

    tail_node: Node
    edge_type: str
    head_node: Node


class Path(GraphRecord):
    """A two-leg path: source → intermediate → destination."""

    legs: list[PathLeg]

    @property
    def intermediate(self) -> Node:
        return self.legs[0].head_node
