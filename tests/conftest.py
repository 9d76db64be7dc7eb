"""
Shared fixtures: an in-memory GraphStore and a few small graphs.

The fake store implements the backend hooks in plain Python so the query
core can be tested without any database.  It records every hook call.
"""

import pytest

from graph_explorer.shared.models import Edge, KnowledgeGraphMeta, Node
from graph_explorer.stores.base import GraphStore


class FakeGraphStore(GraphStore):
    """In-memory store; node and edge order is the "store order"."""

    backend = "fake"

    def __init__(self, graphs=(), nodes=(), edges=(), timeout_seconds: float = 5.0):
        super().__init__(timeout_seconds)
        self.graphs = list(graphs)
        self.nodes = list(nodes)
        self.edges = list(edges)
        self.calls: list[tuple] = []
        self.connect_count = 0
        self.closed = False

    async def connect(self):
        self.connect_count += 1
        return self

    async def close(self) -> None:
        self.closed = True

    async def _list_graphs(self):
        return list(self.graphs)

    async def _find_nodes_by_name(self, graph_ids, text, limit):
        self.calls.append(("find_nodes_by_name", tuple(graph_ids), text, limit))
        hits = [
            n for n in self.nodes
            if n.graph_id in graph_ids and n.name is not None and text.lower() in n.name.lower()
        ]
        return hits[:limit]

    async def _get_nodes_by_ids(self, graph_ids, ids):
        self.calls.append(("get_nodes_by_ids", tuple(graph_ids), tuple(ids)))
        return [n for n in self.nodes if n.graph_id in graph_ids and n.id in ids]

    async def _get_neighbor_ids(self, graph_ids, node_id, edge_type):
        self.calls.append(("get_neighbor_ids", tuple(graph_ids), node_id, edge_type))
        result = []
        for e in self.edges:
            if e.graph_id not in graph_ids:
                continue
            if edge_type is not None and e.type != edge_type:
                continue
            if e.from_ == node_id:
                result.append(e.to)
            elif e.to == node_id:
                result.append(e.from_)
        return result

    async def _get_edges_between(self, graph_ids, id1, id2):
        self.calls.append(("get_edges_between", tuple(graph_ids), id1, id2))
        return [
            e for e in self.edges
            if e.graph_id in graph_ids
            and ((e.from_ == id1 and e.to == id2) or (e.from_ == id2 and e.to == id1))
        ]

    def calls_to(self, name: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == name]


def node(node_id, name=None, type=None, properties=None, graph_id=1) -> Node:
    return Node(graph_id=graph_id, id=node_id, name=name, type=type, properties=properties)


def edge(source, target, type="rel", graph_id=1, properties=None) -> Edge:
    return Edge(graph_id=graph_id, from_=source, to=target, type=type, properties=properties)


def graph(graph_id=1, name="Test graph", **extra) -> KnowledgeGraphMeta:
    return KnowledgeGraphMeta(id=graph_id, name=name, **extra)


@pytest.fixture
def metformin_store() -> FakeGraphStore:
    """A(Metformin) -treats-> B(Diabetes) -involves-> C(Enzyme X)."""
    return FakeGraphStore(
        graphs=[graph(1, "PrimeKG")],
        nodes=[
            node("A", "Metformin", "drug"),
            node("B", "Diabetes", "disease", '{"note":"treats metformin response"}'),
            node("C", "Enzyme X", "protein"),
        ],
        edges=[
            edge("A", "B", "treats"),
            edge("B", "C", "involves"),
        ],
    )


@pytest.fixture
def star_store() -> FakeGraphStore:
    """Hub H with neighbors in mixed directions and a second ring.

    H -a-> N1, N2 -b-> H, H -a-> N3, N1 -c-> X1, N2 -c-> X1, N2 -c-> X2,
    X2 -d-> H (so X2 is also 1-hop), N3 -c-> H (second edge to N3).
    """
    return FakeGraphStore(
        graphs=[graph(1, "Star")],
        nodes=[
            node("H", "Hub", "hub"),
            node("N1", "First", "leaf", '{"color": "red", "size": "large"}'),
            node("N2", "Second", "leaf", "{'color': 'blue', 'shape': 'round'}"),
            node("N3", "Third", "other", '{"color": "red"}'),
            node("X1", "Far one", "leaf"),
            node("X2", "Far two", "leaf"),
        ],
        edges=[
            edge("H", "N1", "a"),
            edge("N2", "H", "b"),
            edge("H", "N3", "a"),
            edge("N1", "X1", "c"),
            edge("N2", "X1", "c"),
            edge("N2", "X2", "c"),
            edge("X2", "H", "d"),
            edge("N3", "H", "c"),
        ],
    )
