"""
Tests for the DuckDB-over-parquet store.

Each test writes small parquet files with DuckDB into ``tmp_path`` and
queries them through ParquetGraphStore.
"""

import json
import logging

import duckdb
import pytest

from graph_explorer.query.neighbors import neighbor_ids
from graph_explorer.query.paths import find_paths
from graph_explorer.query.surroundings import search_surroundings
from graph_explorer.shared.exceptions import (
    ConfigurationError,
    StoreUnavailableError,
    UnknownGraphError,
)
from graph_explorer.stores.parquet_store import ParquetGraphStore, discover_graphs


def write_graph(root, slug, meta, nodes, edges, id_type="VARCHAR"):
    """Write graph.json, nodes.parquet and edges.parquet under ``root/slug``."""
    directory = root / slug
    directory.mkdir(parents=True)
    (directory / "graph.json").write_text(json.dumps(meta), encoding="utf-8")

    con = duckdb.connect()
    try:
        con.execute(
            f"CREATE TABLE nodes (id {id_type}, name VARCHAR, type VARCHAR, properties VARCHAR)"
        )
        if nodes:
            con.executemany("INSERT INTO nodes VALUES (?, ?, ?, ?)", nodes)
        con.execute(
            f'CREATE TABLE edges ("from" {id_type}, "to" {id_type}, type VARCHAR, properties VARCHAR)'
        )
        if edges:
            con.executemany("INSERT INTO edges VALUES (?, ?, ?, ?)", edges)
        nodes_path = str(directory / "nodes.parquet").replace("'", "''")
        edges_path = str(directory / "edges.parquet").replace("'", "''")
        con.execute(f"COPY nodes TO '{nodes_path}' (FORMAT PARQUET)")
        con.execute(f"COPY edges TO '{edges_path}' (FORMAT PARQUET)")
    finally:
        con.close()
    return directory


@pytest.fixture
def data_dir(tmp_path):
    root = tmp_path / "data"
    write_graph(
        root,
        "primekg",
        {"id": 1, "name": "PrimeKG", "description": "Precision medicine", "order": 2},
        nodes=[
            ("A", "Metformin", "drug", None),
            ("B", "Diabetes", "disease", '{"note":"treats metformin response"}'),
            ("C", "Enzyme X", "protein", None),
            ("D", None, "unnamed", None),
        ],
        edges=[
            ("A", "B", "treats", None),
            ("B", "C", "involves", '{"score": 0.9}'),
        ],
    )
    write_graph(
        root,
        "o'brien",
        {"id": 2, "name": "Second", "description": "", "shortDescription": "2nd", "order": 1},
        nodes=[
            ("A", "Metformin hydrochloride", "drug", None),
            ("E", "Lactic acidosis", "effect", None),
        ],
        edges=[("E", "A", "caused_by", None)],
    )
    return root


@pytest.fixture
async def store(data_dir):
    async with ParquetGraphStore(data_dir, timeout_seconds=10) as opened:
        yield opened


class TestDiscovery:
    def test_reads_every_complete_graph(self, data_dir):
        metas, files = discover_graphs(data_dir)
        assert sorted(m.id for m in metas) == [1, 2]
        assert files[1].nodes_path.name == "nodes.parquet"

    def test_incomplete_directory_skipped(self, data_dir, caplog):
        (data_dir / "partial").mkdir()
        (data_dir / "partial" / "graph.json").write_text('{"id": 9, "name": "x"}')
        with caplog.at_level(logging.WARNING):
            metas, _ = discover_graphs(data_dir)
        assert 9 not in {m.id for m in metas}
        assert "partial" in caplog.text

    def test_stray_files_ignored(self, data_dir):
        (data_dir / "README.txt").write_text("not a graph")
        metas, _ = discover_graphs(data_dir)
        assert len(metas) == 2

    def test_duplicate_id_rejected(self, data_dir):
        write_graph(data_dir, "copy", {"id": 1, "name": "Copy"}, [], [])
        with pytest.raises(ConfigurationError, match="Duplicate graph id=1"):
            discover_graphs(data_dir)

    async def test_missing_data_dir(self, tmp_path):
        with pytest.raises(ConfigurationError):
            await ParquetGraphStore(tmp_path / "nope").connect()


class TestCatalog:
    async def test_list_graphs(self, store):
        graphs = await store.list_graphs()
        assert [(g.id, g.name) for g in graphs] == [(2, "Second"), (1, "PrimeKG")]
        assert graphs[0].short_description == "2nd"

    async def test_unknown_graph(self, store):
        with pytest.raises(UnknownGraphError):
            await store.get_neighbor_ids([3], "A")


class TestPrimitives:
    async def test_find_nodes_by_name_case_insensitive(self, store):
        nodes = await store.find_nodes_by_name([1], "METF")
        assert [(n.graph_id, n.id, n.name) for n in nodes] == [(1, "A", "Metformin")]

    async def test_find_nodes_by_name_across_graphs_and_limit(self, store):
        nodes = await store.find_nodes_by_name([1, 2], "metformin")
        assert {(n.graph_id, n.id) for n in nodes} == {(1, "A"), (2, "A")}
        assert len(await store.find_nodes_by_name([1, 2], "metformin", limit=1)) == 1

    async def test_empty_name_returns_named_nodes(self, store):
        nodes = await store.find_nodes_by_name([1], "")
        assert {n.id for n in nodes} == {"A", "B", "C"}

    async def test_get_nodes_by_ids(self, store):
        nodes = await store.get_nodes_by_ids([1, 2], ["A", "C", "zz"])
        assert {(n.graph_id, n.id) for n in nodes} == {(1, "A"), (1, "C"), (2, "A")}
        c = next(n for n in nodes if n.id == "C")
        assert c.type == "protein"
        assert c.properties is None

    async def test_neighbor_ids_both_directions(self, store):
        assert await store.get_neighbor_ids([1], "B") == ["A", "C"]

    async def test_neighbor_ids_edge_type(self, store):
        assert await store.get_neighbor_ids([1], "B", "involves") == ["C"]
        assert await store.get_neighbor_ids([1], "B", "nope") == []

    async def test_neighbor_ids_union(self, store):
        assert sorted(await store.get_neighbor_ids([1, 2], "A")) == ["B", "E"]

    async def test_edges_between_either_order(self, store):
        forward = await store.get_edges_between([1], "B", "C")
        backward = await store.get_edges_between([1], "C", "B")
        assert forward == backward
        assert [(e.from_, e.to, e.type, e.properties) for e in forward] == [
            ("B", "C", "involves", '{"score": 0.9}')
        ]
        assert forward[0].to_json_dict()["from"] == "B"

    async def test_graph_tag_on_edges(self, store):
        edges = await store.get_edges_between([1, 2], "A", "E")
        assert [(e.graph_id, e.type) for e in edges] == [(2, "caused_by")]


class TestQueryCoreOverParquet:
    async def test_metformin_surroundings(self, store):
        result = await search_surroundings(store, [1], "A", 1, query="diabetes")
        assert [(c.id, c.edges_to_candidate) for c in result.neighbors] == [("B", ["treats"])]

    async def test_metformin_paths(self, store):
        paths = await find_paths(store, [1], "A", "C")
        assert [
            [(leg.tail_node.id, leg.edge_type, leg.head_node.id) for leg in p.legs]
            for p in paths
        ] == [[("A", "treats", "B"), ("B", "involves", "C")]]


class TestIntegerIdColumns:
    @pytest.fixture
    async def int_store(self, tmp_path):
        root = tmp_path / "int_data"
        write_graph(
            root,
            "numeric",
            {"id": 7, "name": "Numeric"},
            nodes=[(1, "One", "t", None), (2, "Two", "t", None), (3, "Three", "t", None)],
            edges=[(1, 2, "next", None), (2, 3, "next", None)],
            id_type="BIGINT",
        )
        async with ParquetGraphStore(root) as opened:
            yield opened

    async def test_neighbor_ids_are_strings(self, int_store):
        assert await int_store.get_neighbor_ids([7], "2") == ["1", "3"]

    async def test_two_hop_excludes_start_node(self, int_store):
        assert await neighbor_ids(int_store, [7], "1", 2) == ["2", "3"]

    async def test_edges_between_match_string_ids(self, int_store):
        edges = await int_store.get_edges_between([7], "2", "1")
        assert [(e.from_, e.to, e.type) for e in edges] == [("1", "2", "next")]

    async def test_surroundings_and_paths(self, int_store):
        result = await search_surroundings(int_store, [7], "2", 1)
        assert [(c.id, c.edges_to_candidate, c.edges_from_candidate) for c in result.neighbors] == [
            ("1", [], ["next"]),
            ("3", ["next"], []),
        ]
        paths = await find_paths(int_store, [7], "1", "3")
        assert [[leg.head_node.id for leg in p.legs] for p in paths] == [["2", "3"]]


class TestFailures:
    async def test_corrupt_parquet_is_store_unavailable(self, data_dir):
        (data_dir / "primekg" / "edges.parquet").write_bytes(b"not parquet")
        async with ParquetGraphStore(data_dir) as store:
            with pytest.raises(StoreUnavailableError):
                await store.get_neighbor_ids([1], "A")

    async def test_close_is_idempotent(self, data_dir):
        store = ParquetGraphStore(data_dir)
        await store.connect()
        await store.close()
        await store.close()
