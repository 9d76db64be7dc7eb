"""Tests for environment-based settings."""

from graph_explorer.query.config import ExplorerSettings
from graph_explorer.shared.config import BaseExplorerSettings


def test_base_defaults():
    settings = BaseExplorerSettings(_env_file=None)
    assert settings.store_backend == "parquet"
    assert settings.store_timeout_seconds == 30.0
    assert settings.max_concurrency == 8


def test_explorer_defaults():
    settings = ExplorerSettings(_env_file=None)
    assert settings.port == 8005
    assert settings.graph_ids == []
    assert settings.search_limit == 10
    assert settings.service_name == "graph_explorer"


def test_explorer_reads_prefixed_env(monkeypatch):
    monkeypatch.setenv("GRAPH_EXPLORER_PORT", "9001")
    monkeypatch.setenv("GRAPH_EXPLORER_GRAPH_IDS", "[3, 1]")
    monkeypatch.setenv("GRAPH_EXPLORER_STORE_BACKEND", "postgres")
    monkeypatch.setenv("GRAPH_EXPLORER_MAX_CONCURRENCY", "2")
    settings = ExplorerSettings(_env_file=None)
    assert settings.port == 9001
    assert settings.graph_ids == [3, 1]
    assert settings.store_backend == "postgres"
    assert settings.max_concurrency == 2


def test_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("GRAPH_EXPLORER_DATA_DIR=/srv/graphs\nUNRELATED=1\n")
    settings = ExplorerSettings(_env_file=env_file)
    assert settings.data_dir == "/srv/graphs"
