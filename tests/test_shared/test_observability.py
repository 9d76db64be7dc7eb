"""Tests for the optional Langfuse integration and logging helpers."""

import logging

from graph_explorer.shared import observability
from graph_explorer.shared.logging import generate_correlation_id, setup_logging


def test_langfuse_disabled_without_keys(monkeypatch):
    monkeypatch.delenv("LANGFUSE_PUBLIC_KEY", raising=False)
    monkeypatch.delenv("LANGFUSE_SECRET_KEY", raising=False)
    assert observability.init_langfuse() is None
    assert not observability.is_langfuse_enabled()


def test_trace_function_is_passthrough_when_disabled(monkeypatch):
    monkeypatch.setattr(observability, "_langfuse_enabled", False)

    async def tool():
        return "ok"

    assert observability.trace_function(name="tool")(tool) is tool


def test_shutdown_without_client_is_noop():
    observability.shutdown_langfuse()
    assert not observability.is_langfuse_enabled()


def test_setup_logging_sets_level():
    logger = setup_logging("graph_explorer.test_logging", level="debug")
    assert logger.level == logging.DEBUG


def test_correlation_ids_are_short_and_unique():
    ids = {generate_correlation_id() for _ in range(50)}
    assert len(ids) == 50
    assert all(len(i) == 12 for i in ids)
