"""Tests for main module."""

import logging
from pathlib import Path

from principle_mcp.config import Config
from principle_mcp.main import create_indexer, create_server


def _local_config(monkeypatch, root: Path, webhooks: bool = True) -> Config:
    monkeypatch.delenv("GITHUB_REPOSITORY", raising=False)
    monkeypatch.setenv("PRINCIPLE_LOCAL_ROOT", str(root))
    monkeypatch.setenv("PRINCIPLE_MAX_WORKERS", "2")
    monkeypatch.setenv("PRINCIPLE_WEBHOOKS_ENABLED", "true" if webhooks else "false")
    return Config.from_env()


def test_create_server(docs_root: Path, monkeypatch, caplog):
    """Test create_server registers components and starts the initial index."""
    config = _local_config(monkeypatch, docs_root)
    indexer = create_indexer(config)

    with caplog.at_level(logging.INFO):
        mcp = create_server(config, indexer)

    assert mcp is not None
    assert mcp.name == "principleMCP"

    log_messages = [record.message for record in caplog.records]
    assert any("Registering resources" in msg for msg in log_messages)
    assert any("Registering tools" in msg for msg in log_messages)
    assert any("Registering JSON API routes" in msg for msg in log_messages)
    assert any("Registering webhook route" in msg for msg in log_messages)
    assert any("Scheduling initial index" in msg for msg in log_messages)
    assert any("Server configured successfully" in msg for msg in log_messages)

    # Initial index runs in the background; shutdown waits for it
    indexer.shutdown()
    assert set(indexer.get_all_principles()) == {"alpha", "p"}


def test_create_server_without_webhooks(docs_root: Path, monkeypatch, caplog):
    config = _local_config(monkeypatch, docs_root, webhooks=False)
    indexer = create_indexer(config)

    with caplog.at_level(logging.INFO):
        create_server(config, indexer)
    indexer.shutdown()

    log_messages = [record.message for record in caplog.records]
    assert any("Webhooks disabled" in msg for msg in log_messages)
