"""Tests for the concurrent crawler."""

import logging
import threading
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from conftest import practice_meta, principle_meta, write_node
from principle_mcp.indexer.crawler import Crawler
from principle_mcp.indexer.errors import IndexingError, MetadataMalformed, SourceUnavailable
from principle_mcp.indexer.models import Principle
from principle_mcp.indexer.source import LocalContentSource
from principle_mcp.indexer.tasks import TaskRunner


@pytest.fixture(params=[0, 4], ids=["inline", "threaded"])
def runner(request):
    runner = TaskRunner(max_workers=request.param)
    yield runner
    runner.shutdown()


@pytest.fixture
def crawler(docs_root: Path, runner: TaskRunner) -> Crawler:
    return Crawler(LocalContentSource(docs_root), runner)


class TestCrawlOne:
    def test_content_and_metadata(self, crawler: Crawler, docs_root: Path):
        principle = crawler.crawl_one("alpha")

        assert isinstance(principle, Principle)
        assert principle.content == (docs_root / "alpha" / "alpha.md").read_text()
        assert principle.metadata.name == "Alpha"
        assert principle.metadata.owner == "platform-team"
        assert principle.metadata.tags == ("core",)
        assert principle.metadata.value == "Alpha matters"

    def test_practices(self, crawler: Crawler):
        principle = crawler.crawl_one("alpha")

        assert set(principle.practices) == {"testing", "review"}
        testing = principle.practices["testing"]
        assert testing.metadata.metrics == "Testing score"
        assert set(testing.sub_practices) == {"unit"}
        assert principle.practices["review"].sub_practices == {}

    def test_recursive_depth(self, crawler: Crawler):
        principle = crawler.crawl_one("p")

        z = principle.practices["x"].sub_practices["y"].sub_practices["z"]
        assert z.content == "# Z\n"
        assert z.metadata.name == "Z"
        assert z.metadata.metrics == "Z score"
        assert z.sub_practices == {}

    def test_key_casing(self, tmp_path: Path, runner: TaskRunner):
        write_node(tmp_path, "Security", principle_meta("Security"), "# Security\n")
        write_node(tmp_path, "Security/Threat-Modeling", practice_meta("Threat modeling"), "# TM\n")
        crawler = Crawler(LocalContentSource(tmp_path), runner)

        result = crawler.crawl_all()

        assert list(result) == ["Security"]
        assert list(result["Security"].practices) == ["Threat-Modeling"]

    def test_malformed_principle_raises(self, crawler: Crawler):
        with pytest.raises(MetadataMalformed):
            crawler.crawl_one("beta")

    def test_missing_principle_raises(self, crawler: Crawler):
        with pytest.raises(IndexingError):
            crawler.crawl_one("does-not-exist")

    def test_broken_child_is_dropped(self, docs_root: Path, runner: TaskRunner, caplog):
        write_node(docs_root, "alpha/broken", practice_meta("Broken"), None)
        write_node(docs_root, "alpha/broken/below", practice_meta("Below"), "# Below\n")
        write_node(docs_root, "alpha/review/bad", '{"name": 1}', "# Bad\n")
        crawler = Crawler(LocalContentSource(docs_root), runner)

        with caplog.at_level(logging.WARNING):
            principle = crawler.crawl_one("alpha")

        assert set(principle.practices) == {"testing", "review"}
        assert principle.practices["review"].sub_practices == {}
        assert principle.practices["testing"].sub_practices["unit"].content == "# Unit\n"
        messages = " ".join(r.getMessage() for r in caplog.records)
        assert "alpha/broken" in messages
        assert "alpha/review/bad" in messages


class TestCrawlAll:
    def test_failure_isolation(self, crawler: Crawler):
        result = crawler.crawl_all()

        assert set(result) == {"alpha", "p"}
        assert "beta" not in result

    def test_missing_files_exclude_subtree(self, tmp_path: Path, runner: TaskRunner):
        write_node(tmp_path, "alpha", principle_meta("Alpha"), "# Alpha\n")
        write_node(tmp_path, "gamma", principle_meta("Gamma"), None)
        write_node(tmp_path, "gamma/child", practice_meta("Child"), "# Child\n")
        crawler = Crawler(LocalContentSource(tmp_path), runner)

        result = crawler.crawl_all()

        assert set(result) == {"alpha"}

    def test_callback_per_principle(self, crawler: Crawler):
        seen: dict[str, Principle] = {}
        lock = threading.Lock()

        def record(name: str, principle: Principle) -> None:
            with lock:
                seen[name] = principle

        result = crawler.crawl_all(on_principle=record)

        assert seen == result

    def test_empty_root(self, tmp_path: Path, runner: TaskRunner):
        assert Crawler(LocalContentSource(tmp_path), runner).crawl_all() == {}

    def test_unlistable_root_raises(self, runner: TaskRunner):
        source = MagicMock()
        source.list_directory.side_effect = SourceUnavailable("down", "")

        with pytest.raises(SourceUnavailable):
            Crawler(source, runner).crawl_all()

    def test_unexpected_error_in_one_principle(self, docs_root: Path, runner: TaskRunner):
        source = LocalContentSource(docs_root)
        real_read = source.read_file

        def flaky_read(path: str) -> str:
            if path.startswith("p/"):
                raise RuntimeError("unexpected")
            return real_read(path)

        source.read_file = flaky_read  # type: ignore[method-assign]

        result = Crawler(source, runner).crawl_all()

        assert set(result) == {"alpha"}

    def test_unexpected_error_below_a_practice(self, docs_root: Path, runner: TaskRunner, caplog):
        source = LocalContentSource(docs_root)
        real_read = source.read_file

        def flaky_read(path: str) -> str:
            if path.startswith("p/x/y/"):
                raise KeyError(path)
            return real_read(path)

        source.read_file = flaky_read  # type: ignore[method-assign]

        with caplog.at_level(logging.ERROR):
            result = Crawler(source, runner).crawl_all()

        assert set(result) == {"alpha", "p"}
        assert set(result["p"].practices) == {"x"}
        assert result["p"].practices["x"].sub_practices == {}
        assert any("p/x/y" in r.getMessage() for r in caplog.records)

    def test_root_names(self, crawler: Crawler):
        assert crawler.root_names() == {"alpha", "beta", "p"}
