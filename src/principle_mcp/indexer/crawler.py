"""Concurrent crawl of the documentation tree.

Each top-level directory is crawled as an independent task, and each
directory spawns one task per child directory. A directory is assembled as
soon as its own children have resolved, so a slow or failing branch never
holds up the rest of the forest. A failing branch is logged and left out of
its parent.
"""

import logging
from collections.abc import Callable
from typing import cast

from principle_mcp.indexer.errors import IndexingError
from principle_mcp.indexer.models import Node, NodeKind, Practice, Principle
from principle_mcp.indexer.parser import TreeParser
from principle_mcp.indexer.source import ContentSource, DirectoryEntry
from principle_mcp.indexer.tasks import TaskRunner

logger = logging.getLogger(__name__)

ROOT_PATH = ""

PrincipleCallback = Callable[[str, Principle], None]


class Crawler:
    """Turns a content source into principle subtrees."""

    def __init__(self, source: ContentSource, runner: TaskRunner):
        self.source = source
        self.parser = TreeParser(source)
        self.runner = runner

    def root_entries(self) -> list[DirectoryEntry]:
        """Top-level directories. Raises SourceUnavailable if the root cannot be listed."""
        return [e for e in self.source.list_directory(ROOT_PATH) if e.is_directory]

    def root_names(self) -> set[str]:
        return {e.name for e in self.root_entries()}

    def crawl_all(self, on_principle: PrincipleCallback | None = None) -> dict[str, Principle]:
        """
        Crawl every top-level directory.

        Best effort: principles that fail are logged and left out.

        Args:
            on_principle: Called with (name, principle) as each principle
                completes, before the rest of the forest has finished.

        Returns:
            Mapping of directory name to principle for every success.

        Raises:
            SourceUnavailable: If the root directory cannot be listed.
        """
        return self.crawl_entries(self.root_entries(), on_principle)

    def crawl_entries(
        self,
        entries: list[DirectoryEntry],
        on_principle: PrincipleCallback | None = None,
    ) -> dict[str, Principle]:
        """Crawl the given top-level entries, as ``crawl_all`` does for the root."""
        logger.info("Crawling %d principles", len(entries))

        with self.runner.group() as group:
            futures = {
                entry.name: group.spawn(self._crawl_top_level, entry, on_principle)
                for entry in entries
            }

        return {
            name: future.result()
            for name, future in futures.items()
            if future.result() is not None
        }

    def crawl_one(self, name: str) -> Principle:
        """
        Crawl a single principle by its top-level directory name.

        Raises:
            IndexingError: If the principle itself cannot be built.
        """
        return cast(Principle, self._crawl(name.strip("/"), NodeKind.PRINCIPLE))

    def _crawl_top_level(
        self, entry: DirectoryEntry, on_principle: PrincipleCallback | None
    ) -> Principle | None:
        try:
            principle = self.crawl_one(entry.path)
        except IndexingError as e:
            logger.error("Failed to index principle %s: %s", entry.name, e)
            return None
        except Exception:
            logger.exception("Unexpected error indexing principle %s", entry.name)
            return None

        logger.info("Principle %s indexed", entry.name)
        if on_principle is not None:
            on_principle(entry.name, principle)
        return principle

    def _crawl_child(self, entry: DirectoryEntry) -> Practice | None:
        try:
            practice = self._crawl(entry.path, NodeKind.PRACTICE)
        except IndexingError as e:
            logger.warning("Skipping practice %s: %s", e.path or entry.path, e)
            return None
        except Exception:
            logger.exception("Unexpected error indexing practice %s", entry.path)
            return None

        logger.debug("Practice %s indexed", entry.path)
        return cast(Practice, practice)

    def _crawl(self, path: str, kind: NodeKind) -> Node:
        parts = self.parser.read_node(path, kind)

        with self.runner.group() as group:
            futures = {
                entry.name: group.spawn(self._crawl_child, entry)
                for entry in parts.subdirectories
            }

        children = {}
        for name, future in futures.items():
            child = future.result()
            if child is not None:
                children[name] = child

        return self.parser.assemble(kind, parts, children)
