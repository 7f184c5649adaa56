"""Reindex coordinator: keeps the principle cache in step with the content source."""

import logging
import threading
import time
from collections.abc import Callable, Iterable, Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from principle_mcp.indexer.cache import PrincipleCache
from principle_mcp.indexer.crawler import Crawler
from principle_mcp.indexer.errors import IndexingError
from principle_mcp.indexer.models import Principle
from principle_mcp.indexer.source import ContentSource
from principle_mcp.indexer.tasks import TaskRunner

logger = logging.getLogger(__name__)

# Background jobs are few and long-lived; crawl work runs on the TaskRunner pool.
BACKGROUND_WORKERS = 2


class Indexer:
    """
    Indexer that mirrors the documentation tree into a PrincipleCache.

    The content source is always the source of truth. The cache is a derived
    index that is rebuilt on every start and refreshed per principle when
    change notifications arrive.

    Thread Safety:
        The cache is the only shared state and is safe for concurrent use.
        Full and selective runs may overlap; the last write per name wins.
    """

    def __init__(
        self,
        source: ContentSource,
        cache: PrincipleCache | None = None,
        runner: TaskRunner | None = None,
    ):
        """
        Initialize the indexer.

        Args:
            source: Content source to crawl
            cache: Cache to populate (a new one if omitted)
            runner: Task runner for crawl work (16 workers if omitted)
        """
        self.source = source
        self.cache = cache if cache is not None else PrincipleCache()
        self.runner = runner if runner is not None else TaskRunner()
        self.crawler = Crawler(source, self.runner)
        self._background = ThreadPoolExecutor(
            max_workers=BACKGROUND_WORKERS,
            thread_name_prefix="principle-index",
        )
        self._active_jobs = 0
        self._jobs_lock = threading.Lock()

    def shutdown(self) -> None:
        """Wait for running jobs, then stop all worker threads."""
        self._background.shutdown(wait=True)
        self.runner.shutdown()
        logger.info("Indexer shut down")

    def _log_quota(self, stage: str) -> None:
        remaining = self.source.remaining_quota()
        if remaining is not None:
            logger.info("%s, remaining rate limit: %d", stage, remaining)
        else:
            logger.info(stage)

    def full_index(self) -> int:
        """
        Crawl the whole tree and write each principle to the cache as it completes.

        Cache entries whose directory no longer exists at the root are removed.
        If the root cannot be listed the cache is left as it was.

        Returns the number of principles indexed.
        """
        self._log_quota("Starting full index")
        start = time.monotonic()

        try:
            entries = self.crawler.root_entries()
        except IndexingError as e:
            logger.error("Full index failed, cannot list the root: %s", e)
            return 0

        # Only entries present before the crawl are candidates for removal
        before = self.cache.get_all()
        listed = {entry.name for entry in entries}

        principles = self.crawler.crawl_entries(entries, on_principle=self.cache.put)

        stale = {name: before[name] for name in before if name not in listed}
        removed = self.cache.remove_unchanged(stale)
        if removed:
            logger.info("Removed principles no longer in the source: %s", sorted(removed))

        elapsed_ms = (time.monotonic() - start) * 1000
        logger.info("Indexed %d principles in %.0f ms", len(principles), elapsed_ms)
        self._log_quota("Full index complete")
        return len(principles)

    def reindex(self, names: Iterable[str]) -> tuple[list[str], list[str]]:
        """
        Re-crawl the given principles, each independently.

        A success replaces that cache entry; a failure keeps the previous
        entry (if any) and is logged.

        Returns:
            Tuple of (reindexed, failed) principle names.
        """
        names = sorted(set(names))
        logger.info("Starting selective reindex of %d principles", len(names))
        start = time.monotonic()

        with self.runner.group() as group:
            futures = {name: group.spawn(self.crawler.crawl_one, name) for name in names}

        reindexed: list[str] = []
        failed: list[str] = []
        for name, future in futures.items():
            error = future.exception()
            if error is None:
                self.cache.put(name, future.result())
                reindexed.append(name)
                logger.info("Principle %s reindexed", name)
            else:
                failed.append(name)
                logger.error("Failed to reindex principle %s: %s", name, error)

        elapsed_ms = (time.monotonic() - start) * 1000
        logger.info(
            "Reindexed %d principles in %.0f ms (%d failed)",
            len(reindexed),
            elapsed_ms,
            len(failed),
        )
        return reindexed, failed

    def _submit(self, description: str, fn: Callable[..., Any], *args: Any) -> Future:
        def run() -> Any:
            with self._jobs_lock:
                self._active_jobs += 1
            try:
                return fn(*args)
            except Exception:
                logger.exception("Error during %s", description)
                return None
            finally:
                with self._jobs_lock:
                    self._active_jobs -= 1

        return self._background.submit(run)

    def trigger_full_index(self) -> Future:
        """Start a full index in the background and return immediately."""
        return self._submit("full index", self.full_index)

    def index_on_startup(self) -> Future:
        """Kick off the initial crawl once the process has started."""
        logger.info("Scheduling initial index")
        return self.trigger_full_index()

    def trigger_reindex(self, names: Iterable[str]) -> Future | None:
        """Start a selective reindex in the background. No-op for no names."""
        names = set(names)
        if not names:
            logger.debug("No principles to reindex")
            return None
        return self._submit("selective reindex", self.reindex, names)

    # Query methods

    def get_all_principles(self) -> Mapping[str, Principle]:
        """Snapshot of every indexed principle."""
        return self.cache.get_all()

    def get_principle(self, name: str) -> Principle | None:
        return self.cache.get(name)

    def status(self) -> dict:
        """Summary of the index for diagnostics."""
        with self._jobs_lock:
            active = self._active_jobs
        names = sorted(self.cache.names())
        return {
            "principle_count": len(names),
            "principles": names,
            "active_jobs": active,
        }
