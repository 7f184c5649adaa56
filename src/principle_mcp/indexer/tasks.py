"""Spawn-and-join primitive used by the crawler.

The crawler spawns one task per directory and joins a directory's children
before assembling it. Tasks are submitted to a shared thread pool; when a
group is joined, any child no worker has picked up yet runs on the joining
thread instead. A parent therefore never waits on a task that is stuck in
the queue behind other waiting parents, and the pool size only bounds how
many directories are read at once.
"""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

logger = logging.getLogger(__name__)


class _Task:
    """A unit of work that runs exactly once, on whichever thread claims it."""

    def __init__(self, fn: Callable[..., Any], args: tuple):
        self.future: Future = Future()
        self._fn = fn
        self._args = args
        self._claimed = False
        self._lock = threading.Lock()

    def run(self) -> None:
        with self._lock:
            if self._claimed:
                return
            self._claimed = True

        try:
            result = self._fn(*self._args)
        except Exception as e:
            self.future.set_exception(e)
        except BaseException as e:
            # Resolve the future so joiners wake up, then let it propagate
            self.future.set_exception(e)
            raise
        else:
            self.future.set_result(result)


class TaskGroup:
    """Tasks spawned for one parent; leaving the ``with`` block joins them all.

    Usage:
        with runner.group() as group:
            futures = [group.spawn(work, item) for item in items]
        results = [f.result() for f in futures]
    """

    def __init__(self, executor: ThreadPoolExecutor | None):
        self._executor = executor
        self._tasks: list[_Task] = []

    def spawn(self, fn: Callable[..., Any], *args: Any) -> Future:
        """Schedule ``fn(*args)`` and return a future for its result."""
        task = _Task(fn, args)
        self._tasks.append(task)
        if self._executor is None:
            task.run()
        else:
            self._executor.submit(task.run)
        return task.future

    def join(self) -> None:
        """Block until every spawned task has finished."""
        for task in self._tasks:
            task.run()  # No-op if a worker already claimed it
            task.future.exception()  # Waits without raising

    def __enter__(self) -> "TaskGroup":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.join()


class TaskRunner:
    """Owns the worker pool that task groups submit to.

    Thread Safety:
        Groups may be created and joined from any thread, including pool
        workers, which is how recursion happens.
    """

    def __init__(self, max_workers: int = 16):
        """
        Args:
            max_workers: Size of the worker pool. 0 runs every task inline
                on the spawning thread.
        """
        if max_workers < 0:
            raise ValueError(f"max_workers must be >= 0, got {max_workers}")

        self.max_workers = max_workers
        self._executor: ThreadPoolExecutor | None = None
        if max_workers > 0:
            self._executor = ThreadPoolExecutor(
                max_workers=max_workers,
                thread_name_prefix="principle-crawl",
            )

    def group(self) -> TaskGroup:
        return TaskGroup(self._executor)

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            logger.debug("Task runner shut down")
