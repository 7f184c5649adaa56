"""Tests for the spawn-and-join task runner."""

import threading

import pytest

from principle_mcp.indexer.tasks import TaskRunner, _Task


@pytest.fixture(params=[0, 1, 4], ids=["inline", "one-worker", "four-workers"])
def runner(request):
    runner = TaskRunner(max_workers=request.param)
    yield runner
    runner.shutdown()


class TestTaskRunner:
    def test_rejects_negative_workers(self):
        with pytest.raises(ValueError, match="max_workers must be >= 0"):
            TaskRunner(max_workers=-1)

    def test_results(self, runner: TaskRunner):
        with runner.group() as group:
            futures = [group.spawn(lambda n: n * n, n) for n in range(10)]

        assert [f.result() for f in futures] == [n * n for n in range(10)]

    def test_all_done_after_block(self, runner: TaskRunner):
        with runner.group() as group:
            futures = [group.spawn(lambda: None) for _ in range(20)]

        assert all(f.done() for f in futures)

    def test_exception_is_kept_on_its_future(self, runner: TaskRunner):
        def boom():
            raise RuntimeError("boom")

        with runner.group() as group:
            bad = group.spawn(boom)
            good = group.spawn(lambda: "ok")

        assert isinstance(bad.exception(), RuntimeError)
        assert good.result() == "ok"

    def test_interrupt_resolves_future_then_propagates(self):
        def interrupted():
            raise KeyboardInterrupt

        task = _Task(interrupted, ())
        with pytest.raises(KeyboardInterrupt):
            task.run()

        assert task.future.done()
        assert isinstance(task.future.exception(timeout=1), KeyboardInterrupt)

    def test_each_task_runs_once(self, runner: TaskRunner):
        calls = []
        lock = threading.Lock()

        def record(n):
            with lock:
                calls.append(n)

        with runner.group() as group:
            for n in range(50):
                group.spawn(record, n)

        assert sorted(calls) == list(range(50))

    def test_nested_groups_do_not_deadlock(self, runner: TaskRunner):
        """Parents waiting on children must finish even with a single worker."""

        def tree_size(depth: int) -> int:
            if depth == 0:
                return 1
            with runner.group() as group:
                futures = [group.spawn(tree_size, depth - 1) for _ in range(3)]
            return 1 + sum(f.result() for f in futures)

        # 1 + 3 + 9 + 27 + 81
        assert tree_size(4) == 121
