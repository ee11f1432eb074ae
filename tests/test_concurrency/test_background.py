"""Tests for the background task queue."""

import asyncio

from inboxai.concurrency.background import BackgroundTasks


class TestBackgroundTasks:
    async def test_drain_runs_submitted_work(self):
        tasks = BackgroundTasks()
        done = []

        async def work(n):
            await asyncio.sleep(0)
            done.append(n)

        tasks.submit(work(1))
        tasks.submit(work(2))
        assert tasks.pending == 2
        await tasks.drain()
        assert sorted(done) == [1, 2]
        assert tasks.pending == 0

    async def test_failures_are_counted_not_raised(self):
        tasks = BackgroundTasks()

        async def boom():
            raise RuntimeError("write failed")

        tasks.submit(boom(), label="cache write")
        await tasks.drain()
        assert tasks.failed == 1

    async def test_drain_waits_for_tasks_submitted_while_draining(self):
        tasks = BackgroundTasks()
        done = []

        async def child():
            done.append("child")

        async def parent():
            await asyncio.sleep(0)
            tasks.submit(child())
            done.append("parent")

        tasks.submit(parent())
        await tasks.drain()
        assert done == ["parent", "child"]

    async def test_drain_when_idle(self):
        await BackgroundTasks().drain()
