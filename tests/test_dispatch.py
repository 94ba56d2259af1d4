"""Tests for concurrent group dispatch."""

import asyncio
import threading

import pytest

from multilingual_ocr.dispatch import GroupOutcome, dispatch_groups
from multilingual_ocr.reader_cache import ReaderCache

from conftest import FakeBackend, make_line, wait_until


class TestDispatchGroups:
    """Tests for dispatch_groups()."""

    async def test_outcomes_follow_group_order(self):
        """The first group finishes last but is still reported first."""
        groups = [("th", "en"), ("hi", "en"), ("fr", "en")]
        delays = {groups[0]: 0.06, groups[1]: 0.03, groups[2]: 0.0}
        finished: list[tuple[str, ...]] = []

        async def runner(group):
            await asyncio.sleep(delays[group])
            finished.append(group)
            return [make_line(group[0], 0.9, 0, 0, 10, 10)]

        outcomes = await dispatch_groups(groups, runner)

        assert finished == list(reversed(groups))
        assert [o.group for o in outcomes] == groups
        assert [o.lines[0].text for o in outcomes] == ["th", "hi", "fr"]

    async def test_groups_run_concurrently(self):
        started: set[tuple[str, ...]] = set()
        release = asyncio.Event()

        async def runner(group):
            started.add(group)
            await release.wait()
            return []

        task = asyncio.create_task(dispatch_groups([("a",), ("b",)], runner))
        await wait_until(lambda: len(started) == 2)
        release.set()

        outcomes = await task
        assert all(o.succeeded for o in outcomes)

    async def test_failure_is_isolated(self):
        async def runner(group):
            if group == ("hi", "en"):
                raise RuntimeError("reader crashed")
            return [make_line("ok", 0.9, 0, 0, 10, 10)]

        outcomes = await dispatch_groups([("ja", "en"), ("hi", "en"), ("de",)], runner)

        assert [o.succeeded for o in outcomes] == [True, False, True]
        assert isinstance(outcomes[1].error, RuntimeError)
        assert outcomes[1].lines == []
        assert len(outcomes[2].lines) == 1

    async def test_failure_is_logged_with_group(self, caplog):
        async def runner(group):
            raise ValueError("unreadable image")

        outcomes = await dispatch_groups([("ko", "en")], runner)

        assert not outcomes[0].succeeded
        assert "ko, en" in caplog.text
        assert "unreadable image" in caplog.text

    async def test_empty_groups(self):
        async def runner(group):
            raise AssertionError("should not run")

        assert await dispatch_groups([], runner) == []

    async def test_cancellation_reaches_every_group(self):
        started: set[tuple[str, ...]] = set()
        cancelled: set[tuple[str, ...]] = set()

        async def runner(group):
            started.add(group)
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.add(group)
                raise
            return []

        groups = [("a",), ("b",), ("c",)]
        task = asyncio.create_task(dispatch_groups(groups, runner))
        await wait_until(lambda: len(started) == 3)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert cancelled == set(groups)


    async def test_cancelled_reader_init_does_not_cancel_other_call(self):
        """A group whose reader init was abandoned by another call still completes."""
        gate = threading.Event()
        backend = FakeBackend(create_gate=gate)
        cache = ReaderCache(backend)

        async def runner(group):
            await cache.acquire(group, False)
            return [make_line(group[0], 0.9, 0, 0, 10, 10)]

        abandoned = asyncio.create_task(cache.acquire(["ja"], False))
        await wait_until(lambda: len(backend.created) == 1)
        abandoned.cancel()
        await asyncio.sleep(0)

        dispatch = asyncio.create_task(dispatch_groups([("ja",)], runner))
        await wait_until(lambda: len(backend.created) == 2)
        gate.set()

        outcomes = await dispatch
        assert outcomes[0].succeeded
        assert outcomes[0].lines[0].text == "ja"
        with pytest.raises(asyncio.CancelledError):
            await abandoned


class TestGroupOutcome:
    """Tests for GroupOutcome."""

    def test_succeeded(self):
        assert GroupOutcome(group=("en",)).succeeded
        assert not GroupOutcome(group=("en",), error=RuntimeError("x")).succeeded
