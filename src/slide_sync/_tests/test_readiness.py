from __future__ import annotations

import asyncio

import pytest

from slide_sync.readiness import ReadinessMonitor


class _Flag:
    def __init__(self) -> None:
        self.value = False
        self.calls = 0

    def __call__(self) -> bool:
        self.calls += 1
        return self.value


def test_resolves_immediately_when_predicate_already_true() -> None:
    async def _run() -> None:
        flag = _Flag()
        flag.value = True
        monitor = ReadinessMonitor(flag, "controller", poll_interval_s=10.0)
        monitor.start()

        assert monitor.ready.done()
        assert await monitor.ready == "controller"
        assert monitor.polls == 1

    asyncio.run(_run())


def test_polls_until_predicate_holds() -> None:
    async def _run() -> None:
        flag = _Flag()
        monitor = ReadinessMonitor(flag, 42, poll_interval_s=0.01)
        monitor.start()
        await asyncio.sleep(0.05)
        assert not monitor.ready.done()

        flag.value = True
        value = await asyncio.wait_for(monitor.ready, timeout=1.0)

        assert value == 42
        assert monitor.polls >= 2
        polls = monitor.polls
        await asyncio.sleep(0.05)
        # Timer is cancelled after resolution.
        assert monitor.polls == polls

    asyncio.run(_run())


def test_resolves_once_and_every_await_sees_same_value() -> None:
    async def _run() -> None:
        flag = _Flag()
        sentinel = object()
        monitor = ReadinessMonitor(flag, sentinel, poll_interval_s=10.0)
        monitor.start()

        flag.value = True
        assert monitor.check() is True
        assert monitor.check() is True

        results = await asyncio.gather(monitor.ready, monitor.ready, monitor.ready)
        assert all(result is sentinel for result in results)

    asyncio.run(_run())


def test_event_driven_check_beats_the_poll_interval() -> None:
    async def _run() -> None:
        flag = _Flag()
        monitor = ReadinessMonitor(flag, "ok", poll_interval_s=60.0)
        monitor.start()
        flag.value = True

        assert monitor.check() is True
        assert await asyncio.wait_for(monitor.ready, timeout=0.5) == "ok"

    asyncio.run(_run())


def test_stop_cancels_unresolved_future() -> None:
    async def _run() -> None:
        monitor = ReadinessMonitor(_Flag(), "never", poll_interval_s=0.01)
        monitor.start()
        monitor.stop()

        assert monitor.ready.cancelled()
        assert monitor.resolved is False
        with pytest.raises(asyncio.CancelledError):
            await monitor.ready

    asyncio.run(_run())


def test_stop_after_resolution_keeps_value() -> None:
    async def _run() -> None:
        flag = _Flag()
        flag.value = True
        monitor = ReadinessMonitor(flag, "done", poll_interval_s=0.01)
        monitor.start()
        monitor.stop()

        assert await monitor.ready == "done"

    asyncio.run(_run())


def test_rejects_non_positive_interval() -> None:
    async def _run() -> None:
        with pytest.raises(ValueError):
            ReadinessMonitor(_Flag(), None, poll_interval_s=0.0)

    asyncio.run(_run())
