"""One-shot readiness signal for renderer initialisation.

The engine exposes no reliable "metadata loaded" event, so the monitor polls
its predicate on a fixed interval.  Callers may also call :meth:`check` from
any lifecycle event they observe; whichever path sees the predicate first
resolves the future.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_POLL_INTERVAL_S = 0.5


class ReadinessMonitor(Generic[T]):
    """Resolve ``ready`` with ``value`` the first time ``predicate()`` is true."""

    def __init__(
        self,
        predicate: Callable[[], bool],
        value: T,
        *,
        poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        log_readiness: bool = False,
    ) -> None:
        if poll_interval_s <= 0.0:
            raise ValueError("poll interval must be positive")
        self._predicate = predicate
        self._value = value
        self._interval = float(poll_interval_s)
        self._loop = loop if loop is not None else asyncio.get_running_loop()
        self._log_readiness = bool(log_readiness)
        self._handle: Optional[asyncio.TimerHandle] = None
        self._polls = 0
        self._stopped = False
        self.ready: asyncio.Future[T] = self._loop.create_future()

    @property
    def polls(self) -> int:
        return self._polls

    @property
    def resolved(self) -> bool:
        return self.ready.done() and not self.ready.cancelled()

    def start(self) -> None:
        """Check once now and keep polling until resolved or stopped."""

        if self._stopped or self.ready.done():
            return
        self._poll()

    def check(self) -> bool:
        """Resolve the future if the predicate holds; returns readiness."""

        if self.ready.done():
            return self.resolved
        if not self._predicate():
            return False
        self.ready.set_result(self._value)
        self._cancel_timer()
        if self._log_readiness:
            logger.info("renderer ready after %d poll(s)", self._polls)
        return True

    def stop(self) -> None:
        """Stop polling; an unresolved future is cancelled."""

        self._stopped = True
        self._cancel_timer()
        if not self.ready.done():
            self.ready.cancel()

    def _poll(self) -> None:
        self._handle = None
        if self._stopped:
            return
        self._polls += 1
        if self.check():
            return
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("renderer not ready (poll %d); retrying in %.3fs", self._polls, self._interval)
        self._handle = self._loop.call_later(self._interval, self._poll)

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


__all__ = ["DEFAULT_POLL_INTERVAL_S", "ReadinessMonitor"]
