"""Scoped release of listener registrations and timers.

Every subscription a session makes is recorded as a disposer on one
``DisposalScope`` created at mount; ``flush()`` runs them all exactly once.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Callable, Optional

logger = logging.getLogger(__name__)

Disposer = Callable[[], None]


class DisposalScope:
    """Ordered collection of disposers released together."""

    def __init__(self, name: str = "scope") -> None:
        self._name = name
        self._disposers: "OrderedDict[str, Disposer]" = OrderedDict()
        self._counter = 0
        self._flushed = False

    @property
    def flushed(self) -> bool:
        return self._flushed

    def __len__(self) -> int:
        return len(self._disposers)

    def add(self, disposer: Disposer, key: Optional[str] = None) -> str:
        """Register ``disposer``; a reused ``key`` releases the previous one first."""

        assert callable(disposer), "disposer must be callable"
        if self._flushed:
            # Late registration after teardown: release immediately.
            disposer()
            return key or ""
        if key is None:
            self._counter += 1
            key = f"{self._name}-{self._counter}"
        previous = self._disposers.pop(key, None)
        if previous is not None:
            previous()
        self._disposers[key] = disposer
        return key

    def remove(self, key: str) -> bool:
        """Run and forget a single disposer."""

        disposer = self._disposers.pop(key, None)
        if disposer is None:
            return False
        disposer()
        return True

    def flush(self) -> None:
        """Run every disposer in reverse registration order, exactly once.

        All disposers run even when one raises; the first failure is
        re-raised after the scope is empty.
        """

        if self._flushed:
            return
        self._flushed = True
        first_error: Optional[BaseException] = None
        while self._disposers:
            key, disposer = self._disposers.popitem(last=True)
            try:
                disposer()
            except Exception as exc:
                logger.debug("%s: disposer %s failed", self._name, key, exc_info=True)
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error


__all__ = ["DisposalScope", "Disposer"]
