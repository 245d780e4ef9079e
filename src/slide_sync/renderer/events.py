"""Typed renderer lifecycle and sync events.

Engines emit string-keyed events with loosely shaped payloads; the adapter
decodes each into one of the frozen dataclasses below so subscribers dispatch
on the event type instead of on names.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from numbers import Integral
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar, Union

from slide_sync.errors import RenderFailure


@dataclass(frozen=True)
class SlideChange:
    """The renderer's current page changed."""

    page: int


@dataclass(frozen=True)
class RenderStart:
    page: Optional[int] = None


@dataclass(frozen=True)
class RenderEnd:
    page: Optional[int] = None


@dataclass(frozen=True)
class RenderError:
    failure: RenderFailure

    @property
    def page(self) -> Optional[int]:
        return self.failure.page


@dataclass(frozen=True)
class MainSeqStepStart:
    """An in-page animation step began."""

    step: Optional[int] = None


@dataclass(frozen=True)
class MainSeqStepEnd:
    step: Optional[int] = None


@dataclass(frozen=True)
class SyncDispatch:
    """Renderer produced a state transition that peers must replay."""

    payload: Any


@dataclass(frozen=True)
class SyncReceive:
    """A peer sync payload was injected into the renderer."""

    payload: Any


RendererEvent = Union[
    SlideChange,
    RenderStart,
    RenderEnd,
    RenderError,
    MainSeqStepStart,
    MainSeqStepEnd,
    SyncDispatch,
    SyncReceive,
]

# Engine-side event names, keyed by the typed event they decode into.
ENGINE_EVENT_NAMES: Dict[type, str] = {
    SlideChange: "slideChange",
    RenderStart: "renderStart",
    RenderEnd: "renderEnd",
    RenderError: "renderError",
    MainSeqStepStart: "mainSeqStepStart",
    MainSeqStepEnd: "mainSeqStepEnd",
    SyncDispatch: "syncDispatch",
    SyncReceive: "syncReceive",
}

SYNC_RECEIVE_EVENT = ENGINE_EVENT_NAMES[SyncReceive]


def _optional_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Integral):
        return int(value)
    if isinstance(value, Mapping):
        for key in ("index", "page", "step"):
            if key in value:
                return _optional_int(value[key])
    return None


def decode_engine_event(kind: type, raw: Any) -> RendererEvent:
    """Build the typed event for an engine emission of ``kind``."""

    if kind is SlideChange:
        page = _optional_int(raw)
        if page is None:
            raise ValueError(f"slideChange payload carries no page: {raw!r}")
        return SlideChange(page=page)
    if kind is RenderStart:
        return RenderStart(page=_optional_int(raw))
    if kind is RenderEnd:
        return RenderEnd(page=_optional_int(raw))
    if kind is RenderError:
        cause = raw.get("error", raw) if isinstance(raw, Mapping) else raw
        if cause is None:
            cause = "unknown renderer error"
        return RenderError(failure=RenderFailure(cause, page=_optional_int(raw)))
    if kind is MainSeqStepStart:
        return MainSeqStepStart(step=_optional_int(raw))
    if kind is MainSeqStepEnd:
        return MainSeqStepEnd(step=_optional_int(raw))
    if kind is SyncDispatch:
        return SyncDispatch(payload=raw)
    if kind is SyncReceive:
        return SyncReceive(payload=raw)
    raise ValueError(f"unknown renderer event kind: {kind!r}")


E = TypeVar("E")
Handler = Callable[[Any], None]


class EventChannel:
    """Many-listener dispatch keyed by event type."""

    def __init__(self) -> None:
        self._handlers: Dict[type, List[Handler]] = {}

    def subscribe(self, kind: Type[E], handler: Callable[[E], None]) -> Callable[[], None]:
        """Register ``handler`` for events of ``kind``; returns the disposer."""

        assert kind in ENGINE_EVENT_NAMES, f"unsupported event kind {kind!r}"
        assert callable(handler), "event handler must be callable"
        listeners = self._handlers.setdefault(kind, [])
        listeners.append(handler)

        def _dispose() -> None:
            current = self._handlers.get(kind)
            if current is not None and handler in current:
                current.remove(handler)

        return _dispose

    def publish(self, event: RendererEvent) -> None:
        listeners = self._handlers.get(type(event))
        if not listeners:
            return
        for handler in tuple(listeners):
            handler(event)

    def listener_count(self, kind: Optional[type] = None) -> int:
        if kind is not None:
            return len(self._handlers.get(kind, ()))
        return sum(len(v) for v in self._handlers.values())

    def clear(self) -> None:
        self._handlers.clear()


__all__ = [
    "ENGINE_EVENT_NAMES",
    "EventChannel",
    "MainSeqStepEnd",
    "MainSeqStepStart",
    "RenderEnd",
    "RenderError",
    "RenderStart",
    "RendererEvent",
    "SYNC_RECEIVE_EVENT",
    "SlideChange",
    "SyncDispatch",
    "SyncReceive",
    "decode_engine_event",
]
