"""Adapter that owns one engine and exposes typed lifecycle events."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Type, TypeVar

from slide_sync.disposal import DisposalScope
from slide_sync.errors import RendererDestroyedError
from slide_sync.renderer.engine import RendererEngine, SlideState
from slide_sync.renderer.events import (
    ENGINE_EVENT_NAMES,
    SYNC_RECEIVE_EVENT,
    EventChannel,
    decode_engine_event,
)

logger = logging.getLogger(__name__)

E = TypeVar("E")


class RendererAdapter:
    """Wrap an opaque :class:`RendererEngine`.

    The adapter attaches one listener per engine event name at construction
    and republishes decoded events on its :class:`EventChannel`.  All engine
    listener registrations are released together by :meth:`destroy`.
    """

    def __init__(self, engine: RendererEngine, *, log_events: bool = False) -> None:
        self._engine = engine
        self._log_events = bool(log_events)
        self._events = EventChannel()
        self._scope = DisposalScope("renderer")
        self._destroyed = False
        for kind, name in ENGINE_EVENT_NAMES.items():
            self._bind(kind, name)

    # ------------------------------------------------------------------ wiring
    def _bind(self, kind: type, name: str) -> None:
        engine = self._engine

        def _forward(raw: Any = None) -> None:
            self._forward(kind, raw)

        engine.on(name, _forward)
        self._scope.add(lambda: engine.off(name, _forward), key=f"engine:{name}")

    def _forward(self, kind: type, raw: Any) -> None:
        if self._destroyed:
            return
        try:
            event = decode_engine_event(kind, raw)
        except ValueError:
            logger.debug("dropping malformed engine event %s: %r", kind.__name__, raw, exc_info=True)
            return
        if self._log_events:
            logger.info("renderer event: %s", event)
        self._events.publish(event)

    # ------------------------------------------------------------------ events
    def subscribe(self, kind: Type[E], handler: Callable[[E], None]) -> Callable[[], None]:
        """Subscribe to typed events; the returned callable detaches the handler."""

        self._ensure_alive()
        return self._events.subscribe(kind, handler)

    @property
    def events(self) -> EventChannel:
        return self._events

    # -------------------------------------------------------------- properties
    @property
    def engine(self) -> RendererEngine:
        return self._engine

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def page_count(self) -> int:
        if self._destroyed:
            return 0
        count = getattr(self._engine, "slide_count", 0)
        return int(count) if count else 0

    @property
    def current_page(self) -> Optional[int]:
        if self._destroyed:
            return None
        index = self.slide_state.current_slide_index
        return int(index) if index is not None else None

    @property
    def slide_state(self) -> SlideState:
        return self._engine.slide_state

    @property
    def width(self) -> int:
        return int(self._engine.width)

    @property
    def height(self) -> int:
        return int(self._engine.height)

    # -------------------------------------------------------------- operations
    def render_page(self, page: int) -> None:
        self._ensure_alive()
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("render_page: page=%d current=%s", page, self.current_page)
        self._engine.render_slide(int(page))

    def set_resource(self, task_id: str, url: str) -> None:
        self._ensure_alive()
        self._engine.set_resource(task_id, url)

    def set_state(self, state: SlideState) -> None:
        self._ensure_alive()
        self._engine.set_slide_state(state)

    def receive_sync(self, payload: Any) -> None:
        """Inject a peer sync payload into the engine."""

        self._ensure_alive()
        self._engine.emit(SYNC_RECEIVE_EVENT, payload)

    def destroy(self) -> None:
        """Detach every engine listener and destroy the engine (idempotent)."""

        if self._destroyed:
            return
        self._destroyed = True
        try:
            self._scope.flush()
        finally:
            self._events.clear()
            self._engine.destroy()

    def _ensure_alive(self) -> None:
        if self._destroyed:
            raise RendererDestroyedError("renderer adapter already destroyed")


__all__ = ["RendererAdapter"]
