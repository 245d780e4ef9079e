"""Headless engine that renders nothing and lets the caller drive lifecycle.

Used by single-process hosts, smoke runs and tests.  ``render_slide`` only
records the request; :meth:`HeadlessEngine.finish_render` and
:meth:`HeadlessEngine.fail_render` deliver the completion callbacks a real
engine would emit asynchronously.  A ``render_slide`` issued while a render is
pending redirects it without a second ``renderStart``.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional

from slide_sync.renderer.engine import RendererOptions, SlideState


class HeadlessEngine:
    def __init__(
        self,
        options: Optional[RendererOptions] = None,
        *,
        slide_count: int = 0,
        width: int = 1280,
        height: int = 720,
    ) -> None:
        self.options = options or RendererOptions(anchor=None)
        self.slide_count = int(slide_count)
        self.width = int(width)
        self.height = int(height)
        self.render_calls: List[int] = []
        self.received_sync: List[Any] = []
        self.pending_page: Optional[int] = None
        self.destroyed = False
        self._state = SlideState()
        self._listeners: Dict[str, List[Callable[[Any], None]]] = {}

    # ------------------------------------------------------------- emitter
    def on(self, name: str, handler: Callable[[Any], None]) -> None:
        self._listeners.setdefault(name, []).append(handler)

    def off(self, name: str, handler: Callable[[Any], None]) -> None:
        listeners = self._listeners.get(name)
        if listeners and handler in listeners:
            listeners.remove(handler)

    def emit(self, name: str, payload: Any = None) -> None:
        if name == "syncReceive":
            self.received_sync.append(payload)
        for handler in tuple(self._listeners.get(name, ())):
            handler(payload)

    def listener_count(self) -> int:
        return sum(len(v) for v in self._listeners.values())

    # --------------------------------------------------------------- state
    @property
    def slide_state(self) -> SlideState:
        return self._state

    def set_resource(self, task_id: str, url: str) -> None:
        self._state = replace(self._state, task_id=str(task_id), url=str(url))

    def set_slide_state(self, state: SlideState) -> None:
        previous = self._state.current_slide_index
        self._state = replace(state)
        index = state.current_slide_index
        if index is not None and index != previous:
            self.emit("slideChange", index)

    def load(self, slide_count: int) -> None:
        """Simulate metadata arriving: the deck now reports its page count."""

        self.slide_count = int(slide_count)

    # ----------------------------------------------------------- rendering
    def render_slide(self, page: int) -> None:
        self.render_calls.append(int(page))
        redirect = self.pending_page is not None
        self.pending_page = int(page)
        if not redirect:
            self.emit("renderStart", int(page))

    def finish_render(self) -> Optional[int]:
        page = self.pending_page
        if page is None:
            return None
        self.pending_page = None
        if page != self._state.current_slide_index:
            self._state = replace(self._state, current_slide_index=page)
            self.emit("slideChange", page)
        self.emit("renderEnd", page)
        return page

    def fail_render(self, error: BaseException) -> Optional[int]:
        page = self.pending_page
        self.pending_page = None
        self.emit("renderError", {"error": error, "index": page})
        return page

    def dispatch_sync(self, payload: Any) -> None:
        """Emit an outbound sync event as the engine would mid-animation."""

        self.emit("syncDispatch", payload)

    def destroy(self) -> None:
        self.destroyed = True
        self.pending_page = None
        self._listeners.clear()


__all__ = ["HeadlessEngine"]
