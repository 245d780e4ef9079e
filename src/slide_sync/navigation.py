"""Navigation state machine coordinating page requests with a slow renderer.

Rendering a page takes much longer than switching the shared scene, so the
UI is aligned with the renderer rather than with the click stream.  On fast
repeated "next page" clicks only the most recent target matters: the machine
remembers the targeting page and only talks to the renderer when that target
actually changes.

States
- ``IDLE``: no render in flight.
- ``TRANSITIONING``: a render was requested and neither ``RenderEnd`` nor
  ``RenderError`` has been observed yet.

A new target while ``TRANSITIONING`` re-invokes the render operation with the
new page (the engine treats it as a redirection); a repeated target is
dropped.  Requests before readiness are ignored.
"""

from __future__ import annotations

import enum
import logging
from typing import Callable, Optional

from slide_sync.disposal import DisposalScope
from slide_sync.renderer.adapter import RendererAdapter
from slide_sync.renderer.events import RenderEnd, RenderError, SlideChange

logger = logging.getLogger(__name__)


class NavigationState(enum.Enum):
    IDLE = "idle"
    TRANSITIONING = "transitioning"


def clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(int(value), upper))


class NavigationStateMachine:
    """Track the single in-flight target page against the renderer's page."""

    def __init__(
        self,
        renderer: RendererAdapter,
        *,
        is_ready: Optional[Callable[[], bool]] = None,
        on_state_change: Optional[Callable[[NavigationState], None]] = None,
        log_navigation: bool = False,
    ) -> None:
        self._renderer = renderer
        self._is_ready = is_ready if is_ready is not None else (lambda: renderer.page_count > 0)
        self._on_state_change = on_state_change
        self._log_navigation = bool(log_navigation)
        self._state = NavigationState.IDLE
        self._targeting_page: Optional[int] = None
        self._scope = DisposalScope("navigation")

    # ---------------------------------------------------------------- lifecycle
    def attach(self) -> None:
        """Observe renderer settle events."""

        self._scope.add(self._renderer.subscribe(RenderEnd, self._on_render_end), key="render-end")
        self._scope.add(self._renderer.subscribe(RenderError, self._on_render_error), key="render-error")
        self._scope.add(self._renderer.subscribe(SlideChange, self._on_slide_change), key="slide-change")

    def detach(self) -> None:
        self._scope.flush()

    # --------------------------------------------------------------- properties
    @property
    def state(self) -> NavigationState:
        return self._state

    @property
    def is_transitioning(self) -> bool:
        return self._state is NavigationState.TRANSITIONING

    @property
    def targeting_page(self) -> Optional[int]:
        return self._targeting_page

    # --------------------------------------------------------------- public API
    def jump_to_page(self, page: int) -> bool:
        """Request ``page``; returns True when a render call was issued."""

        if not self._is_ready():
            if self._log_navigation:
                logger.info("jump_to_page(%s) ignored: renderer not ready", page)
            return False
        target = clamp(page, 1, self._renderer.page_count)
        if target == self._targeting_page:
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "jump_to_page(%s) suppressed: target=%s state=%s",
                    page,
                    target,
                    self._state.value,
                )
            return False
        redirect = self._state is NavigationState.TRANSITIONING
        self._targeting_page = target
        if self._log_navigation:
            logger.info(
                "jump_to_page: requested=%s target=%d redirect=%s current=%s",
                page,
                target,
                redirect,
                self._renderer.current_page,
            )
        self._set_state(NavigationState.TRANSITIONING)
        try:
            self._renderer.render_page(target)
        except Exception:
            self._settle()
            raise
        return True

    # ------------------------------------------------------------------ events
    def _on_render_end(self, event: RenderEnd) -> None:
        self._settle()

    def _on_render_error(self, event: RenderError) -> None:
        logger.warning("render error: %s", event.failure)
        self._settle()

    def _on_slide_change(self, event: SlideChange) -> None:
        # Page moved without a local request (peer replay); follow it.
        if self._state is NavigationState.IDLE:
            self._targeting_page = event.page

    def _settle(self) -> None:
        current = self._renderer.current_page
        if current is not None:
            self._targeting_page = current
        if self._log_navigation:
            logger.info("navigation settled: page=%s", current)
        self._set_state(NavigationState.IDLE)

    def _set_state(self, state: NavigationState) -> None:
        if state is self._state:
            return
        self._state = state
        if self._on_state_change is not None:
            self._on_state_change(state)


__all__ = ["NavigationState", "NavigationStateMachine", "clamp"]
