"""Slide controller: one render session composed from the sync components.

The controller owns the renderer adapter for the lifetime of a viewer mount
and wires it to the navigation state machine, the readiness monitor, the
scene reconciler and, when a transport is supplied, the peer sync relay.
Every subscription it makes is released by :meth:`SlideController.destroy`.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

from slide_sync.config import SlideSyncConfig, load_config
from slide_sync.disposal import DisposalScope
from slide_sync.navigation import NavigationState, NavigationStateMachine
from slide_sync.readiness import ReadinessMonitor
from slide_sync.relay import BroadcastTransport, PeerSyncRelay, sync_channel_id
from slide_sync.renderer.adapter import RendererAdapter
from slide_sync.renderer.engine import EngineFactory, RendererOptions, SlideState
from slide_sync.renderer.events import (
    MainSeqStepEnd,
    MainSeqStepStart,
    RenderEnd,
    RenderError,
    RenderStart,
    SlideChange,
    SyncDispatch,
)
from slide_sync.scene import HostRoom, SceneReconciler

logger = logging.getLogger(__name__)


class SlideController:
    """Render session for one mounted slide viewer."""

    def __init__(
        self,
        renderer: RendererAdapter,
        *,
        room: Optional[HostRoom] = None,
        base_scene_path: Optional[str] = None,
        transport: Optional[BroadcastTransport] = None,
        channel_id: Optional[str] = None,
        on_page_changed: Optional[Callable[[int], None]] = None,
        on_transition_start: Optional[Callable[[], None]] = None,
        on_transition_end: Optional[Callable[[], None]] = None,
        on_dispatch_sync_event: Optional[Callable[[Any], None]] = None,
        on_navigation_state: Optional[Callable[[NavigationState], None]] = None,
        initial_state: Optional[SlideState] = None,
        initial_page: Optional[int] = None,
        config: Optional[SlideSyncConfig] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        cfg = config if config is not None else load_config()
        toggles = cfg.debug_policy.logging
        self._config = cfg
        self._renderer = renderer
        self._on_page_changed = on_page_changed
        self._on_transition_start = on_transition_start
        self._on_transition_end = on_transition_end
        self._on_dispatch_sync_event = on_dispatch_sync_event
        self._scope = DisposalScope("controller")
        self._destroyed = False

        self._navigation = NavigationStateMachine(
            renderer,
            is_ready=self.is_ready,
            on_state_change=on_navigation_state,
            log_navigation=toggles.log_navigation,
        )

        self._reconciler: Optional[SceneReconciler] = None
        if room is not None:
            if not base_scene_path:
                raise ValueError("base_scene_path is required when a room is supplied")
            self._reconciler = SceneReconciler(
                room,
                base_scene_path,
                page_count=lambda: renderer.page_count,
                log_scene=toggles.log_scene,
            )

        self._relay: Optional[PeerSyncRelay] = None
        if transport is not None:
            if not channel_id:
                raise ValueError("channel_id is required when a transport is supplied")
            self._relay = PeerSyncRelay(
                renderer,
                transport,
                channel_id,
                deliver=self._replay_sync_event,
                log_sync=toggles.log_sync,
            )

        self._readiness: ReadinessMonitor[SlideController] = ReadinessMonitor(
            self.is_ready,
            self,
            poll_interval_s=cfg.ready_poll_interval_s,
            loop=loop,
            log_readiness=toggles.log_readiness,
        )
        self._readiness.ready.add_done_callback(self._on_ready_resolved)

        # Navigation settles before UI callbacks observe the same event.
        self._navigation.attach()
        self._subscribe(SlideChange, self._handle_slide_change)
        self._subscribe(RenderStart, self._handle_transition_start)
        self._subscribe(MainSeqStepStart, self._handle_transition_start)
        self._subscribe(RenderEnd, self._handle_render_end)
        self._subscribe(MainSeqStepEnd, self._handle_transition_end)
        self._subscribe(RenderError, self._handle_render_error)
        self._subscribe(SyncDispatch, self._handle_sync_dispatch)
        if self._relay is not None:
            self._relay.attach()

        if initial_state is not None:
            renderer.set_state(initial_state)
        else:
            page = initial_page if initial_page is not None else cfg.initial_page
            renderer.render_page(max(1, int(page)))

        self._readiness.start()

    # ---------------------------------------------------------------- wiring
    def _subscribe(self, kind: type, handler: Callable[[Any], None]) -> None:
        self._scope.add(self._renderer.subscribe(kind, handler))

    # ------------------------------------------------------------ properties
    @property
    def ready(self) -> "asyncio.Future[SlideController]":
        """One-shot future resolving to this controller once initialised."""

        return self._readiness.ready

    @property
    def renderer(self) -> RendererAdapter:
        return self._renderer

    @property
    def navigation(self) -> NavigationStateMachine:
        return self._navigation

    @property
    def reconciler(self) -> Optional[SceneReconciler]:
        return self._reconciler

    @property
    def relay(self) -> Optional[PeerSyncRelay]:
        return self._relay

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def slide_count(self) -> int:
        return self._renderer.page_count

    @property
    def current_page(self) -> Optional[int]:
        return self._renderer.current_page

    @property
    def targeting_page(self) -> Optional[int]:
        return self._navigation.targeting_page

    @property
    def is_transitioning(self) -> bool:
        return self._navigation.state is NavigationState.TRANSITIONING

    def is_ready(self) -> bool:
        return not self._destroyed and self._renderer.page_count > 0

    # ------------------------------------------------------------ public API
    def jump_to_page(self, page: int) -> bool:
        if self._destroyed:
            return False
        return self._navigation.jump_to_page(page)

    def receive_sync_event(self, payload: Any) -> bool:
        """Replay a peer's sync payload in the local renderer."""

        if not self.is_ready():
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("sync event ignored: renderer not ready")
            return False
        self._renderer.receive_sync(payload)
        return True

    def destroy(self) -> None:
        """Release every listener, stop polling and destroy the renderer."""

        if self._destroyed:
            return
        self._destroyed = True
        try:
            self._readiness.stop()
            if self._relay is not None:
                self._relay.detach()
            self._navigation.detach()
            self._scope.flush()
        finally:
            self._renderer.destroy()

    # ---------------------------------------------------------------- events
    def _replay_sync_event(self, payload: Any) -> None:
        self.receive_sync_event(payload)

    def _on_ready_resolved(self, future: "asyncio.Future[SlideController]") -> None:
        if future.cancelled() or self._destroyed or self._reconciler is None:
            return
        current = self._renderer.current_page
        last = self._reconciler.last_scene
        if last is None or last.page != current:
            self._reconcile(current)

    def _reconcile(self, page: Optional[int]) -> None:
        if self._reconciler is None or not self.is_ready():
            return
        self._reconciler.sync(page)

    def _handle_slide_change(self, event: SlideChange) -> None:
        self._readiness.check()
        self._reconcile(event.page)
        if self._on_page_changed is not None:
            self._on_page_changed(event.page)

    def _handle_transition_start(self, _event: Any) -> None:
        if self._on_transition_start is not None:
            self._on_transition_start()

    def _handle_transition_end(self, _event: Any) -> None:
        if self._on_transition_end is not None:
            self._on_transition_end()

    def _handle_render_end(self, event: RenderEnd) -> None:
        self._readiness.check()
        if self._reconciler is not None:
            current = self._renderer.current_page
            last = self._reconciler.last_scene
            if last is None or last.page != current:
                self._reconcile(current)
        self._handle_transition_end(event)

    def _handle_render_error(self, event: RenderError) -> None:
        self._handle_transition_end(event)

    def _handle_sync_dispatch(self, event: SyncDispatch) -> None:
        if self._on_dispatch_sync_event is not None:
            self._on_dispatch_sync_event(event.payload)


async def mount_slide_controller(
    anchor: Any,
    task_id: str,
    url: str,
    *,
    engine_factory: EngineFactory,
    controller: Optional[bool] = None,
    initial_state: Optional[SlideState] = None,
    initial_page: Optional[int] = None,
    room: Optional[HostRoom] = None,
    base_scene_path: Optional[str] = None,
    transport: Optional[BroadcastTransport] = None,
    channel_id: Optional[str] = None,
    on_page_changed: Optional[Callable[[int], None]] = None,
    on_transition_start: Optional[Callable[[], None]] = None,
    on_transition_end: Optional[Callable[[], None]] = None,
    on_dispatch_sync_event: Optional[Callable[[Any], None]] = None,
    on_navigation_state: Optional[Callable[[NavigationState], None]] = None,
    config: Optional[SlideSyncConfig] = None,
) -> SlideController:
    """Create an engine bound to ``task_id``/``url`` and wait until it is ready.

    A mount abandoned before the deck loads (cancelled or failed) destroys
    the controller it created.
    """

    cfg = config if config is not None else load_config()
    options = RendererOptions(
        anchor=anchor,
        interactive=cfg.renderer.interactive,
        resizable=cfg.renderer.resizable,
        controller=cfg.controller if controller is None else bool(controller),
    )
    adapter = RendererAdapter(engine_factory(options), log_events=cfg.debug_policy.logging.log_events)
    adapter.set_resource(task_id, url)

    if transport is not None and channel_id is None:
        channel_id = sync_channel_id(cfg.channel_prefix, base_scene_path or task_id)

    slide_controller = SlideController(
        adapter,
        room=room,
        base_scene_path=base_scene_path,
        transport=transport,
        channel_id=channel_id,
        on_page_changed=on_page_changed,
        on_transition_start=on_transition_start,
        on_transition_end=on_transition_end,
        on_dispatch_sync_event=on_dispatch_sync_event,
        on_navigation_state=on_navigation_state,
        initial_state=initial_state,
        initial_page=initial_page,
        config=cfg,
    )
    try:
        return await slide_controller.ready
    except BaseException:
        slide_controller.destroy()
        raise


__all__ = ["SlideController", "mount_slide_controller"]
