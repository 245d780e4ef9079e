from __future__ import annotations

import pytest

from slide_sync.errors import RenderFailure, RendererDestroyedError
from slide_sync.renderer import (
    HeadlessEngine,
    MainSeqStepStart,
    RenderEnd,
    RenderError,
    RendererAdapter,
    RendererEngine,
    RenderStart,
    SlideChange,
    SlideState,
    SyncDispatch,
    SyncReceive,
)
from slide_sync.renderer.events import ENGINE_EVENT_NAMES, EventChannel, decode_engine_event


def test_headless_engine_satisfies_protocol() -> None:
    assert isinstance(HeadlessEngine(), RendererEngine)


def test_engine_events_are_republished_as_typed_events() -> None:
    engine = HeadlessEngine(slide_count=4)
    adapter = RendererAdapter(engine)
    seen: list[object] = []
    for kind in (SlideChange, RenderStart, RenderEnd, SyncDispatch):
        adapter.subscribe(kind, seen.append)

    adapter.render_page(2)
    engine.finish_render()
    engine.dispatch_sync({"k": 1})

    assert seen == [RenderStart(page=2), SlideChange(page=2), RenderEnd(page=2), SyncDispatch(payload={"k": 1})]
    assert adapter.current_page == 2
    assert adapter.page_count == 4


def test_render_error_carries_failure() -> None:
    engine = HeadlessEngine(slide_count=4)
    adapter = RendererAdapter(engine)
    errors: list[RenderError] = []
    adapter.subscribe(RenderError, errors.append)

    adapter.render_page(3)
    cause = OSError("asset missing")
    engine.fail_render(cause)

    assert len(errors) == 1
    failure = errors[0].failure
    assert isinstance(failure, RenderFailure)
    assert failure.cause is cause
    assert errors[0].page == 3
    assert "asset missing" in str(failure)


def test_receive_sync_reaches_engine_and_subscribers() -> None:
    engine = HeadlessEngine(slide_count=1)
    adapter = RendererAdapter(engine)
    received: list[SyncReceive] = []
    adapter.subscribe(SyncReceive, received.append)

    adapter.receive_sync({"frame": 12})

    assert engine.received_sync == [{"frame": 12}]
    assert received == [SyncReceive(payload={"frame": 12})]


def test_malformed_engine_event_is_dropped() -> None:
    engine = HeadlessEngine(slide_count=1)
    adapter = RendererAdapter(engine)
    seen: list[SlideChange] = []
    adapter.subscribe(SlideChange, seen.append)

    engine.emit("slideChange", "not-a-page")
    engine.emit("slideChange", {"index": 1})

    assert seen == [SlideChange(page=1)]


def test_unsubscribe_and_destroy_release_engine_listeners() -> None:
    engine = HeadlessEngine(slide_count=2)
    adapter = RendererAdapter(engine)
    assert engine.listener_count() == len(ENGINE_EVENT_NAMES)
    seen: list[object] = []
    dispose = adapter.subscribe(MainSeqStepStart, seen.append)
    dispose()
    engine.emit("mainSeqStepStart", {"step": 1})
    assert seen == []

    adapter.destroy()
    adapter.destroy()

    assert engine.destroyed is True
    assert engine.listener_count() == 0
    assert adapter.page_count == 0
    assert adapter.current_page is None
    with pytest.raises(RendererDestroyedError):
        adapter.render_page(1)
    with pytest.raises(RendererDestroyedError):
        adapter.subscribe(SlideChange, seen.append)


def test_set_state_and_resource_pass_through() -> None:
    engine = HeadlessEngine(slide_count=5)
    adapter = RendererAdapter(engine)

    adapter.set_resource("task", "https://cdn")
    adapter.set_state(SlideState(task_id="task", url="https://cdn", current_slide_index=4))

    assert adapter.slide_state.current_slide_index == 4
    assert adapter.current_page == 4


def test_event_channel_dispatches_by_type() -> None:
    channel = EventChannel()
    starts: list[RenderStart] = []
    ends: list[RenderEnd] = []
    channel.subscribe(RenderStart, starts.append)
    channel.subscribe(RenderEnd, ends.append)

    channel.publish(RenderStart(1))
    channel.publish(RenderEnd(1))
    channel.publish(SyncDispatch("ignored"))

    assert starts == [RenderStart(1)]
    assert ends == [RenderEnd(1)]
    assert channel.listener_count() == 2
    with pytest.raises(ValueError):
        decode_engine_event(int, None)
