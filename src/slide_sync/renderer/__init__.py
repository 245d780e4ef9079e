"""Renderer adapter layer: engine protocol, typed events and the headless engine."""

from .adapter import RendererAdapter
from .engine import EngineFactory, RendererEngine, RendererOptions, SlideState
from .events import (
    EventChannel,
    MainSeqStepEnd,
    MainSeqStepStart,
    RenderEnd,
    RenderError,
    RenderStart,
    RendererEvent,
    SlideChange,
    SyncDispatch,
    SyncReceive,
)
from .headless import HeadlessEngine

__all__ = [
    "EngineFactory",
    "EventChannel",
    "HeadlessEngine",
    "MainSeqStepEnd",
    "MainSeqStepStart",
    "RenderEnd",
    "RenderError",
    "RenderStart",
    "RendererAdapter",
    "RendererEngine",
    "RendererEvent",
    "RendererOptions",
    "SlideChange",
    "SlideState",
    "SyncDispatch",
    "SyncReceive",
]
