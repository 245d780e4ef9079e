"""Interfaces consumed from the opaque slide rendering engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class RendererOptions:
    """Construction options for an engine instance."""

    anchor: Any
    interactive: bool = True
    resizable: bool = True
    controller: bool = False


@dataclass(frozen=True)
class SlideState:
    """Engine-reported position plus the resource it renders."""

    task_id: Optional[str] = None
    url: Optional[str] = None
    current_slide_index: Optional[int] = None


@runtime_checkable
class RendererEngine(Protocol):
    """Minimal surface the synchronization core needs from an engine."""

    slide_count: int
    width: int
    height: int

    @property
    def slide_state(self) -> SlideState: ...

    def render_slide(self, page: int) -> None: ...

    def set_resource(self, task_id: str, url: str) -> None: ...

    def set_slide_state(self, state: SlideState) -> None: ...

    def on(self, name: str, handler: Callable[[Any], None]) -> None: ...

    def off(self, name: str, handler: Callable[[Any], None]) -> None: ...

    def emit(self, name: str, payload: Any = None) -> None: ...

    def destroy(self) -> None: ...


EngineFactory = Callable[[RendererOptions], RendererEngine]


__all__ = [
    "EngineFactory",
    "RendererEngine",
    "RendererOptions",
    "SlideState",
]
