"""Configuration dataclasses shared across the slide-sync package."""

from __future__ import annotations

from dataclasses import dataclass, field

from slide_sync.config.logging_policy import DebugPolicy, load_debug_policy


@dataclass(frozen=True)
class RendererDefaults:
    """Construction flags handed to the renderer engine."""

    interactive: bool = True
    resizable: bool = True


@dataclass(frozen=True)
class HubConfig:
    """Where the websocket broadcast hub listens."""

    host: str = "127.0.0.1"
    port: int = 8765


@dataclass(frozen=True)
class SlideSyncConfig:
    """Top-level configuration values."""

    ready_poll_interval_s: float = 0.5
    initial_page: int = 1
    controller: bool = False
    channel_prefix: str = "slide-sync"
    renderer: RendererDefaults = field(default_factory=RendererDefaults)
    hub: HubConfig = field(default_factory=HubConfig)
    debug_policy: DebugPolicy = field(default_factory=lambda: load_debug_policy({}))
