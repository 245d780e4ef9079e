"""Shared configuration dataclasses for slide-sync."""

from .logging_policy import DebugPolicy, LoggingToggles, load_debug_policy
from .loader import load_config
from .models import HubConfig, RendererDefaults, SlideSyncConfig

__all__ = [
    "DebugPolicy",
    "HubConfig",
    "LoggingToggles",
    "RendererDefaults",
    "SlideSyncConfig",
    "load_config",
    "load_debug_policy",
]
