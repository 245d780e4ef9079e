from __future__ import annotations

"""Central debug/logging policy plumbing for slide-sync."""

import json
import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoggingToggles:
    log_navigation: bool = False
    log_sync: bool = False
    log_scene: bool = False
    log_readiness: bool = False
    log_transport: bool = False
    log_events: bool = False


@dataclass(frozen=True)
class DebugPolicy:
    enabled: bool
    logging: LoggingToggles


_LOG_FLAG_MAP: dict[str, Iterable[str]] = {
    "nav": ("log_navigation",),
    "navigation": ("log_navigation",),
    "sync": ("log_sync",),
    "scene": ("log_scene",),
    "ready": ("log_readiness",),
    "transport": ("log_transport",),
    "events": ("log_events",),
    "all": tuple(LoggingToggles.__annotations__.keys()),
}

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def _coerce_bool(value: object, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        val = value.strip().lower()
        if val in _TRUTHY:
            return True
        if val in _FALSY:
            return False
    return default


def _coerce_int(value: object, default: int = 0) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return int(default)
    return int(default)


def _coerce_float(value: object, default: float = 0.0) -> float:
    if isinstance(value, bool):
        return float(int(value))
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return float(default)
    return float(default)


def _split_flags(raw: object) -> set[str]:
    result: set[str] = set()
    items: Iterable[object]
    if raw is None:
        return result
    if isinstance(raw, str):
        items = raw.split(",")
    elif isinstance(raw, Iterable):
        items = raw
    else:
        return result
    for item in items:
        token = str(item).strip().lower()
        if token:
            result.add(token)
    return result


def _load_debug_config(env: Mapping[str, str]) -> tuple[bool, dict[str, object]]:
    raw = env.get("SLIDE_SYNC_DEBUG")
    if raw is None:
        return False, {}
    raw_str = raw.strip()
    if raw_str.lower() in _FALSY:
        return False, {}
    if raw_str.lower() in _TRUTHY:
        return True, {}
    try:
        parsed = json.loads(raw_str)
    except ValueError:
        logger.debug("Failed to parse SLIDE_SYNC_DEBUG JSON; treating as flag list", exc_info=True)
        return True, {"flags": raw_str}
    if isinstance(parsed, dict):
        enabled = _coerce_bool(parsed.get("enabled", True), True)
        return enabled, parsed
    if isinstance(parsed, (list, tuple)):
        return True, {"flags": parsed}
    return True, {"flags": raw_str}


def load_debug_policy(env: Optional[Mapping[str, str]] = None) -> DebugPolicy:
    """Resolve ``SLIDE_SYNC_DEBUG`` into per-concern logging toggles.

    Accepted forms: a truthy/falsy word, a comma separated flag list
    (``nav,sync,scene,ready,transport,events`` or ``all``), or a JSON object
    ``{"enabled": true, "flags": [...]}``.  Individual ``SLIDE_SYNC_LOG_*``
    variables switch single toggles on regardless of the flag list.
    """

    if env is None:
        env = os.environ
    enabled, cfg = _load_debug_config(env)

    flags = _split_flags(cfg.get("flags")) if enabled else set()

    log_kwargs = {name: False for name in LoggingToggles.__annotations__.keys()}
    for flag, attrs in _LOG_FLAG_MAP.items():
        if flag in flags:
            for attr in attrs:
                log_kwargs[attr] = True

    for attr in log_kwargs:
        env_name = "SLIDE_SYNC_" + attr.upper()
        if _coerce_bool(env.get(env_name), False):
            log_kwargs[attr] = True

    return DebugPolicy(enabled=enabled, logging=LoggingToggles(**log_kwargs))


__all__ = [
    "DebugPolicy",
    "LoggingToggles",
    "load_debug_policy",
]
