"""Environment loader for :class:`SlideSyncConfig` (no side effects)."""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

from slide_sync.config.logging_policy import (
    _coerce_bool,
    _coerce_float,
    _coerce_int,
    load_debug_policy,
)
from slide_sync.config.models import HubConfig, RendererDefaults, SlideSyncConfig

logger = logging.getLogger(__name__)

_MIN_POLL_INTERVAL_S = 0.01


def _env_str(env: Mapping[str, str], name: str, default: str) -> str:
    v = env.get(name)
    if v is None:
        return default
    v = v.strip()
    return v if v != "" else default


def load_config(env: Optional[Mapping[str, str]] = None) -> SlideSyncConfig:
    """Load configuration from the environment.

    Environment keys consulted:
    - SLIDE_SYNC_READY_POLL_MS
    - SLIDE_SYNC_INITIAL_PAGE, SLIDE_SYNC_CONTROLLER
    - SLIDE_SYNC_INTERACTIVE, SLIDE_SYNC_RESIZABLE
    - SLIDE_SYNC_CHANNEL_PREFIX
    - SLIDE_SYNC_HUB_HOST, SLIDE_SYNC_HUB_PORT
    - SLIDE_SYNC_DEBUG (see :func:`load_debug_policy`)
    """

    if env is None:
        env = os.environ
    defaults = SlideSyncConfig(debug_policy=load_debug_policy({}))

    poll_ms = _coerce_float(env.get("SLIDE_SYNC_READY_POLL_MS"), defaults.ready_poll_interval_s * 1000.0)
    poll_s = max(_MIN_POLL_INTERVAL_S, poll_ms / 1000.0)

    initial_page = max(1, _coerce_int(env.get("SLIDE_SYNC_INITIAL_PAGE"), defaults.initial_page))
    controller = _coerce_bool(env.get("SLIDE_SYNC_CONTROLLER"), defaults.controller)

    renderer = RendererDefaults(
        interactive=_coerce_bool(env.get("SLIDE_SYNC_INTERACTIVE"), defaults.renderer.interactive),
        resizable=_coerce_bool(env.get("SLIDE_SYNC_RESIZABLE"), defaults.renderer.resizable),
    )

    port = _coerce_int(env.get("SLIDE_SYNC_HUB_PORT"), defaults.hub.port)
    if not 0 <= port <= 65535:
        logger.warning("SLIDE_SYNC_HUB_PORT=%s out of range; using %d", port, defaults.hub.port)
        port = defaults.hub.port
    hub = HubConfig(host=_env_str(env, "SLIDE_SYNC_HUB_HOST", defaults.hub.host), port=port)

    cfg = SlideSyncConfig(
        ready_poll_interval_s=poll_s,
        initial_page=initial_page,
        controller=controller,
        channel_prefix=_env_str(env, "SLIDE_SYNC_CHANNEL_PREFIX", defaults.channel_prefix),
        renderer=renderer,
        hub=hub,
        debug_policy=load_debug_policy(env),
    )
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("slide-sync config resolved: %s", cfg)
    return cfg


__all__ = ["load_config"]
