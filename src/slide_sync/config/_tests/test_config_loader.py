from __future__ import annotations

import json

from slide_sync.config import load_config, load_debug_policy


def test_debug_policy_defaults() -> None:
    policy = load_debug_policy({})
    assert policy.enabled is False
    assert policy.logging.log_navigation is False
    assert policy.logging.log_sync is False
    assert policy.logging.log_scene is False


def test_debug_policy_flag_list() -> None:
    policy = load_debug_policy({"SLIDE_SYNC_DEBUG": "nav, scene"})
    assert policy.enabled is True
    assert policy.logging.log_navigation is True
    assert policy.logging.log_scene is True
    assert policy.logging.log_sync is False


def test_debug_policy_json_and_individual_overrides() -> None:
    env = {
        "SLIDE_SYNC_DEBUG": json.dumps({"enabled": True, "flags": ["sync"]}),
        "SLIDE_SYNC_LOG_READINESS": "yes",
    }
    policy = load_debug_policy(env)
    assert policy.logging.log_sync is True
    assert policy.logging.log_readiness is True
    assert policy.logging.log_transport is False


def test_debug_policy_all_and_disabled() -> None:
    everything = load_debug_policy({"SLIDE_SYNC_DEBUG": "all"})
    assert all(vars(everything.logging).values())

    disabled = load_debug_policy({"SLIDE_SYNC_DEBUG": json.dumps({"enabled": False, "flags": ["nav"]})})
    assert disabled.enabled is False
    assert disabled.logging.log_navigation is False


def test_load_config_defaults() -> None:
    cfg = load_config({})
    assert cfg.ready_poll_interval_s == 0.5
    assert cfg.initial_page == 1
    assert cfg.controller is False
    assert cfg.renderer.interactive is True
    assert cfg.renderer.resizable is True
    assert cfg.channel_prefix == "slide-sync"
    assert cfg.hub.host == "127.0.0.1"
    assert cfg.hub.port == 8765
    assert cfg.debug_policy.enabled is False


def test_load_config_env_overrides() -> None:
    env = {
        "SLIDE_SYNC_READY_POLL_MS": "250",
        "SLIDE_SYNC_INITIAL_PAGE": "4",
        "SLIDE_SYNC_CONTROLLER": "1",
        "SLIDE_SYNC_INTERACTIVE": "off",
        "SLIDE_SYNC_CHANNEL_PREFIX": "room-42",
        "SLIDE_SYNC_HUB_HOST": "0.0.0.0",
        "SLIDE_SYNC_HUB_PORT": "9001",
        "SLIDE_SYNC_DEBUG": "transport",
    }
    cfg = load_config(env)
    assert cfg.ready_poll_interval_s == 0.25
    assert cfg.initial_page == 4
    assert cfg.controller is True
    assert cfg.renderer.interactive is False
    assert cfg.channel_prefix == "room-42"
    assert cfg.hub.host == "0.0.0.0"
    assert cfg.hub.port == 9001
    assert cfg.debug_policy.logging.log_transport is True


def test_load_config_tolerates_bad_values() -> None:
    env = {
        "SLIDE_SYNC_READY_POLL_MS": "soon",
        "SLIDE_SYNC_INITIAL_PAGE": "-3",
        "SLIDE_SYNC_HUB_PORT": "700000",
    }
    cfg = load_config(env)
    assert cfg.ready_poll_interval_s == 0.5
    assert cfg.initial_page == 1
    assert cfg.hub.port == 8765
