"""Broadcast transports for peer sync messages."""

from .local import LocalBroadcastHub, LocalPeer
from .websocket import (
    HubState,
    WebSocketBroadcastTransport,
    decode_message,
    encode_message,
    serve_broadcast_hub,
)

__all__ = [
    "HubState",
    "LocalBroadcastHub",
    "LocalPeer",
    "WebSocketBroadcastTransport",
    "decode_message",
    "encode_message",
    "serve_broadcast_hub",
]
