"""WebSocket broadcast transport and the hub that fans messages out.

Wire format: one JSON text frame per message,
``{"channel": str, "sender": str, "payload": <json>}``.  The hub relays each
valid frame verbatim to every other connected client; it never interprets
payloads.
"""

from __future__ import annotations

import asyncio
import functools
import json
import logging
import uuid
from contextlib import suppress
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

import websockets
from websockets.exceptions import ConnectionClosed

from slide_sync.errors import TransportClosedError
from slide_sync.relay import MessageHandler, PeerMessage

logger = logging.getLogger(__name__)

_REQUIRED_KEYS = ("channel", "sender", "payload")


def encode_message(message: PeerMessage) -> str:
    return json.dumps(
        {"channel": message.channel_id, "sender": message.sender, "payload": message.payload},
        separators=(",", ":"),
    )


def decode_message(raw: Union[str, bytes]) -> PeerMessage:
    """Parse one wire frame; raises ``ValueError`` on malformed input."""

    if isinstance(raw, (bytes, bytearray)):
        raw = bytes(raw).decode("utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("broadcast frame must be a JSON object")
    missing = [key for key in _REQUIRED_KEYS if key not in data]
    if missing:
        raise ValueError(f"broadcast frame missing fields: {', '.join(missing)}")
    channel = data["channel"]
    sender = data["sender"]
    if not isinstance(channel, str) or not channel:
        raise ValueError("broadcast frame channel must be a non-empty string")
    if not isinstance(sender, str) or not sender:
        raise ValueError("broadcast frame sender must be a non-empty string")
    return PeerMessage(channel_id=channel, sender=sender, payload=data["payload"])


async def safe_send(ws: Any, frame: Any) -> bool:
    """Push one broadcast frame; a peer that cannot take it is closed.

    False means the frame was lost and the socket should be dropped from the
    hub or transport that owns it.
    """

    try:
        await ws.send(frame)
    except Exception:
        logger.debug("broadcast frame send failed; closing peer", exc_info=True)
        with suppress(Exception):
            await ws.close()
        return False
    return True


# ---------------------------------------------------------------------- hub


@dataclass
class HubState:
    """Mutable hub state: connected clients and counters."""

    clients: set = field(default_factory=set)
    relayed: int = 0
    rejected: int = 0
    log_transport: bool = False


async def handle_hub_client(state: HubState, ws: Any) -> None:
    """Relay every valid frame from ``ws`` to all other clients."""

    state.clients.add(ws)
    if state.log_transport:
        logger.info("hub client connected (clients=%d)", len(state.clients))
    try:
        async for raw in ws:
            try:
                message = decode_message(raw)
            except ValueError:
                state.rejected += 1
                logger.debug("hub: rejected malformed frame", exc_info=True)
                continue
            peers = [peer for peer in tuple(state.clients) if peer is not ws]
            for peer in peers:
                if not await safe_send(peer, raw):
                    state.clients.discard(peer)
            state.relayed += 1
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "hub: relayed channel=%s sender=%s to %d peer(s)",
                    message.channel_id,
                    message.sender,
                    len(peers),
                )
    except ConnectionClosed:
        logger.debug("hub client disconnected", exc_info=True)
    finally:
        state.clients.discard(ws)
        if state.log_transport:
            logger.info("hub client gone (clients=%d)", len(state.clients))


async def serve_broadcast_hub(
    host: str,
    port: int,
    *,
    state: Optional[HubState] = None,
) -> tuple[Any, HubState]:
    """Start the hub; returns the websockets server and its state."""

    hub_state = state if state is not None else HubState()
    server = await websockets.serve(functools.partial(handle_hub_client, hub_state), host, port)
    logger.info("broadcast hub listening on %s:%s", host, port)
    return server, hub_state


def bound_port(server: Any) -> int:
    sockets = list(server.sockets or ())
    if not sockets:
        raise RuntimeError("server has no bound sockets")
    return int(sockets[0].getsockname()[1])


# ------------------------------------------------------------------- client


class WebSocketBroadcastTransport:
    """Broadcast transport backed by a connection to the hub.

    ``broadcast`` is synchronous and only enqueues; a sender task drains the
    outbox on the event loop.  Received frames are dispatched to the handlers
    registered for their channel.
    """

    def __init__(self, url: str, *, observer_id: Optional[str] = None, log_transport: bool = False) -> None:
        self._url = url
        self._observer_id = observer_id or uuid.uuid4().hex
        self._log_transport = bool(log_transport)
        self._handlers: Dict[str, List[MessageHandler]] = {}
        self._ws: Any = None
        self._outbox: Optional[asyncio.Queue[str]] = None
        self._reader_task: Optional[asyncio.Task[None]] = None
        self._sender_task: Optional[asyncio.Task[None]] = None
        self._closed = False

    @property
    def observer_id(self) -> str:
        return self._observer_id

    @property
    def url(self) -> str:
        return self._url

    @property
    def connected(self) -> bool:
        return self._ws is not None and not self._closed

    async def connect(self) -> None:
        if self._ws is not None:
            return
        self._closed = False
        ws = await websockets.connect(self._url)
        self._ws = ws
        outbox: asyncio.Queue[str] = asyncio.Queue()
        self._outbox = outbox
        self._reader_task = asyncio.create_task(self._reader(ws))
        self._sender_task = asyncio.create_task(self._sender(ws, outbox))
        if self._log_transport:
            logger.info("broadcast transport connected: url=%s observer=%s", self._url, self._observer_id)

    async def close(self) -> None:
        self._closed = True
        tasks = [t for t in (self._reader_task, self._sender_task) if t is not None]
        for task in tasks:
            task.cancel()
        ws = self._ws
        if ws is not None:
            with suppress(Exception):
                await ws.close()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._ws = None
        self._outbox = None
        self._reader_task = None
        self._sender_task = None

    async def __aenter__(self) -> "WebSocketBroadcastTransport":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ------------------------------------------------------------ transport
    def broadcast(self, channel_id: str, payload: Any) -> None:
        outbox = self._outbox
        if outbox is None or self._closed:
            raise TransportClosedError(f"transport to {self._url} is not connected")
        frame = encode_message(PeerMessage(channel_id=channel_id, sender=self._observer_id, payload=payload))
        outbox.put_nowait(frame)

    def on_message(self, channel_id: str, handler: MessageHandler) -> Callable[[], None]:
        assert callable(handler), "message handler must be callable"
        self._handlers.setdefault(channel_id, []).append(handler)

        def _dispose() -> None:
            handlers = self._handlers.get(channel_id)
            if handlers is not None and handler in handlers:
                handlers.remove(handler)

        return _dispose

    # ------------------------------------------------------------- internals
    def _dispatch(self, message: PeerMessage) -> None:
        for handler in tuple(self._handlers.get(message.channel_id, ())):
            try:
                handler(message)
            except Exception:
                logger.exception("broadcast handler failed (channel=%s)", message.channel_id)

    async def _reader(self, ws: Any) -> None:
        try:
            async for raw in ws:
                try:
                    message = decode_message(raw)
                except ValueError:
                    logger.debug("dropping malformed broadcast frame", exc_info=True)
                    continue
                self._dispatch(message)
        except ConnectionClosed:
            logger.info("broadcast transport disconnected: url=%s", self._url)
        finally:
            self._closed = True

    async def _sender(self, ws: Any, outbox: "asyncio.Queue[str]") -> None:
        while True:
            frame = await outbox.get()
            if not await safe_send(ws, frame):
                self._closed = True
                break


__all__ = [
    "HubState",
    "WebSocketBroadcastTransport",
    "bound_port",
    "decode_message",
    "encode_message",
    "handle_hub_client",
    "safe_send",
    "serve_broadcast_hub",
]
