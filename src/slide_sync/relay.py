"""Relay renderer sync events between peers sharing one document.

Outbound: every ``SyncDispatch`` the local renderer emits is broadcast on the
document's channel.  Inbound: messages on that channel from any other
observer are injected into the local renderer.  Messages that carry the local
observer id are dropped, and outbound dispatch is suppressed while an inbound
payload is being replayed, so a payload never loops back into its origin.

Delivery is best effort and at most once; no ack, ordering or retry.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, Protocol

from slide_sync.disposal import DisposalScope
from slide_sync.errors import SlideSyncError
from slide_sync.renderer.adapter import RendererAdapter
from slide_sync.renderer.events import SyncDispatch

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PeerMessage:
    """A broadcast payload tagged with its channel and sender."""

    channel_id: str
    sender: str
    payload: Any


MessageHandler = Callable[[PeerMessage], None]


class BroadcastTransport(Protocol):
    """Peer messaging consumed by the relay."""

    @property
    def observer_id(self) -> str: ...

    def broadcast(self, channel_id: str, payload: Any) -> None: ...

    def on_message(self, channel_id: str, handler: MessageHandler) -> Callable[[], None]: ...


def sync_channel_id(prefix: str, document_id: str) -> str:
    """Channel id scoped to one document instance."""

    assert prefix, "channel prefix must be non-empty"
    assert document_id, "document id must be non-empty"
    return f"{prefix}:{document_id}"


class PeerSyncRelay:
    def __init__(
        self,
        renderer: RendererAdapter,
        transport: BroadcastTransport,
        channel_id: str,
        *,
        deliver: Optional[Callable[[Any], None]] = None,
        log_sync: bool = False,
    ) -> None:
        assert isinstance(channel_id, str) and channel_id != "", "channel id must be non-empty"
        self._renderer = renderer
        self._transport = transport
        self._channel_id = channel_id
        self._deliver = deliver if deliver is not None else renderer.receive_sync
        self._log_sync = bool(log_sync)
        self._scope = DisposalScope("relay")
        self._suppress_count = 0
        self._attached = False
        self.sent = 0
        self.received = 0
        self.dropped_echo = 0
        self.dropped_send = 0

    @property
    def channel_id(self) -> str:
        return self._channel_id

    @property
    def observer_id(self) -> str:
        return self._transport.observer_id

    @property
    def attached(self) -> bool:
        return self._attached

    # ---------------------------------------------------------------- lifecycle
    def attach(self) -> None:
        if self._attached:
            return
        self._attached = True
        self._scope.add(self._renderer.subscribe(SyncDispatch, self._on_sync_dispatch), key="outbound")
        self._scope.add(self._transport.on_message(self._channel_id, self._on_peer_message), key="inbound")
        if self._log_sync:
            logger.info("sync relay attached: channel=%s observer=%s", self._channel_id, self.observer_id)

    def detach(self) -> None:
        if not self._attached:
            return
        self._attached = False
        self._scope.flush()
        self._scope = DisposalScope("relay")

    # ------------------------------------------------------------- suppression
    @contextmanager
    def suppressing(self) -> Iterator[None]:
        self._suppress_count += 1
        try:
            yield
        finally:
            self._suppress_count -= 1

    # ---------------------------------------------------------------- outbound
    def _on_sync_dispatch(self, event: SyncDispatch) -> None:
        if self._suppress_count > 0:
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("sync dispatch suppressed during inbound replay: channel=%s", self._channel_id)
            return
        try:
            self._transport.broadcast(self._channel_id, event.payload)
        except SlideSyncError:
            self.dropped_send += 1
            logger.debug("sync out dropped: channel=%s", self._channel_id, exc_info=True)
            return
        self.sent += 1
        if self._log_sync:
            logger.info("sync out: channel=%s payload=%r", self._channel_id, event.payload)

    # ----------------------------------------------------------------- inbound
    def _on_peer_message(self, message: PeerMessage) -> None:
        if message.channel_id != self._channel_id:
            return
        if message.sender == self._transport.observer_id:
            self.dropped_echo += 1
            return
        self.received += 1
        if self._log_sync:
            logger.info("sync in: channel=%s sender=%s payload=%r", self._channel_id, message.sender, message.payload)
        with self.suppressing():
            self._deliver(message.payload)


__all__ = [
    "BroadcastTransport",
    "MessageHandler",
    "PeerMessage",
    "PeerSyncRelay",
    "sync_channel_id",
]
