"""In-process broadcast hub.

Delivers every message synchronously to every handler registered on the
channel, the sender's own handlers included; receivers filter their own
echoes by observer id.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, Dict, List, Optional, Tuple

from slide_sync.relay import MessageHandler, PeerMessage

logger = logging.getLogger(__name__)


class LocalBroadcastHub:
    def __init__(self) -> None:
        self._handlers: Dict[str, List[Tuple[str, MessageHandler]]] = {}
        self.delivered = 0

    def peer(self, observer_id: Optional[str] = None) -> "LocalPeer":
        return LocalPeer(self, observer_id or uuid.uuid4().hex)

    def subscribe(self, observer_id: str, channel_id: str, handler: MessageHandler) -> Callable[[], None]:
        entry = (observer_id, handler)
        self._handlers.setdefault(channel_id, []).append(entry)

        def _dispose() -> None:
            entries = self._handlers.get(channel_id)
            if entries is not None and entry in entries:
                entries.remove(entry)
                if not entries:
                    del self._handlers[channel_id]

        return _dispose

    def publish(self, message: PeerMessage) -> int:
        entries = tuple(self._handlers.get(message.channel_id, ()))
        for _observer, handler in entries:
            handler(message)
        self.delivered += len(entries)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "local hub: channel=%s sender=%s receivers=%d",
                message.channel_id,
                message.sender,
                len(entries),
            )
        return len(entries)

    def channel_size(self, channel_id: str) -> int:
        return len(self._handlers.get(channel_id, ()))


class LocalPeer:
    """One observer's view of a :class:`LocalBroadcastHub`."""

    def __init__(self, hub: LocalBroadcastHub, observer_id: str) -> None:
        assert observer_id, "observer id must be non-empty"
        self._hub = hub
        self._observer_id = observer_id

    @property
    def observer_id(self) -> str:
        return self._observer_id

    def broadcast(self, channel_id: str, payload: Any) -> None:
        self._hub.publish(PeerMessage(channel_id=channel_id, sender=self._observer_id, payload=payload))

    def on_message(self, channel_id: str, handler: MessageHandler) -> Callable[[], None]:
        return self._hub.subscribe(self._observer_id, channel_id, handler)


__all__ = ["LocalBroadcastHub", "LocalPeer"]
