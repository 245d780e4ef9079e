"""Exception types shared across the slide-sync package."""

from __future__ import annotations

from typing import Optional


class SlideSyncError(RuntimeError):
    """Base class for slide-sync failures."""


class RenderFailure(SlideSyncError):
    """Renderer reported an error while a page transition was in flight.

    Carried by ``RenderError`` events and logged; the synchronization core
    recovers locally and never raises it to callers.
    """

    def __init__(self, cause: object, *, page: Optional[int] = None) -> None:
        self.cause = cause
        self.page = page
        detail = str(cause) or cause.__class__.__name__
        if page is not None:
            super().__init__(f"render failed on page {page}: {detail}")
        else:
            super().__init__(f"render failed: {detail}")


class RendererDestroyedError(SlideSyncError):
    """Raised when a renderer adapter is used after ``destroy()``."""


class TransportClosedError(SlideSyncError):
    """Raised when a broadcast transport is used while disconnected."""


__all__ = [
    "RenderFailure",
    "RendererDestroyedError",
    "SlideSyncError",
    "TransportClosedError",
]
