"""
slide-sync: slide-to-scene synchronization for collaborative whiteboards.

Keeps an opaque, slow slide renderer aligned with the replicated scene
position shared by every client in a room, and replays renderer-internal
sync events on remote peers.
"""

__version__ = "0.1.0"

from slide_sync.controller import SlideController, mount_slide_controller
from slide_sync.errors import (
    RenderFailure,
    RendererDestroyedError,
    SlideSyncError,
    TransportClosedError,
)
from slide_sync.navigation import NavigationState, NavigationStateMachine
from slide_sync.pages import DocsViewerPage, create_docs_viewer_pages
from slide_sync.readiness import ReadinessMonitor
from slide_sync.relay import PeerMessage, PeerSyncRelay, sync_channel_id
from slide_sync.scene import ScenePath, ScenePathType, SceneReconciler

__all__ = [
    "DocsViewerPage",
    "NavigationState",
    "NavigationStateMachine",
    "PeerMessage",
    "PeerSyncRelay",
    "ReadinessMonitor",
    "RenderFailure",
    "RendererDestroyedError",
    "ScenePath",
    "ScenePathType",
    "SceneReconciler",
    "SlideController",
    "SlideSyncError",
    "TransportClosedError",
    "__version__",
    "create_docs_viewer_pages",
    "mount_slide_controller",
    "sync_channel_id",
]
