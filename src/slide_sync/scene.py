"""Keep the shared scene path aligned with the renderer's page.

Rendering is slow and switching scenes is fast, so the scene follows the
renderer: once the renderer settles on page ``n`` the active scene becomes
``{base_path}/{n}``.

The host's ``scene_path_type`` is known to misreport existing entries as
``none`` on some SDK versions, so the check is ``== NONE`` rather than
``!= PAGE``, and a miss rebuilds every entry under the base path instead of
patching the single missing one.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Protocol, Sequence

logger = logging.getLogger(__name__)

PAGE_ATTRIBUTE = "page"


class ScenePathType(str, enum.Enum):
    NONE = "none"
    PAGE = "page"
    DIR = "dir"


class HostRoom(Protocol):
    """Room/document accessor provided by the whiteboard host."""

    @property
    def is_writable(self) -> bool: ...

    def scene_path_type(self, path: str) -> ScenePathType: ...

    def put_scenes(self, base_path: str, scenes: Sequence[Mapping[str, str]]) -> None: ...

    def remove_scenes(self, base_path: str) -> None: ...

    def set_scene_path(self, path: str) -> None: ...

    def update_attributes(self, keys: Sequence[str], value: Any) -> None: ...


def normalize_base_path(base_path: str) -> str:
    path = str(base_path).rstrip("/")
    if not path:
        raise ValueError("base scene path must be non-empty")
    return path


@dataclass(frozen=True)
class ScenePath:
    base_path: str
    page: int

    @property
    def path(self) -> str:
        return f"{self.base_path}/{self.page}"

    def __str__(self) -> str:
        return self.path


def scene_entries(count: int) -> list[dict[str, str]]:
    """Scene descriptors ``1..count``."""

    return [{"name": str(i)} for i in range(1, int(count) + 1)]


class SceneReconciler:
    """Drive the host's active scene from settled renderer pages."""

    def __init__(
        self,
        room: HostRoom,
        base_path: str,
        *,
        page_count: Callable[[], int],
        log_scene: bool = False,
    ) -> None:
        self._room = room
        self._base_path = normalize_base_path(base_path)
        self._page_count = page_count
        self._log_scene = bool(log_scene)
        self._last: Optional[ScenePath] = None
        self.rebuilds = 0

    @property
    def base_path(self) -> str:
        return self._base_path

    @property
    def last_scene(self) -> Optional[ScenePath]:
        return self._last

    def scene_path(self, page: int) -> ScenePath:
        return ScenePath(self._base_path, int(page))

    def sync(self, page: Optional[int]) -> Optional[ScenePath]:
        """Point the shared scene at ``page``; ``None`` is a no-op."""

        if page is None:
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("scene sync skipped: renderer page unknown (base=%s)", self._base_path)
            return None

        target = self.scene_path(page)
        kind = self._room.scene_path_type(target.path)
        if ScenePathType(kind) is ScenePathType.NONE:
            self.rebuild()

        self._room.set_scene_path(target.path)
        if self._room.is_writable:
            self._room.update_attributes([PAGE_ATTRIBUTE], target.page)
        self._last = target
        if self._log_scene:
            logger.info("scene synced: path=%s writable=%s", target.path, self._room.is_writable)
        return target

    def rebuild(self) -> int:
        """Replace every scene entry under the base path with ``1..page_count``."""

        count = int(self._page_count())
        self._room.remove_scenes(self._base_path)
        self._room.put_scenes(self._base_path, scene_entries(count))
        self.rebuilds += 1
        if self._log_scene:
            logger.info("scene entries rebuilt: base=%s count=%d", self._base_path, count)
        return count


__all__ = [
    "HostRoom",
    "PAGE_ATTRIBUTE",
    "ScenePath",
    "ScenePathType",
    "SceneReconciler",
    "normalize_base_path",
    "scene_entries",
]
