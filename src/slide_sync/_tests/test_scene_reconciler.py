from __future__ import annotations

from typing import Any, Mapping, Sequence

import pytest

from slide_sync.scene import (
    PAGE_ATTRIBUTE,
    ScenePath,
    ScenePathType,
    SceneReconciler,
    scene_entries,
)


class FakeRoom:
    def __init__(self, *, writable: bool = True) -> None:
        self.is_writable = writable
        self.scenes: dict[str, list[str]] = {}
        self.scene_path: str | None = None
        self.attributes: dict[str, Any] = {}
        self.calls: list[tuple[str, Any]] = []
        self.misreport: set[str] = set()

    def scene_path_type(self, path: str) -> ScenePathType:
        if path in self.misreport:
            return ScenePathType.NONE
        base, _, name = path.rpartition("/")
        if name in self.scenes.get(base, ()):
            return ScenePathType.PAGE
        if path in self.scenes:
            return ScenePathType.DIR
        return ScenePathType.NONE

    def put_scenes(self, base_path: str, scenes: Sequence[Mapping[str, str]]) -> None:
        self.calls.append(("put", base_path))
        self.scenes.setdefault(base_path, []).extend(s["name"] for s in scenes)

    def remove_scenes(self, base_path: str) -> None:
        self.calls.append(("remove", base_path))
        self.scenes.pop(base_path, None)

    def set_scene_path(self, path: str) -> None:
        self.calls.append(("set", path))
        self.scene_path = path

    def update_attributes(self, keys: Sequence[str], value: Any) -> None:
        self.calls.append(("attr", (tuple(keys), value)))
        self.attributes[keys[0]] = value


def _reconciler(room: FakeRoom, count: int = 5, base: str = "/ppt/deck") -> SceneReconciler:
    return SceneReconciler(room, base, page_count=lambda: count)


def test_empty_base_path_is_populated_with_every_page() -> None:
    room = FakeRoom()
    reconciler = _reconciler(room, count=7)

    result = reconciler.sync(3)

    assert result == ScenePath("/ppt/deck", 3)
    assert room.scenes["/ppt/deck"] == [str(i) for i in range(1, 8)]
    assert room.scene_path == "/ppt/deck/3"
    assert room.attributes[PAGE_ATTRIBUTE] == 3
    assert reconciler.rebuilds == 1


def test_existing_entries_are_not_touched() -> None:
    room = FakeRoom()
    room.scenes["/ppt/deck"] = ["1", "2", "3", "4", "5"]
    reconciler = _reconciler(room)

    reconciler.sync(4)
    reconciler.sync(5)

    assert [c for c in room.calls if c[0] in ("put", "remove")] == []
    assert room.scene_path == "/ppt/deck/5"
    assert reconciler.rebuilds == 0


def test_partial_entries_trigger_full_rebuild_without_duplicates() -> None:
    room = FakeRoom()
    room.scenes["/ppt/deck"] = ["1", "2", "stale"]
    reconciler = _reconciler(room, count=4)

    reconciler.sync(4)

    assert room.scenes["/ppt/deck"] == ["1", "2", "3", "4"]
    assert room.calls[:2] == [("remove", "/ppt/deck"), ("put", "/ppt/deck")]


def test_misreported_entry_still_rebuilds_everything() -> None:
    room = FakeRoom()
    room.scenes["/ppt/deck"] = ["1", "2", "3"]
    room.misreport.add("/ppt/deck/2")
    reconciler = _reconciler(room, count=3)

    reconciler.sync(2)

    assert room.scenes["/ppt/deck"] == ["1", "2", "3"]
    assert reconciler.rebuilds == 1
    assert room.scene_path == "/ppt/deck/2"


def test_unknown_page_is_a_pure_no_op() -> None:
    room = FakeRoom()
    reconciler = _reconciler(room)

    assert reconciler.sync(None) is None

    assert room.calls == []
    assert reconciler.last_scene is None


def test_read_only_observer_never_writes_page_attribute() -> None:
    room = FakeRoom(writable=False)
    reconciler = _reconciler(room)

    reconciler.sync(2)

    assert room.scene_path == "/ppt/deck/2"
    assert room.attributes == {}


def test_trailing_slash_in_base_path_is_normalised() -> None:
    room = FakeRoom()
    reconciler = _reconciler(room, base="/ppt/deck/")

    reconciler.sync(1)

    assert room.scene_path == "/ppt/deck/1"
    with pytest.raises(ValueError):
        SceneReconciler(room, "/", page_count=lambda: 1)


def test_scene_entries_are_one_based() -> None:
    assert scene_entries(3) == [{"name": "1"}, {"name": "2"}, {"name": "3"}]
    assert scene_entries(0) == []
    assert str(ScenePath("/a", 2)) == "/a/2"
