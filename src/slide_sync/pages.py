"""Viewer page descriptors derived from the loaded deck."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from slide_sync.renderer.adapter import RendererAdapter


@dataclass(frozen=True)
class DocsViewerPage:
    width: int
    height: int
    src: str
    thumbnail: Optional[str] = None


def thumbnail_url(url: str, task_id: str, page: int) -> str:
    return f"{url.rstrip('/')}/{task_id}/preview/{int(page)}.png"


def create_docs_viewer_pages(renderer: RendererAdapter) -> List[DocsViewerPage]:
    """One page per slide, each pointing at the deck's preview thumbnail."""

    state = renderer.slide_state
    count = renderer.page_count
    if count > 0 and (not state.url or not state.task_id):
        raise ValueError("renderer has no resource bound; call set_resource first")
    width, height = renderer.width, renderer.height
    return [
        DocsViewerPage(
            width=width,
            height=height,
            src="ppt",
            thumbnail=thumbnail_url(str(state.url), str(state.task_id), i),
        )
        for i in range(1, count + 1)
    ]


__all__ = ["DocsViewerPage", "create_docs_viewer_pages", "thumbnail_url"]
