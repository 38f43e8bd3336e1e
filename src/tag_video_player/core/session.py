from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from . import tag_store
from .drop_paths import is_temp_tag_path, user_tag_path
from .models import Tag
from ..utils.debug import debug_print


@dataclass
class TagSession:
    """The video currently open in the player and its live tag collection."""

    video_path: Optional[str] = None
    tag_path: Optional[str] = None
    tags: List[Tag] = field(default_factory=list)

    @property
    def is_open(self) -> bool:
        return bool(self.tag_path)

    def open(self, video_path: str, tag_path: str | None = None) -> List[Tag]:
        self.video_path = video_path
        self.tag_path = tag_path or video_path
        debug_print(f"Opening video {video_path} (tags: {self.tag_path})")
        tags = tag_store.load_tags(self.tag_path)
        if not tags and is_temp_tag_path(self.tag_path):
            fallback = user_tag_path(self.tag_path)
            debug_print(f"Falling back to user tag copy: {fallback}")
            tags = tag_store.load_tags(fallback)
        self.tags = tags
        return self.tags

    def close(self) -> None:
        self.video_path = None
        self.tag_path = None
        self.tags = []

    def save(self) -> bool:
        if not self.is_open:
            return False
        ok = tag_store.save_tags(self.tag_path, self.tags)
        if is_temp_tag_path(self.tag_path):
            tag_store.save_tags(user_tag_path(self.tag_path), self.tags)
        return ok

    # Mutations persist immediately ------------------------------------------
    def upsert(self, time: float, title: str, description: str = "") -> bool:
        tag_store.upsert_at_time(self.tags, time, title, description)
        return self.save()

    def add(self, time: float, title: str = "", description: str = "") -> bool:
        tag_store.add_tag(self.tags, time, title, description)
        return self.save()

    def replace(self, index: int, time: float, title: str, description: str = "") -> bool:
        tag_store.replace_at(self.tags, index, time, title, description)
        return self.save()

    def delete(self, index: int) -> bool:
        tag_store.delete_at(self.tags, index)
        return self.save()

    def clear(self) -> bool:
        tag_store.clear_tags(self.tags)
        return self.save()
