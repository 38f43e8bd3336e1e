from __future__ import annotations

from enum import Enum
from typing import List

from .models import Tag, TagValidationError
from .session import TagSession
from ..utils.timecode import parse_time_code, to_timestamp_ms


class EditorMode(Enum):
    CLOSED = "closed"
    NEW = "new"
    EDIT = "edit"


class TagEditorState:
    """State of the tag editor panel: closed, creating a tag, or editing one."""

    def __init__(self) -> None:
        self.mode = EditorMode.CLOSED
        self.editing_index: int | None = None
        self.editing_time: float | None = None

    @property
    def is_open(self) -> bool:
        return self.mode is not EditorMode.CLOSED

    def open_new(self, current_time: float) -> None:
        self.mode = EditorMode.NEW
        self.editing_index = None
        self.editing_time = max(0.0, float(current_time))

    def open_edit(self, tags: List[Tag], index: int) -> bool:
        if not 0 <= index < len(tags):
            return False
        self.mode = EditorMode.EDIT
        self.editing_index = index
        self.editing_time = tags[index].time
        return True

    def close(self) -> None:
        self.mode = EditorMode.CLOSED
        self.editing_index = None
        self.editing_time = None

    def time_text_changed(self, text: str) -> None:
        parsed = parse_time_code(text)
        if parsed is not None and parsed >= 0:
            self.editing_time = parsed

    def time_text_finished(self, text: str) -> str | None:
        parsed = parse_time_code(text)
        if parsed is None or parsed < 0:
            return None
        self.editing_time = parsed
        return to_timestamp_ms(parsed)

    def commit(self, session: TagSession, title: str, description: str, time_text: str) -> bool:
        """Apply the editor fields to the session; returns whether the save succeeded.

        Raises TagValidationError, leaving the editor open, when a field is invalid.
        """
        if not self.is_open:
            raise RuntimeError("Tag editor is not open")
        title = (title or "").strip()
        description = (description or "").strip()
        if not title:
            raise TagValidationError("Tag title cannot be empty.")
        time = parse_time_code(time_text)
        if time is None or time < 0:
            raise TagValidationError("Invalid time. Use HH:MM:SS, MM:SS or seconds.")

        if self.mode is EditorMode.EDIT and self.editing_index is not None:
            ok = session.replace(self.editing_index, time, title, description)
        else:
            ok = session.upsert(time, title, description)
        self.close()
        return ok
