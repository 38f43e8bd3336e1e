from __future__ import annotations

import math
import tempfile
from pathlib import Path
from typing import List

from .models import (
    Tag,
    TagDocumentError,
    TagValidationError,
    dump_tag_document,
    parse_tag_document,
    round_half_up,
)
from ..utils.debug import debug_print


TAG_FILE_SUFFIX = ".json"
SNAP_WINDOW_SECONDS = 0.5
DEFAULT_TAG_TITLE = "Untitled"


# Tag files -----------------------------------------------------------------
def resolve_tag_path(path_hint: str | None) -> str:
    """Map a video path (or an already resolved tag path) to its tag file."""
    if not path_hint:
        return ""
    if path_hint.lower().endswith(TAG_FILE_SUFFIX):
        return path_hint
    return f"{path_hint}{TAG_FILE_SUFFIX}"


def load_tags(path_hint: str | None) -> List[Tag]:
    """Load the tag collection for a video.

    A missing or unreadable tag file is not an error: the video simply has
    no tags yet, so an empty list comes back.
    """
    tag_path = resolve_tag_path(path_hint)
    if not tag_path:
        return []
    path = Path(tag_path)
    if not path.exists():
        debug_print(f"Tag file not found: {path}")
        return []
    debug_print(f"Loading tags from: {path}")
    try:
        tags = parse_tag_document(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, TagDocumentError) as exc:
        debug_print(f"Error loading tags from {path}: {exc}")
        return []
    debug_print(f"Loaded {len(tags)} tag(s)")
    return tags


def _discard_temp(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        debug_print(f"Could not remove temporary file {path}: {exc}")


def save_tags(path_hint: str | None, tags: List[Tag]) -> bool:
    tag_path = resolve_tag_path(path_hint)
    if not tag_path:
        debug_print("Refusing to save tags without a path")
        return False
    target = Path(tag_path)
    try:
        text = dump_tag_document(tags)
    except ValueError as exc:
        debug_print(f"Refusing to save unserializable tags to {target}: {exc}")
        return False
    tmp_name = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", delete=False, dir=str(target.parent), encoding="utf-8", suffix=".tmp"
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(text)
            tmp.flush()
        Path(tmp_name).replace(target)
    except OSError as exc:
        debug_print(f"Error saving tags to {target}: {exc}")
        if tmp_name:
            _discard_temp(Path(tmp_name))
        return False
    debug_print(f"Saved {len(tags)} tag(s) to {target}")
    return True


# Collection operations ------------------------------------------------------
def _sort_by_time(tags: List[Tag]) -> List[Tag]:
    tags.sort(key=lambda t: t.time)
    return tags


def _validated(time: float, title: str) -> tuple[float, str]:
    title = (title or "").strip()
    if not title:
        raise TagValidationError("Tag title cannot be empty.")
    try:
        time = float(time)
    except (TypeError, ValueError) as exc:
        raise TagValidationError(f"Invalid tag time: {time!r}") from exc
    if not math.isfinite(time) or time < 0:
        raise TagValidationError("Tag time must be a non-negative number of seconds.")
    return time, title


def upsert_at_time(tags: List[Tag], time: float, title: str, description: str = "") -> List[Tag]:
    """Add a tag, or overwrite the one already sitting within half a second of ``time``."""
    time, title = _validated(time, title)
    normalized = round_half_up(time, 3)
    description = description or ""
    existing = next((t for t in tags if abs(t.time - time) < SNAP_WINDOW_SECONDS), None)
    if existing is not None:
        existing.time = normalized
        existing.title = title
        existing.description = description
    else:
        tags.append(Tag(time=normalized, title=title, description=description))
    return _sort_by_time(tags)


def add_tag(tags: List[Tag], time: float, title: str = "", description: str | None = "") -> List[Tag]:
    """Append a tag without validation; a blank title gets a placeholder."""
    tags.append(
        Tag(
            time=round_half_up(float(time), 2),
            title=title or DEFAULT_TAG_TITLE,
            description=description or "",
        )
    )
    return _sort_by_time(tags)


def edit_tag(
    tags: List[Tag], index: int, title: str | None = None, description: str | None = None
) -> List[Tag]:
    if 0 <= index < len(tags):
        tag = tags[index]
        tag.title = title or tag.title
        if description is not None:
            tag.description = description
    return tags


def replace_at(tags: List[Tag], index: int, time: float, title: str, description: str = "") -> List[Tag]:
    if not 0 <= index < len(tags):
        raise IndexError(f"No tag at index {index}")
    time, title = _validated(time, title)
    tag = tags[index]
    tag.time = round_half_up(time, 3)
    tag.title = title
    tag.description = description or ""
    return _sort_by_time(tags)


def delete_at(tags: List[Tag], index: int) -> List[Tag]:
    if 0 <= index < len(tags):
        del tags[index]
    return tags


def clear_tags(tags: List[Tag]) -> List[Tag]:
    tags.clear()
    return tags


# Lookups ---------------------------------------------------------------------
def find_tag_index(tags: List[Tag], title: str | None) -> int | None:
    wanted = (title or "").strip().lower()
    if not wanted:
        return None
    for idx, tag in enumerate(tags):
        if tag.title.strip().lower() == wanted:
            return idx
    return None


def active_tag_index(tags: List[Tag], position: float) -> int | None:
    """Index of the last tag at or before ``position``; tags are sorted by time."""
    active = None
    for idx, tag in enumerate(tags):
        if tag.time > position:
            break
        active = idx
    return active
