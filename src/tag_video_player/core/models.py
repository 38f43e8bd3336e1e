from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Dict, List

from ..utils.debug import debug_print


# Floats at or above this magnitude carry no fractional digits.
_INTEGRAL_FLOAT = 2.0 ** 52


class TagValidationError(ValueError):
    """Raised when user supplied tag fields cannot be committed."""


class TagDocumentError(ValueError):
    """Raised when a tag file does not have the ``{"timelines": [...]}`` shape."""


def round_half_up(value: float, digits: int) -> float:
    if not math.isfinite(value) or abs(value) >= _INTEGRAL_FLOAT:
        return value
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def _constant_as_missing(name: str) -> None:
    # NaN / Infinity literals load as a missing value so the entry is dropped.
    return None


@dataclass
class Tag:
    time: float
    title: str
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time": round_half_up(float(self.time), 3),
            "title": self.title,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Tag":
        if not isinstance(data, dict):
            raise TagDocumentError(f"Tag entry must be an object, got {type(data).__name__}")
        try:
            raw_time = data["time"]
            title = data["title"]
        except KeyError as exc:
            raise TagDocumentError(f"Tag entry is missing {exc.args[0]!r}") from exc
        if isinstance(raw_time, bool) or not isinstance(raw_time, (int, float)):
            raise TagDocumentError(f"Tag time must be a number, got {raw_time!r}")
        try:
            time = float(raw_time)
        except OverflowError as exc:
            raise TagDocumentError("Tag time is out of range") from exc
        if not math.isfinite(time) or time < 0:
            raise TagDocumentError(f"Tag time must be a non-negative number, got {raw_time!r}")
        if not isinstance(title, str):
            raise TagDocumentError(f"Tag title must be a string, got {title!r}")
        description = data.get("description")
        return cls(
            time=time,
            title=title,
            description=description if isinstance(description, str) else "",
        )


def build_tag_document(tags: List[Tag]) -> Dict[str, Any]:
    return {"timelines": [t.to_dict() for t in tags or []]}


def dump_tag_document(tags: List[Tag]) -> str:
    """Serialize tags; raises ``ValueError`` for a time JSON cannot represent."""
    return json.dumps(build_tag_document(tags), indent=2, ensure_ascii=False, allow_nan=False) + "\n"


def parse_tag_document(text: str) -> List[Tag]:
    """Read a tag document, skipping individual entries that are not tags.

    Only a document that is not JSON, not an object, or whose ``timelines``
    is not a list raises :class:`TagDocumentError`.
    """
    try:
        data = json.loads(text, parse_constant=_constant_as_missing)
    except json.JSONDecodeError as exc:
        raise TagDocumentError(f"Invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise TagDocumentError("Tag document must be a JSON object")
    timelines = data.get("timelines")
    if timelines is None:
        return []
    if not isinstance(timelines, list):
        raise TagDocumentError("'timelines' must be a list")
    tags: List[Tag] = []
    for idx, entry in enumerate(timelines):
        try:
            tags.append(Tag.from_dict(entry))
        except TagDocumentError as exc:
            debug_print(f"Skipping tag entry {idx}: {exc}")
    return tags
