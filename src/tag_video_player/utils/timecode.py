from __future__ import annotations

import math
import re

ZERO_TIMESTAMP = "00:00:00"
_NUMBER = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)")


def _parse_number(text: str) -> float | None:
    if not _NUMBER.fullmatch(text):
        return None
    value = float(text)
    if not math.isfinite(value):
        return None
    return value


def parse_time_code(value) -> float | None:
    """Parse ``HH:MM:SS[.mmm]``, ``MM:SS`` or bare seconds into seconds.

    Colon groups are read right to left as seconds, minutes, hours and so on,
    so ``"90:00"`` is 90 minutes. Returns ``None`` when the text is not a time.
    Negative values are returned as-is.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None

    if ":" in text:
        parts = [p.strip() for p in text.split(":")]
        parts = [p for p in parts if p]
        if not parts:
            return None
        seconds = 0.0
        multiplier = 1
        for part in reversed(parts):
            number = _parse_number(part)
            if number is None:
                return None
            seconds += number * multiplier
            multiplier *= 60
        return seconds

    return _parse_number(text)


def _clock(whole_seconds: int) -> str:
    hours = whole_seconds // 3600
    minutes = (whole_seconds % 3600) // 60
    secs = whole_seconds % 60
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def to_timestamp(seconds: float) -> str:
    try:
        seconds = float(seconds)
    except (TypeError, ValueError):
        return ZERO_TIMESTAMP
    if not math.isfinite(seconds):
        return ZERO_TIMESTAMP
    return _clock(int(math.floor(max(0.0, seconds))))


def to_timestamp_ms(seconds: float) -> str:
    """Like :func:`to_timestamp` with a ``.mmm`` suffix when there is a fraction."""
    try:
        seconds = float(seconds)
    except (TypeError, ValueError):
        return ZERO_TIMESTAMP
    if not math.isfinite(seconds):
        return ZERO_TIMESTAMP
    seconds = max(0.0, seconds)
    whole = int(math.floor(seconds))
    fractional = seconds - whole
    if fractional <= 0:
        return _clock(whole)
    ms = int(math.floor(fractional * 1000 + 0.5))
    if ms >= 1000:
        whole += 1
        ms -= 1000
    return f"{_clock(whole)}.{ms:03d}"
