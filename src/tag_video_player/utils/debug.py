from __future__ import annotations

import os
import sys

DEBUG_ENV = "TAG_VIDEO_PLAYER_DEBUG"


def debug_enabled() -> bool:
    return os.getenv(DEBUG_ENV, "").lower() in {"1", "true", "yes", "on"}


def enable_debug() -> None:
    os.environ[DEBUG_ENV] = "1"


def debug_print(message: str) -> None:
    if debug_enabled():
        print(f"[tag-video-player debug] {message}", file=sys.stderr)
