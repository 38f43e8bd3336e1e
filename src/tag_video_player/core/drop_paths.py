from __future__ import annotations

import re
import tempfile
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple
from urllib.parse import unquote

from ..utils.config import config_dir
from ..utils.debug import debug_print


VIDEO_EXTENSIONS = ("mp4", "mkv", "avi", "mov", "flv", "wmv", "webm")
TEMP_DIR_NAME = "TagVideoPlayer"

_FILE_URI = re.compile(r"^file://", re.IGNORECASE)
_DRIVE_PATH = re.compile(r"^[A-Za-z]:[\\/]")
_SLASHED_DRIVE = re.compile(r"^/[A-Za-z]:")
_URL_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")
_UNSAFE_NAME_CHARS = re.compile(r'[\\/:*?"<>|]')


# Each matcher returns a local path when it recognizes the string's shape.
def _match_file_uri(text: str) -> Optional[str]:
    if not _FILE_URI.match(text):
        return None
    path = _FILE_URI.sub("", unquote(text), count=1)
    if _SLASHED_DRIVE.match(path):
        return path[1:]
    return path


def _match_drive_path(text: str) -> Optional[str]:
    return text if _DRIVE_PATH.match(text) else None


def _match_unc_path(text: str) -> Optional[str]:
    return text if text.startswith("\\\\") else None


def _match_posix_absolute(text: str) -> Optional[str]:
    return text if text.startswith("/") else None


def _match_relative_path(text: str) -> Optional[str]:
    if _URL_SCHEME.match(text):
        return None
    return text if ("/" in text or "\\" in text) else None


PATH_MATCHERS: List[Tuple[str, Callable[[str], Optional[str]]]] = [
    ("file-uri", _match_file_uri),
    ("drive", _match_drive_path),
    ("unc", _match_unc_path),
    ("posix", _match_posix_absolute),
    ("relative", _match_relative_path),
]


def normalize_dropped_path(raw) -> Optional[str]:
    """Turn one dropped string (path, ``file://`` URI, uri-list) into a local path."""
    if not raw or not isinstance(raw, str):
        return None
    lines = raw.strip().splitlines()
    text = lines[0].strip() if lines else ""
    if not text:
        return None
    for name, matcher in PATH_MATCHERS:
        path = matcher(text)
        if path:
            debug_print(f"Drop path matched {name}: {path}")
            return path
    return None


def pick_dropped_path(candidates: Iterable) -> Optional[str]:
    for raw in candidates:
        path = normalize_dropped_path(raw)
        if path:
            return path
    return None


def derive_name_from_path(path: str | None) -> str:
    if not path or not isinstance(path, str):
        return ""
    return re.split(r"[/\\]", path)[-1]


def is_video_file(name: str | None) -> bool:
    if not name or "." not in name:
        return False
    return name.rsplit(".", 1)[-1].lower() in VIDEO_EXTENSIONS


# Tag storage for media without a local path ---------------------------------
def safe_file_name(name: str | None) -> str:
    return _UNSAFE_NAME_CHARS.sub("_", name or "video")


def temp_tag_dir() -> Path:
    return Path(tempfile.gettempdir()) / TEMP_DIR_NAME


def temp_tag_path(file_name: str | None) -> str:
    directory = temp_tag_dir()
    directory.mkdir(parents=True, exist_ok=True)
    return str(directory / safe_file_name(file_name))


def is_temp_tag_path(path: str | None) -> bool:
    if not path:
        return False
    return str(temp_tag_dir()) in path


def user_tag_path(path: str) -> str:
    name = safe_file_name(derive_name_from_path(path))
    return str(config_dir() / "tags" / f"{name}.json")
