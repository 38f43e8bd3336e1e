from __future__ import annotations

import copy
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict

from .debug import debug_print


DEFAULT_CONFIG: Dict[str, Any] = {
    "colors": {
        "tag": "#667eea",
        "tag_active": "#f1c40f",
    },
    "hotkeys": {
        "open_video": "Ctrl+O",
        "quit": "Ctrl+Q",
        "add_tag": "Ctrl+T",
        "clear_tags": "Ctrl+Shift+Backspace",
        "save_tag": "Ctrl+Return",
        "play_pause": "Space",
        "mute_audio": "M",
        "scrub_back": "Left",
        "scrub_forward": "Right",
        "scrub_frame_back": "Shift+Left",
        "scrub_frame_forward": "Shift+Right",
    },
    "audio": {
        "default_muted": False,
        "volume": 0.8,
    },
    "scrub": {
        "seconds_step": 5.0,
        "frames_step": 1,
        "frame_fallback_seconds": 0.04,
    },
    "timeline": {
        "show_labels": True,
        "label_max_chars": 12,
    },
}


def _defaults() -> Dict[str, Any]:
    return copy.deepcopy(DEFAULT_CONFIG)


def _deep_merge(base: Dict[str, Any], incoming: Dict[str, Any]) -> Dict[str, Any]:
    merged: Dict[str, Any] = dict(base)
    for key, value in incoming.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def config_dir() -> Path:
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "Tag Video Player"
    if os.name == "nt":
        appdata = os.getenv("APPDATA") or (Path.home() / "AppData" / "Roaming")
        return Path(appdata) / "Tag Video Player"
    xdg = os.getenv("XDG_CONFIG_HOME") or (Path.home() / ".config")
    return Path(xdg) / "tag-video-player"


def config_path() -> Path:
    override = os.getenv("TAG_VIDEO_PLAYER_CONFIG")
    if override:
        return Path(override)
    return config_dir() / "tag_video_player_config.json"


def load_config() -> Dict[str, Any]:
    path = config_path()
    if not path.exists():
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(DEFAULT_CONFIG, indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            debug_print(f"Could not write default config to {path}: {exc}")
        return _defaults()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        debug_print(f"Ignoring unreadable config {path}: {exc}")
        return _defaults()

    if not isinstance(data, dict):
        return _defaults()
    merged = _deep_merge(_defaults(), data)
    if merged != data:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(merged, indent=2) + "\n", encoding="utf-8")
        except OSError:
            pass
    return merged
