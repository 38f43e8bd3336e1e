import tempfile
from pathlib import Path

import pytest

from tag_video_player.core import drop_paths
from tag_video_player.core.drop_paths import (
    derive_name_from_path,
    is_temp_tag_path,
    is_video_file,
    normalize_dropped_path,
    pick_dropped_path,
    temp_tag_path,
    user_tag_path,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("file:///C:/Videos/My%20Clip.mp4", "C:/Videos/My Clip.mp4"),
        ("file:///home/user/clip.mp4", "/home/user/clip.mp4"),
        ("FILE:///home/user/clip.mp4", "/home/user/clip.mp4"),
        ("file:///home/user/a.mp4\r\nfile:///home/user/b.mp4", "/home/user/a.mp4"),
        ("  /tmp/clip.mkv  \n", "/tmp/clip.mkv"),
        ("C:\\Videos\\clip.mp4", "C:\\Videos\\clip.mp4"),
        ("d:/videos/clip.mp4", "d:/videos/clip.mp4"),
        ("\\\\server\\share\\clip.mp4", "\\\\server\\share\\clip.mp4"),
        ("videos/clip.mp4", "videos/clip.mp4"),
    ],
)
def test_normalize_dropped_path(raw, expected):
    assert normalize_dropped_path(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "   ", "clip.mp4", "https://example.com/clip.mp4", 42])
def test_normalize_rejects_unusable_strings(raw):
    assert normalize_dropped_path(raw) is None


def test_matchers_are_tried_in_priority_order():
    names = [name for name, _ in drop_paths.PATH_MATCHERS]
    assert names == ["file-uri", "drive", "unc", "posix", "relative"]


def test_pick_dropped_path_takes_first_usable_candidate():
    candidates = [None, "", "https://example.com/a.mp4", "file:///a/b.mkv", "/c/d.mp4"]
    assert pick_dropped_path(candidates) == "/a/b.mkv"
    assert pick_dropped_path(["plain text"]) is None
    assert pick_dropped_path([]) is None


def test_derive_name_from_path():
    assert derive_name_from_path("C:\\Videos\\clip.mp4") == "clip.mp4"
    assert derive_name_from_path("/home/user/clip.mov") == "clip.mov"
    assert derive_name_from_path("/home/user/") == ""
    assert derive_name_from_path(None) == ""


def test_is_video_file():
    assert is_video_file("clip.MP4")
    assert is_video_file("a.b.webm")
    assert not is_video_file("notes.txt")
    assert not is_video_file("noextension")
    assert not is_video_file("")
    assert not is_video_file(None)


def test_temp_tag_path(tmp_path, monkeypatch):
    monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))
    path = temp_tag_path('we:ird?name*.mp4')
    assert Path(path) == tmp_path / "TagVideoPlayer" / "we_ird_name_.mp4"
    assert (tmp_path / "TagVideoPlayer").is_dir()
    assert is_temp_tag_path(path)
    assert not is_temp_tag_path("/somewhere/else.mp4")
    assert not is_temp_tag_path(None)


def test_user_tag_path(tmp_path, monkeypatch):
    monkeypatch.setattr(drop_paths, "config_dir", lambda: tmp_path)
    assert Path(user_tag_path("/tmp/TagVideoPlayer/clip.mp4")) == tmp_path / "tags" / "clip.mp4.json"
