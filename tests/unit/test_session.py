import tempfile

import pytest

from tag_video_player.core import drop_paths
from tag_video_player.core.models import Tag, TagValidationError
from tag_video_player.core.session import TagSession
from tag_video_player.core.tag_store import load_tags, save_tags


def test_unopened_session_does_not_save():
    session = TagSession()
    assert not session.is_open
    assert session.save() is False


def test_mutations_are_persisted(tmp_path):
    video = str(tmp_path / "clip.mp4")
    session = TagSession()
    assert session.open(video) == []
    assert session.is_open

    assert session.upsert(12.5, "Intro") is True
    assert session.add(3.0, "") is True
    assert load_tags(video) == [Tag(time=3.0, title="Untitled"), Tag(time=12.5, title="Intro")]

    assert session.replace(0, 20.0, "Outro", "bye") is True
    assert [t.title for t in load_tags(video)] == ["Intro", "Outro"]

    assert session.delete(0) is True
    assert load_tags(video) == [Tag(time=20.0, title="Outro", description="bye")]

    assert session.clear() is True
    assert load_tags(video) == []


def test_open_replaces_collection(tmp_path):
    first = str(tmp_path / "a.mp4")
    second = str(tmp_path / "b.mp4")
    save_tags(first, [Tag(time=1.0, title="A")])
    session = TagSession()
    session.open(first)
    assert [t.title for t in session.tags] == ["A"]
    session.open(second)
    assert session.tags == []
    assert session.video_path == second


def test_open_with_explicit_tag_path(tmp_path):
    tag_file = str(tmp_path / "custom.JSON")
    save_tags(tag_file, [Tag(time=2.0, title="B")])
    session = TagSession()
    session.open("http://example.com/clip.mp4", tag_file)
    assert [t.title for t in session.tags] == ["B"]


def test_validation_error_writes_nothing(tmp_path):
    video = tmp_path / "clip.mp4"
    session = TagSession()
    session.open(str(video))
    with pytest.raises(TagValidationError):
        session.upsert(1.0, "  ")
    assert not (tmp_path / "clip.mp4.json").exists()


def test_write_failure_keeps_memory(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")
    session = TagSession()
    session.open(str(blocker / "clip.mp4"))
    assert session.upsert(1.0, "A") is False
    assert session.tags == [Tag(time=1.0, title="A")]


def test_temp_tag_path_is_mirrored_to_user_copy(tmp_path, monkeypatch):
    monkeypatch.setattr(tempfile, "tempdir", str(tmp_path / "tmp"))
    monkeypatch.setattr(drop_paths, "config_dir", lambda: tmp_path / "config")
    tag_path = drop_paths.temp_tag_path("clip.mp4")

    session = TagSession()
    session.open("http://example.com/clip.mp4", tag_path)
    assert session.upsert(4.0, "Remote") is True
    user_copy = tmp_path / "config" / "tags" / "clip.mp4.json"
    assert user_copy.exists()

    (tmp_path / "tmp" / "TagVideoPlayer" / "clip.mp4.json").unlink()
    reopened = TagSession()
    reopened.open("http://example.com/clip.mp4", tag_path)
    assert reopened.tags == [Tag(time=4.0, title="Remote")]


def test_close_resets_session(tmp_path):
    session = TagSession()
    session.open(str(tmp_path / "clip.mp4"))
    session.close()
    assert not session.is_open
    assert session.tags == []


def test_bad_entry_does_not_cost_the_other_tags(tmp_path):
    video = tmp_path / "clip.mp4"
    (tmp_path / "clip.mp4.json").write_text(
        '{"timelines": [{"time": 1, "title": "Keep"}, {"time": 2}]}', encoding="utf-8"
    )
    session = TagSession()
    session.open(str(video))
    assert session.upsert(50.0, "New") is True
    assert [t.title for t in load_tags(str(video))] == ["Keep", "New"]


def test_infinite_time_in_file_does_not_break_saving(tmp_path):
    video = tmp_path / "clip.mp4"
    (tmp_path / "clip.mp4.json").write_text(
        '{"timelines": [{"time": Infinity, "title": "A"}, {"time": 4, "title": "B"}]}',
        encoding="utf-8",
    )
    session = TagSession()
    assert session.open(str(video)) == [Tag(time=4.0, title="B")]
    assert session.upsert(1.0, "C") is True
    assert session.delete(0) is True
    assert [p.name for p in tmp_path.iterdir()] == ["clip.mp4.json"]
    assert load_tags(str(video)) == [Tag(time=4.0, title="B")]
