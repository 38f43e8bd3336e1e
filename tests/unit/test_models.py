import json

import pytest

from tag_video_player.core.models import (
    Tag,
    TagDocumentError,
    dump_tag_document,
    parse_tag_document,
    round_half_up,
)


def test_round_half_up():
    assert round_half_up(1.125, 2) == 1.13
    assert round_half_up(1.236, 2) == 1.24
    assert round_half_up(2.5, 0) == 3.0


def test_tag_to_dict_field_order_and_rounding():
    data = Tag(time=12.34567, title="Intro").to_dict()
    assert list(data.keys()) == ["time", "title", "description"]
    assert data["time"] == 12.346
    assert data["description"] == ""


def test_tag_from_dict_defaults_description():
    tag = Tag.from_dict({"time": 3, "title": "A"})
    assert tag == Tag(time=3.0, title="A", description="")


@pytest.mark.parametrize(
    "entry",
    [
        {"title": "no time"},
        {"time": 1},
        {"time": "1", "title": "string time"},
        {"time": True, "title": "bool time"},
        {"time": 1, "title": 5},
        ["not", "an", "object"],
        {"time": -3, "title": "negative"},
        {"time": float("inf"), "title": "infinite"},
        {"time": float("nan"), "title": "not a number"},
        {"time": 10 ** 400, "title": "too large"},
    ],
)
def test_tag_from_dict_rejects_bad_entries(entry):
    with pytest.raises(TagDocumentError):
        Tag.from_dict(entry)


def test_parse_tag_document_shapes():
    assert parse_tag_document("{}") == []
    assert parse_tag_document('{"timelines": []}') == []
    with pytest.raises(TagDocumentError):
        parse_tag_document("[]")
    with pytest.raises(TagDocumentError):
        parse_tag_document('{"timelines": {}}')
    with pytest.raises(TagDocumentError):
        parse_tag_document("{not json")


def test_dump_tag_document_keeps_non_ascii():
    text = dump_tag_document([Tag(time=1.5, title="開場", description="")])
    assert "開場" in text
    assert json.loads(text) == {"timelines": [{"time": 1.5, "title": "開場", "description": ""}]}
    assert text.startswith('{\n  "timelines"')


def test_round_half_up_leaves_large_and_non_finite_values():
    assert round_half_up(1e306, 3) == 1e306
    assert round_half_up(2.0 ** 60, 3) == 2.0 ** 60
    assert round_half_up(float("inf"), 3) == float("inf")


def test_parse_tag_document_skips_bad_entries():
    text = json.dumps(
        {
            "timelines": [
                {"time": 1, "title": "Keep"},
                {"time": 2},
                "junk",
                {"time": -1, "title": "Negative"},
                {"time": 3, "title": "Also keep"},
            ]
        }
    )
    assert parse_tag_document(text) == [Tag(time=1.0, title="Keep"), Tag(time=3.0, title="Also keep")]


def test_parse_tag_document_drops_nan_and_infinity_literals():
    text = (
        '{"timelines": [{"time": Infinity, "title": "A"}, {"time": NaN, "title": "B"},'
        ' {"time": -Infinity, "title": "C"}, {"time": 4, "title": "D"}]}'
    )
    assert parse_tag_document(text) == [Tag(time=4.0, title="D")]


def test_dump_tag_document_rejects_non_finite_time():
    with pytest.raises(ValueError):
        dump_tag_document([Tag(time=float("inf"), title="A")])
