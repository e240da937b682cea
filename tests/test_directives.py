"""
Tests for the reply directive parser.
"""
import pytest

from untire.coach.directives import (
    BreathingDirective,
    VideoDirective,
    media_payload,
    parse_duration,
    parse_reply,
)
from untire.coach.prompt import video_tag
from untire.stores.records import VideoEntry


def test_mixed_reply_strips_tags_and_keeps_spacing():
    raw = "Let's try this. [BREATHING:Box:60:4-4-4-4:]  [VIDEO:Calm:https://x/y]"

    parsed = parse_reply(raw)

    assert parsed.text == "Let's try this.   "
    assert parsed.breathing == [
        BreathingDirective(title="Box", duration=60, pattern="4-4-4-4", embed_code="")
    ]
    assert parsed.videos == [VideoDirective(title="Calm", embed_url="https://x/y")]
    assert [b.to_dict() for b in parsed.breathing] == [
        {"title": "Box", "duration": 60, "pattern": "4-4-4-4", "embedCode": ""}
    ]
    assert [v.to_dict() for v in parsed.videos] == [{"title": "Calm", "embedUrl": "https://x/y"}]


def test_clean_text_is_returned_unchanged():
    raw = "  How did you sleep last night?\n\nTell me more [if you like].  "

    parsed = parse_reply(raw)

    assert parsed.text == raw
    assert parsed.videos == []
    assert parsed.breathing == []
    assert media_payload(parsed) is None


def test_empty_reply():
    parsed = parse_reply("")
    assert parsed.text == ""
    assert not parsed.has_media


def test_each_kind_keeps_order_of_appearance():
    raw = (
        "A [VIDEO:One:https://v/1] B [BREATHING:First:30:slow:] "
        "C [VIDEO:Two:https://v/2] D [BREATHING:Second:90:fast:<iframe>] E"
    )

    parsed = parse_reply(raw)

    assert [v.title for v in parsed.videos] == ["One", "Two"]
    assert [b.title for b in parsed.breathing] == ["First", "Second"]
    assert parsed.breathing[1].embed_code == "<iframe>"
    assert parsed.text == "A  B  C  D  E"


@pytest.mark.parametrize("raw", [
    "[VIDEO:no-locator]",
    "[VIDEO::https://x/y]",
    "[VIDEO:Title:]",
    "[VIDEO:Title:https://x/y",
    "[BREATHING:Box:60:]",
    "[BREATHING:Box:60:4-4-4-4",
    "[BREATHING::60:4-4-4-4:]",
    "(VIDEO:Calm:https://x/y)",
    "[video:Calm:https://x/y]",
])
def test_malformed_tags_are_left_untouched(raw):
    text = f"before {raw} after"

    parsed = parse_reply(text)

    assert parsed.text == text
    assert not parsed.has_media


def test_nested_prefix_becomes_part_of_the_outer_title():
    raw = "x [VIDEO:[VIDEO:Calm:https://x/y] y"

    parsed = parse_reply(raw)

    assert parsed.videos == [VideoDirective(title="[VIDEO", embed_url="Calm:https://x/y")]
    assert parsed.text == "x  y"


def test_locator_runs_to_the_first_closing_bracket():
    raw = "[VIDEO:Calm:https://x/y [VIDEO:Rest:https://x/z] done"

    parsed = parse_reply(raw)

    assert parsed.videos == [
        VideoDirective(title="Calm", embed_url="https://x/y [VIDEO:Rest:https://x/z")
    ]
    assert parsed.text == " done"


def test_catalog_title_with_brackets_survives_the_tag():
    tag = video_tag(VideoEntry(id="v1", title="Calm [HD]", embed_url="https://x/y"))

    parsed = parse_reply(f"Try this. {tag} ok")

    assert parsed.videos == [VideoDirective(title="Calm [HD]", embed_url="https://x/y")]
    assert parsed.text == "Try this.  ok"


def test_embed_code_may_contain_an_opening_bracket():
    parsed = parse_reply("A [BREATHING:Box:60:4-4-4-4:<div data-x='[1'>] B")

    assert parsed.breathing == [
        BreathingDirective(title="Box", duration=60, pattern="4-4-4-4", embed_code="<div data-x='[1'>")
    ]
    assert parsed.text == "A  B"


def test_video_fields_are_trimmed_and_locator_may_contain_colons():
    parsed = parse_reply("[VIDEO: Deep Meditation : https://www.youtube.com/embed/abc ]")

    assert parsed.videos == [
        VideoDirective(title="Deep Meditation", embed_url="https://www.youtube.com/embed/abc")
    ]
    assert parsed.text == ""


def test_bad_duration_does_not_break_the_turn():
    parsed = parse_reply("[BREATHING:Box:about a minute:4-4-4-4:]")

    assert len(parsed.breathing) == 1
    assert parsed.breathing[0].duration is None
    assert parsed.text == ""


@pytest.mark.parametrize("raw,expected", [
    ("60", 60),
    (" 45s", 45),
    ("120 seconds", 120),
    ("-3", -3),
    ("+7", 7),
    ("abc", None),
    ("", None),
    ("-", None),
])
def test_parse_duration(raw, expected):
    assert parse_duration(raw) == expected


def test_media_payload_keeps_empty_kind_as_none():
    only_video = parse_reply("[VIDEO:Calm:https://x/y]")
    only_breathing = parse_reply("[BREATHING:Box:60:4-4-4-4:]")

    assert media_payload(only_video) == {
        "videos": [{"title": "Calm", "embedUrl": "https://x/y"}],
        "breathing": None,
    }
    assert media_payload(only_breathing) == {
        "videos": None,
        "breathing": [{"title": "Box", "duration": 60, "pattern": "4-4-4-4", "embedCode": ""}],
    }
