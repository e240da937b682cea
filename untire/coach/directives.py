"""
Directive parser for coach replies.

The model embeds tool suggestions inline as bracket tags:

  [VIDEO:<title>:<embed_url>]
  [BREATHING:<title>:<duration>:<pattern>:<embed_code>]

parse_reply() scans the reply once, left to right, collects well-formed tags
of each kind in order of appearance, and removes exactly those substrings
from the display text. Anything that does not match the grammar stays in
the text untouched. Never raises.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)

VIDEO_PREFIX = "[VIDEO:"
BREATHING_PREFIX = "[BREATHING:"

# Inner fields (title, duration, pattern) end at the next ':'; the last
# field (locator or embed code) ends at the next ']' and may hold ':'
FIELD_END = ":"
TAG_END = "]"


@dataclass(frozen=True)
class VideoDirective:
    title: str
    embed_url: str

    def to_dict(self) -> dict:
        return {"title": self.title, "embedUrl": self.embed_url}


@dataclass(frozen=True)
class BreathingDirective:
    title: str
    duration: Optional[int]  # None when the duration field isn't a number
    pattern: str
    embed_code: str

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "duration": self.duration,
            "pattern": self.pattern,
            "embedCode": self.embed_code,
        }


@dataclass(frozen=True)
class ParsedReply:
    text: str
    videos: list[VideoDirective] = field(default_factory=list)
    breathing: list[BreathingDirective] = field(default_factory=list)

    @property
    def has_media(self) -> bool:
        return bool(self.videos or self.breathing)


# ── Field readers ────────────────────────────────────────────────────

def _read_field(text: str, pos: int, terminator: str) -> Optional[tuple[str, int]]:
    """
    Read characters from `pos` up to `terminator`.

    Returns (value, index just past the terminator), or None if the text
    ends first.
    """
    end = text.find(terminator, pos)
    if end < 0:
        return None
    return text[pos:end], end + 1


def parse_duration(raw: str) -> Optional[int]:
    """Leading-integer parse: '60' → 60, ' 45s' → 45, '-3' → -3, 'abc' → None."""
    s = raw.lstrip()
    sign = 1
    if s[:1] in ("+", "-"):
        sign = -1 if s[0] == "-" else 1
        s = s[1:]
    digits = ""
    for ch in s:
        if not ch.isdigit() or not ch.isascii():
            break
        digits += ch
    if not digits:
        return None
    return sign * int(digits)


def _match_video(text: str, start: int) -> Optional[tuple[VideoDirective, int]]:
    pos = start + len(VIDEO_PREFIX)

    got = _read_field(text, pos, FIELD_END)
    if got is None or not got[0]:
        return None
    title, pos = got

    got = _read_field(text, pos, TAG_END)
    if got is None or not got[0]:
        return None
    url, end = got

    return VideoDirective(title=title.strip(), embed_url=url.strip()), end


def _match_breathing(text: str, start: int) -> Optional[tuple[BreathingDirective, int]]:
    pos = start + len(BREATHING_PREFIX)

    fields = []
    for _ in range(3):
        got = _read_field(text, pos, FIELD_END)
        if got is None or not got[0]:
            return None
        value, pos = got
        fields.append(value)

    # Embed code may be empty: [BREATHING:Box:60:4-4-4-4:]
    got = _read_field(text, pos, TAG_END)
    if got is None:
        return None
    embed_code, end = got

    title, duration, pattern = fields
    return BreathingDirective(
        title=title,
        duration=parse_duration(duration),
        pattern=pattern,
        embed_code=embed_code,
    ), end


# ── Parser ───────────────────────────────────────────────────────────

def parse_reply(raw: str) -> ParsedReply:
    """Split a model reply into display text and ordered directive lists."""
    if not raw:
        return ParsedReply(text=raw or "")

    videos: list[VideoDirective] = []
    breathing: list[BreathingDirective] = []
    kept: list[str] = []

    i = 0
    copied_to = 0
    n = len(raw)
    while i < n:
        if raw[i] != "[":
            i += 1
            continue

        match = None
        if raw.startswith(VIDEO_PREFIX, i):
            match = _match_video(raw, i)
            if match:
                videos.append(match[0])
        elif raw.startswith(BREATHING_PREFIX, i):
            match = _match_breathing(raw, i)
            if match:
                breathing.append(match[0])

        if match is None:
            # Not a tag (or a broken one): keep it, resume at the next char
            i += 1
            continue

        kept.append(raw[copied_to:i])
        i = copied_to = match[1]

    if not videos and not breathing:
        return ParsedReply(text=raw)

    kept.append(raw[copied_to:])
    logger.debug("Parsed %d video and %d breathing directives", len(videos), len(breathing))
    return ParsedReply(text="".join(kept), videos=videos, breathing=breathing)


def media_payload(parsed: ParsedReply) -> Optional[dict]:
    """
    Media column value for the assistant message.

    None when the reply carried no directives; otherwise both keys are
    present and an empty kind is None.
    """
    if not parsed.has_media:
        return None
    return {
        "videos": [v.to_dict() for v in parsed.videos] or None,
        "breathing": [b.to_dict() for b in parsed.breathing] or None,
    }
