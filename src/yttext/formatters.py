"""
formatters.py — Render transcript segments as text, JSON, SRT or prose.

Each formatter is a small class with a single format_transcript() method.
get_formatter() maps the four format names used by the CLI and the REST
API onto fresh instances:

    text      "[M:SS] text" lines
    json      list of {"text", "duration", "offset", "start"} objects
    srt       SubRip subtitle file
    readable  segments merged into word-wrapped paragraphs

Formatters hold no state between calls and do no I/O.
"""

from __future__ import annotations

import json
from collections.abc import Sequence

from yttext.config import config
from yttext.errors import UnknownFormatError
from yttext.models import TimedTextSegment


# ---------------------------------------------------------------------------
# Time helpers
# ---------------------------------------------------------------------------

def _seconds_to_clock(seconds: float) -> str:
    """
    Convert a float timestamp (in seconds) to M:SS, or H:MM:SS past an hour.

    Fractions of a second are truncated: 65.9 → "1:05", 3661.0 → "1:01:01".
    """
    hours, rest = divmod(int(seconds), 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def _seconds_to_srt_time(seconds: float) -> str:
    """
    Convert a float timestamp (in seconds) to SRT's HH:MM:SS,mmm.

    Milliseconds are rounded, not truncated, so 3.05 (which is stored as
    3.0499999...) comes out as 00:00:03,050.
    """
    total_ms = round(seconds * 1000)
    total_secs, millis = divmod(total_ms, 1000)
    hours, rest = divmod(total_secs, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d},{millis:03d}"


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------

class Formatter:
    """Base class: turns a sequence of segments into one output string."""

    name: str = ""

    def format_transcript(self, segments: Sequence[TimedTextSegment]) -> str:
        raise NotImplementedError


class TextFormatter(Formatter):
    """One "[clock] text" line per segment, each line newline-terminated."""

    name = "text"

    def format_transcript(self, segments: Sequence[TimedTextSegment]) -> str:
        return "".join(
            f"[{_seconds_to_clock(segment.start)}] {segment.text}\n"
            for segment in segments
        )


class JSONFormatter(Formatter):
    """
    The segment list as a JSON array.

    Pretty output (the default) uses a 2-space indent; pretty=False gives
    compact output with no whitespace between tokens.
    """

    name = "json"

    def __init__(self, pretty: bool = True) -> None:
        self.pretty = pretty

    def format_transcript(self, segments: Sequence[TimedTextSegment]) -> str:
        data = [segment.to_dict() for segment in segments]
        if self.pretty:
            return json.dumps(data, indent=2, ensure_ascii=False)
        return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


class SRTFormatter(Formatter):
    """SubRip: index, "start --> end" line, text, blank line."""

    name = "srt"

    def format_transcript(self, segments: Sequence[TimedTextSegment]) -> str:
        blocks = []
        for index, segment in enumerate(segments, start=1):
            start = _seconds_to_srt_time(segment.start)
            end = _seconds_to_srt_time(segment.start + segment.duration)
            blocks.append(f"{index}\n{start} --> {end}\n{segment.text}\n\n")
        return "".join(blocks)


class ReadableFormatter(Formatter):
    """
    Merge segments into paragraphs and word-wrap them.

    A new paragraph starts between two segments when
      - the first one (trimmed) ends in ".", "!" or "?" and the second one
        starts with an upper-case letter, or
      - either of them contains "[", which marks a sound annotation such as
        "[Music]" or "[Applause]" that shouldn't be glued into speech.

    Paragraphs are wrapped at word boundaries to `max_line_length`
    characters and separated by a blank line.
    """

    name = "readable"

    def __init__(self, max_line_length: int | None = None) -> None:
        self.max_line_length = max_line_length if max_line_length is not None else config.LINE_LENGTH

    def format_transcript(self, segments: Sequence[TimedTextSegment]) -> str:
        paragraphs = group_into_paragraphs(segments)
        return "\n\n".join(wrap_text(p, self.max_line_length) for p in paragraphs)


# ---------------------------------------------------------------------------
# Paragraph helpers
# ---------------------------------------------------------------------------

def should_start_new_paragraph(prev_text: str, curr_text: str) -> bool:
    """Decide whether a paragraph break belongs between two adjacent segments."""
    ends_sentence = prev_text.strip().endswith((".", "!", "?"))
    starts_capital = curr_text[:1].isupper()
    has_annotation = "[" in prev_text or "[" in curr_text
    return (ends_sentence and starts_capital) or has_annotation


def group_into_paragraphs(segments: Sequence[TimedTextSegment]) -> list[str]:
    """
    Join consecutive segment texts into paragraph strings.

    Texts are joined with a single space unless the left side already ends
    with one or the right side already starts with one.
    """
    if not segments:
        return []

    paragraphs: list[str] = []
    current = segments[0].text

    for prev, segment in zip(segments, segments[1:]):
        if should_start_new_paragraph(prev.text, segment.text):
            paragraphs.append(current)
            current = segment.text
            continue
        if not current.endswith(" ") and not segment.text.startswith(" "):
            current += " "
        current += segment.text

    if current:
        paragraphs.append(current)

    return paragraphs


def wrap_text(text: str, line_length: int) -> str:
    """
    Greedy word wrap.

    Lines are filled word by word and never broken inside a word; a word
    longer than `line_length` gets a line of its own.  Runs of whitespace
    collapse to single spaces.  A non-positive `line_length` disables
    wrapping and returns the text unchanged.
    """
    if line_length <= 0:
        return text

    words = text.split()
    if not words:
        return ""

    lines: list[str] = []
    current = words[0]
    for word in words[1:]:
        if len(current) + 1 + len(word) > line_length:
            lines.append(current)
            current = word
        else:
            current += " " + word
    lines.append(current)

    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

# Closed set: adding a format means adding a class here.
_FORMATTERS: dict[str, type[Formatter]] = {
    TextFormatter.name: TextFormatter,
    JSONFormatter.name: JSONFormatter,
    SRTFormatter.name: SRTFormatter,
    ReadableFormatter.name: ReadableFormatter,
}

FORMAT_NAMES: tuple[str, ...] = tuple(_FORMATTERS)


def get_formatter(name: str, *, max_line_length: int | None = None) -> Formatter:
    """
    Build the formatter for a format name (case-insensitive).

    Args:
        name:            One of "text", "json", "srt", "readable".
        max_line_length: Wrap width, only used by "readable".

    Raises:
        UnknownFormatError: For any other name.
    """
    formatter_cls = _FORMATTERS.get(name.lower())
    if formatter_cls is None:
        raise UnknownFormatError(name)
    if formatter_cls is ReadableFormatter:
        return ReadableFormatter(max_line_length=max_line_length)
    return formatter_cls()
