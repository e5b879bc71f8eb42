"""
models.py — Data structures shared by the scraper and the formatters.

TimedTextSegment is the public result entity: one parsed caption cue.
CaptionTrack describes one caption stream offered by the watch page and
only lives for the duration of a single extraction call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class TimedTextSegment:
    """
    A single caption cue after parsing and entity un-escaping.

    `offset` and `start` hold the same value (seconds from the beginning of
    the video).  Both names are kept because downstream JSON consumers
    expect both keys.

    Attributes:
        text:     Caption text, may be empty for non-speech cues.
        duration: Cue length in seconds.
        offset:   Cue start in seconds.
        start:    Cue start in seconds (same as offset).
    """
    text: str
    duration: float
    offset: float
    start: float

    @property
    def end(self) -> float:
        """Cue end time in seconds."""
        return self.start + self.duration

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON shape used by the json formatter and the REST API."""
        return {
            "text": self.text,
            "duration": self.duration,
            "offset": self.offset,
            "start": self.start,
        }


@dataclass(frozen=True)
class CaptionTrack:
    """
    One caption track listed in the watch page's captions configuration.

    Only the two fields the pipeline needs are modelled; everything else
    YouTube supplies is kept untouched in `raw`.
    """
    language_code: str
    base_url: str
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def name(self) -> str:
        """Display name of the track, e.g. "English (auto-generated)"."""
        name = self.raw.get("name")
        if not isinstance(name, dict):
            return ""
        if "simpleText" in name:
            return str(name["simpleText"])
        runs = name.get("runs") or []
        return "".join(str(run.get("text", "")) for run in runs if isinstance(run, dict))

    @property
    def is_generated(self) -> bool:
        """True for YouTube's automatic speech-recognition tracks."""
        return self.raw.get("kind") == "asr"
