"""
yttext — Extract YouTube video captions and render them as text.

Public API:
    extract()                High-level one-call interface (URL/ID → formatted output).
    get_transcript()         Fetch parsed caption segments for a video ID.
    get_transcript_by_url()  Fetch parsed caption segments for a YouTube URL.
    list_tracks()            List the caption tracks a video offers.
    parse_video_id()         Extract the video ID from a YouTube URL.
    get_formatter()          Build a text / json / srt / readable formatter.
    TimedTextSegment         One parsed caption cue.
    CaptionTrack             One caption track listed on the watch page.

Exception hierarchy (all importable from this package):
    TranscriptError                 Base exception for all errors.
    ├── InvalidURLError             No video ID in the URL.
    ├── FetchError                  HTTP failure or non-200 status.
    ├── RateLimitedError            YouTube served a CAPTCHA.
    ├── VideoUnavailableError       Video page isn't playable.
    ├── CaptionsDisabledError       Video has captions turned off.
    ├── NoTranscriptAvailableError  Captions block lists no tracks.
    ├── NoSuitableTrackError        No usable track to download.
    ├── ExtractionError             Embedded captions JSON is malformed.
    ├── NoTranscriptTextError       Caption body has no cues.
    ├── ParseFailureError           No cue had valid timing.
    └── UnknownFormatError          Output format name not recognised.

Usage:
    from yttext import extract
    text = extract("https://www.youtube.com/watch?v=dQw4w9WgXcQ")

    # SubRip subtitles in German (falls back to the first track):
    srt = extract("https://youtu.be/dQw4w9WgXcQ", language_code="de", fmt="srt")
"""

from yttext.errors import (
    CaptionsDisabledError,
    ExtractionError,
    FetchError,
    InvalidURLError,
    NoSuitableTrackError,
    NoTranscriptAvailableError,
    NoTranscriptTextError,
    ParseFailureError,
    RateLimitedError,
    TranscriptError,
    UnknownFormatError,
    VideoUnavailableError,
)
from yttext.extractor import (
    extract,
    get_transcript,
    get_transcript_by_url,
    list_tracks,
    parse_video_id,
)
from yttext.formatters import get_formatter
from yttext.models import CaptionTrack, TimedTextSegment

__all__ = [
    "extract",
    "get_transcript",
    "get_transcript_by_url",
    "list_tracks",
    "parse_video_id",
    "get_formatter",
    "TimedTextSegment",
    "CaptionTrack",
    "TranscriptError",
    "InvalidURLError",
    "FetchError",
    "RateLimitedError",
    "VideoUnavailableError",
    "CaptionsDisabledError",
    "NoTranscriptAvailableError",
    "NoSuitableTrackError",
    "ExtractionError",
    "NoTranscriptTextError",
    "ParseFailureError",
    "UnknownFormatError",
]
