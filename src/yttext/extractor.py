"""
extractor.py — Transcript extraction entry points.

This is the public face of yttext.  It ties the page scraper in
captions.py to URL handling and output formatting:

    1. Parsing YouTube URLs         → parse_video_id()
    2. Fetching transcript segments → get_transcript(), get_transcript_by_url()
    3. Listing caption tracks       → list_tracks()
    4. One-call convenience         → extract()

Every call makes at most two sequential HTTP requests (watch page, then
caption body).  Nothing is cached or retried; the first error aborts the
call and no partial result is returned.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import parse_qs, urlparse

from yttext.captions import TranscriptFetcher, parse_caption_xml, select_track
from yttext.config import config
from yttext.errors import InvalidURLError
from yttext.formatters import get_formatter
from yttext.models import CaptionTrack, TimedTextSegment

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Host of YouTube's share links: https://youtu.be/VIDEO_ID
_SHORT_LINK_HOST = "youtu.be"

# Hosts whose watch URLs carry the ID in the "v" query parameter.
_CANONICAL_HOSTS = frozenset({"youtube.com", "www.youtube.com"})

# A bare video ID is exactly 11 characters from the base64url alphabet.
_BARE_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{11}$")


# ---------------------------------------------------------------------------
# URL parsing
# ---------------------------------------------------------------------------

def parse_video_id(url: str) -> str:
    """
    Extract the video ID from a YouTube URL.

    Two URL shapes are understood:
        https://youtu.be/VIDEO_ID              → last path segment
        https://www.youtube.com/watch?v=ID     → the "v" query parameter

    A missing scheme ("youtube.com/watch?v=...") is tolerated.  No network
    access happens here.

    Args:
        url: A YouTube URL.

    Returns:
        The video ID.

    Raises:
        InvalidURLError: If no ID can be determined.
    """
    cleaned = url.strip()
    if "://" not in cleaned:
        cleaned = f"https://{cleaned}"
    try:
        parsed = urlparse(cleaned)
    except ValueError as exc:
        # e.g. an unbalanced "[" in the host part
        raise InvalidURLError(url) from exc

    host = parsed.hostname or ""

    # Only the host counts: watch URLs often carry "feature=youtu.be".
    if host == _SHORT_LINK_HOST:
        video_id = parsed.path.rstrip("/").rpartition("/")[2]
        if video_id:
            return video_id
        raise InvalidURLError(url)

    if host in _CANONICAL_HOSTS:
        values = parse_qs(parsed.query).get("v")
        if values and values[0]:
            return values[0]

    raise InvalidURLError(url)


def _is_bare_id(url_or_id: str) -> bool:
    """True when the input looks like a raw video ID rather than a URL."""
    return bool(_BARE_ID_PATTERN.match(url_or_id.strip()))


# ---------------------------------------------------------------------------
# Transcript fetching
# ---------------------------------------------------------------------------

def get_transcript(
    video_id: str,
    language_code: str = "en",
    *,
    fetcher: TranscriptFetcher | None = None,
) -> list[TimedTextSegment]:
    """
    Fetch and parse the transcript of a single video.

    Language selection is best-effort: if `language_code` isn't offered,
    the video's first caption track is used.

    Args:
        video_id:      The YouTube video ID (NOT a full URL).
        language_code: Preferred caption language; empty means "en".
        fetcher:       Optional TranscriptFetcher, e.g. one sharing a
                       configured requests.Session.

    Returns:
        Segments in caption order.

    Raises:
        TranscriptError: (or subclass) on any failure; see errors.py.
    """
    fetcher = fetcher or TranscriptFetcher()

    tracks = fetcher.list_caption_tracks(video_id)
    track = select_track(tracks, language_code)
    logger.info(f"Using {track.language_code!r} caption track for video {video_id}")

    body = fetcher.fetch_caption_body(track.base_url)
    segments = parse_caption_xml(body)
    logger.info(f"Parsed {len(segments)} segments for video {video_id}")
    return segments


def get_transcript_by_url(
    url: str,
    language_code: str = "en",
    *,
    fetcher: TranscriptFetcher | None = None,
) -> list[TimedTextSegment]:
    """
    Same as get_transcript(), but starting from a YouTube URL.

    Raises:
        InvalidURLError: If the URL doesn't identify a video.
        TranscriptError: (or subclass) on any later failure.
    """
    video_id = parse_video_id(url)
    return get_transcript(video_id, language_code, fetcher=fetcher)


def list_tracks(
    url_or_id: str,
    *,
    fetcher: TranscriptFetcher | None = None,
) -> list[CaptionTrack]:
    """
    List the caption tracks a video offers, without downloading any of them.

    Accepts a URL or a bare 11-character video ID.
    """
    video_id = url_or_id.strip() if _is_bare_id(url_or_id) else parse_video_id(url_or_id)
    fetcher = fetcher or TranscriptFetcher()
    return fetcher.list_caption_tracks(video_id)


# ---------------------------------------------------------------------------
# High-level convenience function (main public API)
# ---------------------------------------------------------------------------

def extract(
    url_or_id: str,
    language_code: str | None = None,
    fmt: str = "text",
    *,
    max_line_length: int | None = None,
    fetcher: TranscriptFetcher | None = None,
) -> str:
    """
    One-call interface: parse URL → fetch transcript → format output.

    The format name is checked before any network request, so a typo fails
    fast with UnknownFormatError.

    Args:
        url_or_id:       A YouTube URL or a bare 11-character video ID.
        language_code:   Preferred caption language; defaults to config
                         (normally "en").
        fmt:             "text", "json", "srt" or "readable".
        max_line_length: Wrap width for the "readable" format; ignored by
                         the other formats.
        fetcher:         Optional TranscriptFetcher to reuse.

    Returns:
        The formatted transcript.

    Raises:
        UnknownFormatError: If fmt isn't a known format.
        TranscriptError:    (or subclass) on any extraction failure.
    """
    formatter = get_formatter(fmt, max_line_length=max_line_length)
    language_code = language_code if language_code is not None else config.DEFAULT_LANGUAGE

    if _is_bare_id(url_or_id):
        segments = get_transcript(url_or_id.strip(), language_code, fetcher=fetcher)
    else:
        segments = get_transcript_by_url(url_or_id, language_code, fetcher=fetcher)

    return formatter.format_transcript(segments)
