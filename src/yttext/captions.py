"""
captions.py — Locate, select, fetch and parse YouTube caption tracks.

YouTube has no public API for captions.  The watch page embeds the player
configuration as JSON, and somewhere inside it sits a
`"captions": {"playerCaptionsTracklistRenderer": {...}}` object that lists
every caption track with a `baseUrl` pointing at a small XML document of
`<text start=".." dur="..">..</text>` cues.

This module is the only place that knows about that page layout:

    1. Fetching the watch page          → TranscriptFetcher.fetch_video_html()
    2. Cutting out the captions JSON    → extract_captions_json()
    3. Building track descriptors       → parse_caption_tracks()
    4. Choosing a track                 → select_track()
    5. Fetching the caption body        → TranscriptFetcher.fetch_caption_body()
    6. Parsing cues into segments       → parse_caption_xml()

When YouTube changes its markup, this is the file to update.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

import requests

from yttext.config import config
from yttext.errors import (
    CaptionsDisabledError,
    ExtractionError,
    FetchError,
    NoSuitableTrackError,
    NoTranscriptAvailableError,
    NoTranscriptTextError,
    ParseFailureError,
    RateLimitedError,
    VideoUnavailableError,
)
from yttext.models import CaptionTrack, TimedTextSegment

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Page markers
# ---------------------------------------------------------------------------

# Start of the captions configuration inside the embedded player JSON.
_CAPTIONS_MARKER = '"captions":'

# The key that follows "captions" in the player response.  Everything
# between the two markers is the JSON value we want.
_CAPTIONS_END_MARKER = ',"videoDetails'

# Present when YouTube serves a "prove you're not a robot" page.
_CAPTCHA_MARKER = 'class="g-recaptcha"'

# Every normally rendered watch page has this key; its absence means the
# video itself could not be loaded.
_PLAYABILITY_MARKER = '"playabilityStatus":'

# One caption cue.  Attribute values are captured loosely so that cues with
# garbage timing are still seen (and then dropped) instead of vanishing
# from the match count.
_CUE_PATTERN = re.compile(
    r'<text start="([^"]*)" dur="([^"]*)"[^>]*>(.*?)</text>',
    re.DOTALL,
)

# Timing values as YouTube writes them, e.g. "12.34".
_SECONDS_PATTERN = re.compile(r"[0-9.]+")

# Applied in this exact order, and no other entities are touched.
_ENTITIES: list[tuple[str, str]] = [
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
]


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

class TranscriptFetcher:
    """
    Performs the two HTTP round-trips of an extraction.

    Wraps a single requests.Session.  Pass your own session to share
    connection pools, cookies or adapters; the timeout comes from config
    unless given explicitly.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: float | None = config.HTTP_TIMEOUT,
    ) -> None:
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        if config.USER_AGENT:
            self.session.headers["User-Agent"] = config.USER_AGENT

    def _get(self, url: str, headers: dict[str, str] | None = None) -> str:
        """GET a URL and return the body text, raising FetchError on any failure."""
        logger.info(f"GET {url}")
        try:
            response = self.session.get(url, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise FetchError(url, reason=str(exc)) from exc

        logger.debug(f"GET {url} -> HTTP {response.status_code}")
        if response.status_code != 200:
            raise FetchError(
                url,
                reason=f"HTTP {response.status_code}",
                status_code=response.status_code,
            )
        # requests assumes ISO-8859-1 for text/* without a charset; YouTube
        # serves UTF-8.
        response.encoding = "utf-8"
        return response.text

    def fetch_video_html(self, video_id: str) -> str:
        """
        Download the watch page for a video.

        The Accept-Language header pins the page to one locale so the
        markers we search for stay stable.

        Raises:
            FetchError: Transport failure or non-200 status (video not found
                        or not accessible).
        """
        return self._get(
            config.watch_url(video_id),
            headers={"Accept-Language": config.ACCEPT_LANGUAGE},
        )

    def fetch_caption_body(self, base_url: str) -> str:
        """
        Download the timed-text XML for one caption track.

        Raises:
            FetchError: Transport failure or non-200 status.
        """
        return self._get(base_url)

    def list_caption_tracks(self, video_id: str) -> list[CaptionTrack]:
        """Fetch the watch page and return every caption track it lists."""
        html = self.fetch_video_html(video_id)
        captions_json = extract_captions_json(html, video_id)
        tracks = parse_caption_tracks(captions_json)
        logger.debug(f"Video {video_id} lists {len(tracks)} caption track(s)")
        return tracks


# ---------------------------------------------------------------------------
# Watch-page parsing
# ---------------------------------------------------------------------------

def extract_captions_json(html: str, video_id: str) -> dict[str, Any]:
    """
    Cut the caption configuration out of the raw watch-page HTML.

    Args:
        html:     Full body of the watch page.
        video_id: Only used for error messages.

    Returns:
        The `playerCaptionsTracklistRenderer` object.  It is guaranteed to
        contain a `captionTracks` key.

    Raises:
        RateLimitedError:           The page is a CAPTCHA challenge.
        VideoUnavailableError:      The page has no playability status.
        CaptionsDisabledError:      The page loaded but has no captions block.
        ExtractionError:            The captions block is not valid JSON.
        NoTranscriptAvailableError: The captions block lists no tracks.
    """
    _, marker, rest = html.partition(_CAPTIONS_MARKER)
    if not marker:
        # No captions block.  Work out why, most specific reason first.
        if _CAPTCHA_MARKER in html:
            raise RateLimitedError(video_id)
        if _PLAYABILITY_MARKER not in html:
            raise VideoUnavailableError(video_id)
        raise CaptionsDisabledError(video_id)

    end = rest.find(_CAPTIONS_END_MARKER)
    if end == -1:
        raise ExtractionError(video_id, reason="end of captions block not found")

    # The fragment may be split across lines in the raw page.
    fragment = rest[:end].replace("\n", "")

    try:
        data = json.loads(fragment)
    except json.JSONDecodeError as exc:
        raise ExtractionError(video_id, reason=str(exc)) from exc

    renderer = data.get("playerCaptionsTracklistRenderer") if isinstance(data, dict) else None
    if not isinstance(renderer, dict):
        raise CaptionsDisabledError(video_id)

    if "captionTracks" not in renderer:
        raise NoTranscriptAvailableError(video_id)

    return renderer


def parse_caption_tracks(captions_json: dict[str, Any]) -> list[CaptionTrack]:
    """
    Turn the `captionTracks` list into CaptionTrack descriptors, in page order.

    Entries that aren't JSON objects are skipped.  Missing `languageCode` or
    `baseUrl` fields become empty strings; select_track() decides whether
    such a track is usable.
    """
    raw_tracks = captions_json.get("captionTracks")
    if not isinstance(raw_tracks, list):
        # null, a scalar or an object: nothing usable, select_track() reports it
        raw_tracks = []

    tracks: list[CaptionTrack] = []
    for raw in raw_tracks:
        if not isinstance(raw, dict):
            continue
        language_code = raw.get("languageCode")
        base_url = raw.get("baseUrl")
        tracks.append(CaptionTrack(
            language_code=language_code if isinstance(language_code, str) else "",
            base_url=base_url if isinstance(base_url, str) else "",
            raw=raw,
        ))
    return tracks


def select_track(tracks: list[CaptionTrack], language_code: str = "") -> CaptionTrack:
    """
    Pick the track to download.

    An exact language match wins.  If the language isn't offered, the first
    track is used instead; asking for a language is a preference, not a
    requirement.

    Args:
        tracks:        Tracks in page order.
        language_code: Wanted language, e.g. "de".  Empty means the
                       configured default ("en").

    Raises:
        NoSuitableTrackError: The list is empty, or the chosen track has no
                              base URL.
    """
    if not tracks:
        raise NoSuitableTrackError("no caption tracks found")

    wanted = language_code or config.DEFAULT_LANGUAGE
    track = next((t for t in tracks if t.language_code == wanted), None)
    if track is None:
        track = tracks[0]
        logger.debug(
            f"No caption track for language {wanted!r}; "
            f"falling back to {track.language_code!r}"
        )

    if not track.base_url:
        raise NoSuitableTrackError("failed to extract caption track URL")

    return track


# ---------------------------------------------------------------------------
# Caption-body parsing
# ---------------------------------------------------------------------------

def unescape_entities(text: str) -> str:
    """Replace the five XML entities YouTube emits.  Nothing else is decoded."""
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    return text


def _parse_seconds(value: str) -> float | None:
    """
    Parse a timing attribute written as plain digits and dots.

    float() alone would also take "1_0", " 1.5 ", "1e3", "-1" or "nan";
    YouTube never writes those, so such cues are treated as broken.
    """
    if not _SECONDS_PATTERN.fullmatch(value):
        return None
    try:
        return float(value)
    except ValueError:
        # "1.2.3" and the like
        return None


def parse_caption_xml(body: str) -> list[TimedTextSegment]:
    """
    Parse a timed-text XML body into segments, preserving cue order.

    This is a pattern matcher for the one element shape YouTube uses, not a
    general XML parser: markup nested inside a cue is kept as literal text.
    Cues whose start or duration can't be parsed are dropped so that one
    bad cue doesn't lose the whole transcript.

    Raises:
        NoTranscriptTextError: No cues were found at all.
        ParseFailureError:     Cues were found, but every one was dropped.
    """
    matches = _CUE_PATTERN.findall(body)
    if not matches:
        raise NoTranscriptTextError()

    segments: list[TimedTextSegment] = []
    for raw_start, raw_duration, payload in matches:
        start = _parse_seconds(raw_start)
        duration = _parse_seconds(raw_duration)
        if start is None or duration is None:
            logger.debug(f"Dropping cue with bad timing start={raw_start!r} dur={raw_duration!r}")
            continue

        segments.append(TimedTextSegment(
            text=unescape_entities(payload),
            duration=duration,
            offset=start,
            start=start,
        ))

    if not segments:
        raise ParseFailureError(len(matches))

    return segments
