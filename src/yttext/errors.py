"""
errors.py — Custom exception hierarchy for yttext.

Every exception carries an `http_status` attribute so the FastAPI error
handler can translate library-level errors directly into the correct HTTP
response code without a separate mapping table.

Hierarchy:
    TranscriptError (base, 500)
    ├── InvalidURLError (400)
    ├── FetchError (502)
    ├── RateLimitedError (429)
    ├── VideoUnavailableError (404)
    ├── CaptionsDisabledError (404)
    ├── NoTranscriptAvailableError (404)
    ├── NoSuitableTrackError (404)
    ├── ExtractionError (502)
    ├── NoTranscriptTextError (502)
    ├── ParseFailureError (502)
    └── UnknownFormatError (400)
"""


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class TranscriptError(Exception):
    """
    Root exception for all transcript-related errors.

    Attributes:
        message:     Human-readable description of what went wrong.
        http_status: Suggested HTTP status code for the API layer.
    """

    def __init__(self, message: str, http_status: int = 500) -> None:
        super().__init__(message)
        self.message = message
        self.http_status = http_status


# ---------------------------------------------------------------------------
# Input errors
# ---------------------------------------------------------------------------

class InvalidURLError(TranscriptError):
    """
    Raised when no video ID can be determined from a URL.

    Only two shapes are understood: youtu.be short links and
    youtube.com/watch?v=... links.  Maps to HTTP 400.
    """

    def __init__(self, url: str) -> None:
        super().__init__(
            message=f"Could not extract video ID from URL: {url}",
            http_status=400,
        )
        self.url = url


class UnknownFormatError(TranscriptError):
    """Raised when an output format name is not one of the known formatters."""

    def __init__(self, name: str) -> None:
        super().__init__(
            message=f"Unknown format type: {name}",
            http_status=400,
        )
        self.name = name


# ---------------------------------------------------------------------------
# Network errors
# ---------------------------------------------------------------------------

class FetchError(TranscriptError):
    """
    Raised when an HTTP request fails or returns a non-200 status.

    Covers both the watch-page fetch and the caption-body fetch.  Maps to
    HTTP 502 because the failure is upstream.
    """

    def __init__(self, url: str, reason: str = "", status_code: int | None = None) -> None:
        detail = f": {reason}" if reason else ""
        super().__init__(
            message=f"Failed to fetch {url}{detail}",
            http_status=502,
        )
        self.url = url
        self.status_code = status_code


class RateLimitedError(TranscriptError):
    """
    Raised when YouTube answers with a CAPTCHA page instead of the video.

    Nothing is retried; backing off is the caller's decision.  Maps to 429.
    """

    def __init__(self, video_id: str) -> None:
        super().__init__(
            message=f"Too many requests: YouTube returned a CAPTCHA for video {video_id}",
            http_status=429,
        )
        self.video_id = video_id


# ---------------------------------------------------------------------------
# Page / caption-metadata errors
# ---------------------------------------------------------------------------

class VideoUnavailableError(TranscriptError):
    """Raised when the watch page has no playability status (deleted, private, bad ID)."""

    def __init__(self, video_id: str) -> None:
        super().__init__(
            message=f"Video unavailable: {video_id}",
            http_status=404,
        )
        self.video_id = video_id


class CaptionsDisabledError(TranscriptError):
    """
    Raised when the page loaded normally but carries no captions configuration.

    Typical for videos whose creator disabled subtitles.  Maps to HTTP 404.
    """

    def __init__(self, video_id: str) -> None:
        super().__init__(
            message=f"Transcripts are disabled for video: {video_id}",
            http_status=404,
        )
        self.video_id = video_id


class NoTranscriptAvailableError(TranscriptError):
    """Raised when the captions configuration exists but lists no caption tracks."""

    def __init__(self, video_id: str) -> None:
        super().__init__(
            message=f"No transcript available for video: {video_id}",
            http_status=404,
        )
        self.video_id = video_id


class NoSuitableTrackError(TranscriptError):
    """
    Raised when no caption track can be used.

    Either the track list is empty or the chosen track has no fetch URL.
    A missing language is NOT an error: selection falls back to the first
    track instead.
    """

    def __init__(self, reason: str = "no suitable caption track found") -> None:
        super().__init__(message=reason, http_status=404)


class ExtractionError(TranscriptError):
    """
    Raised when the embedded captions JSON cannot be cut out or decoded.

    This usually means YouTube changed its page layout.  Maps to HTTP 502.
    """

    def __init__(self, video_id: str, reason: str = "") -> None:
        detail = f": {reason}" if reason else ""
        super().__init__(
            message=f"Failed to parse captions JSON for video {video_id}{detail}",
            http_status=502,
        )
        self.video_id = video_id


# ---------------------------------------------------------------------------
# Caption-body errors
# ---------------------------------------------------------------------------

class NoTranscriptTextError(TranscriptError):
    """Raised when the caption body contains no <text> cues at all."""

    def __init__(self) -> None:
        super().__init__(
            message="No transcript text found in caption data",
            http_status=502,
        )


class ParseFailureError(TranscriptError):
    """Raised when cues were found but every one had unusable timing values."""

    def __init__(self, cue_count: int) -> None:
        super().__init__(
            message=f"Failed to parse any of {cue_count} transcript entries",
            http_status=502,
        )
        self.cue_count = cue_count
