"""
api.py — FastAPI REST API for yttext.

Exposes the same extraction pipeline as the CLI over HTTP.

Endpoints:
    GET /transcript/{video_id}   — Transcript for a video ID, in any output format.
    GET /transcript?url=...      — Same, starting from a YouTube URL.
    GET /tracks/{video_id}       — Caption tracks the video offers.
    GET /health                  — Simple health-check for load balancers / monitoring.

Run with:
    uvicorn yttext.api:app

The global exception handler catches any TranscriptError and converts it to
the appropriate HTTP response using the status code stored on the exception.
"""

from __future__ import annotations

import json

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from yttext.config import config
from yttext.errors import TranscriptError
from yttext.extractor import get_transcript, get_transcript_by_url, list_tracks
from yttext.formatters import JSONFormatter, get_formatter
from yttext.models import TimedTextSegment

# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------

app = FastAPI(
    title="yttext API",
    description="Extract YouTube captions as plain text, JSON, SRT subtitles "
                "or readable paragraphs.",
    version="0.1.0",
)

_FORMAT_DESCRIPTION = (
    "Output format: 'text' for timestamped lines, 'json' for segment objects, "
    "'srt' for a SubRip subtitle file, 'readable' for wrapped paragraphs."
)


# ---------------------------------------------------------------------------
# Global error handler
# ---------------------------------------------------------------------------

@app.exception_handler(TranscriptError)
async def transcript_error_handler(request: Request, exc: TranscriptError) -> JSONResponse:
    """
    Translate any TranscriptError (or subclass) into an HTTP error response.

    The http_status on the exception drives the response code, so endpoint
    code never needs to think about HTTP semantics.
    """
    return JSONResponse(
        status_code=exc.http_status,
        content={"error": exc.message},
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _render(
    segments: list[TimedTextSegment],
    fmt: str,
    width: int | None,
) -> PlainTextResponse | JSONResponse:
    """Format segments and wrap them in the matching response type."""
    formatter = get_formatter(fmt, max_line_length=width)
    output = formatter.format_transcript(segments)
    if isinstance(formatter, JSONFormatter):
        return JSONResponse(content=json.loads(output))
    return PlainTextResponse(content=output)


# ---------------------------------------------------------------------------
# Endpoints — transcript fetching
# ---------------------------------------------------------------------------

# response_model=None is required because we return different Response
# subclasses (PlainTextResponse or JSONResponse) depending on the format.
@app.get("/transcript/{video_id}", response_model=None)
def transcript_by_id(
    video_id: str,
    format: str = Query(default="text", description=_FORMAT_DESCRIPTION),
    lang: str = Query(
        default=config.DEFAULT_LANGUAGE,
        description="Preferred caption language; the first available track is used if it's missing.",
    ),
    width: int | None = Query(
        default=None,
        ge=0,
        description="Line length for the readable format.",
    ),
) -> PlainTextResponse | JSONResponse:
    """
    Fetch the transcript for a single YouTube video.

    **video_id** is the YouTube video identifier (e.g. `dQw4w9WgXcQ`).
    """
    # Validate the format before touching the network.
    get_formatter(format)
    segments = get_transcript(video_id, lang)
    return _render(segments, format, width)


@app.get("/transcript", response_model=None)
def transcript_by_url(
    url: str = Query(description="A youtube.com/watch?v=... or youtu.be/... URL."),
    format: str = Query(default="text", description=_FORMAT_DESCRIPTION),
    lang: str = Query(
        default=config.DEFAULT_LANGUAGE,
        description="Preferred caption language; the first available track is used if it's missing.",
    ),
    width: int | None = Query(
        default=None,
        ge=0,
        description="Line length for the readable format.",
    ),
) -> PlainTextResponse | JSONResponse:
    """Fetch the transcript for the video a YouTube URL points at."""
    get_formatter(format)
    segments = get_transcript_by_url(url, lang)
    return _render(segments, format, width)


@app.get("/tracks/{video_id}")
def tracks(video_id: str) -> JSONResponse:
    """
    List the caption tracks a video offers.

    Each entry has the language code, display name and whether the track
    was generated by YouTube's speech recognition.
    """
    track_list = list_tracks(video_id)
    return JSONResponse(content={
        "video_id": video_id,
        "tracks": [
            {
                "language_code": track.language_code,
                "name": track.name,
                "is_generated": track.is_generated,
            }
            for track in track_list
        ],
    })


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------

@app.get("/health")
def health() -> dict:
    """
    Minimal health-check endpoint.

    Returns HTTP 200 with {"status": "ok"}.
    """
    return {"status": "ok"}
