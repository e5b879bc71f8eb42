"""
Configuration management for yttext.

Loads settings from a .env file (if present) and the environment, with
sensible defaults.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


def _optional_float(value: str | None) -> float | None:
    """Parse a timeout value; empty or zero means "no timeout"."""
    if not value:
        return None
    seconds = float(value)
    return seconds if seconds > 0 else None


class Config:
    """Configuration settings for the application."""

    # HTTP client settings
    HTTP_TIMEOUT: float | None = _optional_float(os.getenv("YTTEXT_HTTP_TIMEOUT", "30"))
    ACCEPT_LANGUAGE: str = os.getenv("YTTEXT_ACCEPT_LANGUAGE", "en-US")
    USER_AGENT: str | None = os.getenv("YTTEXT_USER_AGENT") or None

    # Extraction / formatting defaults
    DEFAULT_LANGUAGE: str = os.getenv("YTTEXT_DEFAULT_LANGUAGE", "en")
    LINE_LENGTH: int = int(os.getenv("YTTEXT_LINE_LENGTH", "80"))

    # Upstream endpoints
    WATCH_URL: str = "https://www.youtube.com/watch?v={video_id}"

    @classmethod
    def watch_url(cls, video_id: str) -> str:
        """Get the canonical watch-page URL for a video ID."""
        return cls.WATCH_URL.format(video_id=video_id)


# Global config instance
config = Config()
