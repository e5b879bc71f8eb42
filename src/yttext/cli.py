"""
cli.py — Command-line interface for yttext.

Provides the `yttext` command (registered as a console script in
pyproject.toml).  It takes one YouTube URL, prints the transcript to
stdout in the chosen format, and optionally copies it to the clipboard.

Usage examples:
    yttext "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
    yttext --format srt "https://youtu.be/dQw4w9WgXcQ" > video.srt
    yttext --readable --lang de --copy "https://youtu.be/dQw4w9WgXcQ"
    yttext --list-tracks "https://youtu.be/dQw4w9WgXcQ"

Remember to quote the URL: an unquoted "&" or "?" is interpreted by the
shell.
"""

from __future__ import annotations

import logging
import sys

import click
import pyperclip

from yttext.config import config
from yttext.errors import TranscriptError
from yttext.extractor import extract, list_tracks
from yttext.formatters import FORMAT_NAMES


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Printed after an extraction error.  The last hint is only shown when
# --debug is off.
_TROUBLESHOOTING_HINTS = [
    "Make sure the video exists and is publicly accessible",
    "Verify that the video has captions/transcripts available",
    "Try a different video to confirm the tool is working",
]
_DEBUG_HINT = "Run with --debug flag for more detailed error information"


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------

def _configure_logging(debug: bool, log_request: bool) -> None:
    """
    Send log records to stderr.

    --debug shows everything; --log-request shows the outgoing HTTP
    requests (INFO); otherwise only warnings get through.
    """
    if debug:
        level = logging.DEBUG
    elif log_request:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _print_error(exc: TranscriptError, debug: bool) -> None:
    """Print a clean error message plus troubleshooting hints to stderr."""
    click.echo(f"Error: {exc.message}", err=True)
    click.echo("\nPossible solutions:", err=True)
    hints = list(_TROUBLESHOOTING_HINTS)
    if not debug:
        hints.append(_DEBUG_HINT)
    for number, hint in enumerate(hints, start=1):
        click.echo(f"{number}. {hint}", err=True)


def _copy_to_clipboard(text: str) -> None:
    """Copy output to the clipboard; failing to do so is only a warning."""
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as exc:
        click.echo(f"Warning: Failed to copy to clipboard: {exc}", err=True)
    else:
        click.echo("Copied to clipboard!", err=True)


def _print_tracks(url: str, debug: bool) -> None:
    """Print one line per caption track: language code, name, generated flag."""
    try:
        tracks = list_tracks(url)
    except TranscriptError as exc:
        _print_error(exc, debug)
        sys.exit(1)

    if not tracks:
        click.echo("No caption tracks found.")
        return

    for track in tracks:
        kind = " (auto-generated)" if track.is_generated else ""
        label = f"  {track.name}" if track.name else ""
        click.echo(f"{track.language_code}{label}{kind}")


# ---------------------------------------------------------------------------
# Command
# ---------------------------------------------------------------------------

@click.command()
@click.argument("url", metavar="URL")
@click.option(
    "--lang", "-l",
    default=config.DEFAULT_LANGUAGE,
    show_default=True,
    help="Language code for the transcript (e.g. 'en', 'es', 'fr'). Falls back to the first available track.",
)
@click.option(
    "--format", "-f",
    "fmt",                           # avoid shadowing the builtin "format"
    type=click.Choice(FORMAT_NAMES, case_sensitive=False),
    default="text",
    show_default=True,
    help="Output format.",
)
@click.option(
    "--readable",
    is_flag=True,
    default=False,
    help="Use readable format (same as --format=readable).",
)
@click.option(
    "--width",
    type=click.IntRange(min=0),
    default=config.LINE_LENGTH,
    show_default=True,
    help="Maximum line length for the readable format (0 disables wrapping).",
)
@click.option(
    "--copy",
    is_flag=True,
    default=False,
    help="Copy output to clipboard in addition to stdout.",
)
@click.option(
    "--list-tracks",
    "show_tracks",
    is_flag=True,
    default=False,
    help="List the available caption tracks instead of printing a transcript.",
)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug logging on stderr.",
)
@click.option(
    "--log-request",
    is_flag=True,
    default=False,
    help="Log HTTP request details without full debug output.",
)
def main(
    url: str,
    lang: str,
    fmt: str,
    readable: bool,
    width: int,
    copy: bool,
    show_tracks: bool,
    debug: bool,
    log_request: bool,
) -> None:
    """
    Get the transcript of a YouTube video and print it to stdout.

    URL is a youtube.com/watch?v=... or youtu.be/... link.  Put it in
    quotes to avoid shell interpretation issues.
    """
    _configure_logging(debug, log_request)

    if show_tracks:
        _print_tracks(url, debug)
        return

    if readable:
        fmt = "readable"

    try:
        output = extract(url, language_code=lang, fmt=fmt, max_line_length=width)
    except TranscriptError as exc:
        _print_error(exc, debug)
        sys.exit(1)

    if not output.strip():
        click.echo("Error: No transcript content found", err=True)
        sys.exit(1)

    if copy:
        _copy_to_clipboard(output)

    # text and srt output already end in a newline; json and readable don't.
    click.echo(output, nl=not output.endswith("\n"))
