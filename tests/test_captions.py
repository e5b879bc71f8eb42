"""
test_captions.py — Unit tests for the watch-page scraper and caption parser.

Covers:
    - extract_captions_json() for every page shape (normal, CAPTCHA,
      unavailable, captions disabled, malformed JSON, no tracks)
    - parse_caption_tracks() and select_track()
    - parse_caption_xml() cue matching, entity un-escaping and error cases
    - TranscriptFetcher HTTP handling with a mocked requests.Session
"""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
import requests

from yttext.captions import (
    TranscriptFetcher,
    extract_captions_json,
    parse_caption_tracks,
    parse_caption_xml,
    select_track,
    unescape_entities,
)
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


# ---------------------------------------------------------------------------
# Helpers — fake watch pages and HTTP responses
# ---------------------------------------------------------------------------

_TRACKS = [
    {
        "baseUrl": "https://www.youtube.com/api/timedtext?v=abc&lang=en",
        "name": {"simpleText": "English"},
        "languageCode": "en",
        "kind": "",
    },
    {
        "baseUrl": "https://www.youtube.com/api/timedtext?v=abc&lang=de",
        "name": {"runs": [{"text": "German"}]},
        "languageCode": "de",
    },
]


def _watch_page(captions: object, indent: int | None = None) -> str:
    """Build a minimal watch page embedding `captions` the way YouTube does."""
    return (
        "<html><body><script>var ytInitialPlayerResponse = "
        '{"responseContext":{},"playabilityStatus":{"status":"OK"},'
        f'"captions":{json.dumps(captions, indent=indent)},'
        '"videoDetails":{"videoId":"abc"}};</script></body></html>'
    )


def _response(text: str, status_code: int = 200) -> MagicMock:
    """Mimic the parts of requests.Response the fetcher reads."""
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    return response


def _fetcher(*responses: MagicMock) -> tuple[TranscriptFetcher, MagicMock]:
    """A TranscriptFetcher whose session returns `responses` in order."""
    session = MagicMock()
    session.headers = {}
    session.get.side_effect = list(responses)
    return TranscriptFetcher(session=session, timeout=5), session


# ---------------------------------------------------------------------------
# extract_captions_json — locating the embedded captions block
# ---------------------------------------------------------------------------

class TestExtractCaptionsJson:
    """Tests for cutting the captions configuration out of the watch page."""

    def test_returns_renderer(self) -> None:
        """A normal page yields the playerCaptionsTracklistRenderer object."""
        html = _watch_page({"playerCaptionsTracklistRenderer": {"captionTracks": _TRACKS}})
        result = extract_captions_json(html, "abc")
        assert result["captionTracks"] == _TRACKS

    def test_newlines_in_fragment_are_removed(self) -> None:
        """A fragment spread over several lines still parses."""
        html = _watch_page(
            {"playerCaptionsTracklistRenderer": {"captionTracks": _TRACKS}},
            indent=2,
        )
        assert "\n" in html
        result = extract_captions_json(html, "abc")
        assert len(result["captionTracks"]) == 2

    def test_captcha_page_raises_rate_limited(self) -> None:
        """A CAPTCHA page has no captions block but a recaptcha form."""
        html = '<html><form><div class="g-recaptcha" data-sitekey="x"></div></form></html>'
        with pytest.raises(RateLimitedError) as exc_info:
            extract_captions_json(html, "abc")
        assert exc_info.value.http_status == 429

    def test_captcha_takes_priority_over_unavailable(self) -> None:
        """The CAPTCHA check runs before the playability check."""
        html = '<div class="g-recaptcha"></div>"playabilityStatus":{}'
        with pytest.raises(RateLimitedError):
            extract_captions_json(html, "abc")

    def test_missing_playability_raises_video_unavailable(self) -> None:
        """No playabilityStatus means the video page didn't load normally."""
        with pytest.raises(VideoUnavailableError):
            extract_captions_json("<html><body>Not here</body></html>", "abc")

    def test_missing_captions_raises_captions_disabled(self) -> None:
        """A playable page without a captions block has captions turned off."""
        html = '{"playabilityStatus":{"status":"OK"},"videoDetails":{"videoId":"abc"}}'
        with pytest.raises(CaptionsDisabledError):
            extract_captions_json(html, "abc")

    def test_missing_end_marker_raises_extraction_error(self) -> None:
        """Without the following videoDetails key the block can't be delimited."""
        html = '"playabilityStatus":{},"captions":{"playerCaptionsTracklistRenderer":{}}}'
        with pytest.raises(ExtractionError):
            extract_captions_json(html, "abc")

    def test_malformed_json_raises_extraction_error(self) -> None:
        """A truncated or corrupted fragment is reported as ExtractionError."""
        html = '"playabilityStatus":{},"captions":{"playerCaptionsTracklistRenderer":{,"videoDetails":{}'
        with pytest.raises(ExtractionError) as exc_info:
            extract_captions_json(html, "abc")
        assert isinstance(exc_info.value.__cause__, json.JSONDecodeError)

    def test_missing_renderer_raises_captions_disabled(self) -> None:
        """A captions object without the tracklist renderer means no captions."""
        html = _watch_page({"playerCaptionsRenderer": {"baseUrl": "x"}})
        with pytest.raises(CaptionsDisabledError):
            extract_captions_json(html, "abc")

    def test_missing_tracks_raises_no_transcript_available(self) -> None:
        """A renderer without captionTracks offers nothing to download."""
        html = _watch_page({"playerCaptionsTracklistRenderer": {"audioTracks": []}})
        with pytest.raises(NoTranscriptAvailableError):
            extract_captions_json(html, "abc")


# ---------------------------------------------------------------------------
# parse_caption_tracks / select_track
# ---------------------------------------------------------------------------

class TestParseCaptionTracks:
    """Tests for building CaptionTrack descriptors from the renderer JSON."""

    def test_keeps_page_order(self) -> None:
        """Tracks come back in the order the page lists them."""
        tracks = parse_caption_tracks({"captionTracks": _TRACKS})
        assert [t.language_code for t in tracks] == ["en", "de"]
        assert tracks[1].base_url.endswith("lang=de")

    def test_raw_fields_pass_through(self) -> None:
        """Unmodelled fields stay reachable via .raw."""
        tracks = parse_caption_tracks({"captionTracks": _TRACKS})
        assert tracks[0].raw is _TRACKS[0]
        assert tracks[0].name == "English"
        assert tracks[1].name == "German"

    def test_skips_non_objects_and_defaults_missing_fields(self) -> None:
        """Non-dict entries are ignored; missing fields become empty strings."""
        tracks = parse_caption_tracks({"captionTracks": ["junk", {"languageCode": "fr"}]})
        assert tracks == [CaptionTrack(language_code="fr", base_url="")]

    def test_empty_list(self) -> None:
        """An empty captionTracks list gives no tracks."""
        assert parse_caption_tracks({"captionTracks": []}) == []

    @pytest.mark.parametrize("value", [5, True, 1.5, None, "en", {"languageCode": "en"}])
    def test_non_list_value_gives_no_tracks(self, value: object) -> None:
        """A captionTracks value that isn't a list yields no tracks."""
        tracks = parse_caption_tracks({"captionTracks": value})
        assert tracks == []
        with pytest.raises(NoSuitableTrackError):
            select_track(tracks, "en")


class TestSelectTrack:
    """Tests for the best-effort language selection."""

    def _tracks(self) -> list[CaptionTrack]:
        return parse_caption_tracks({"captionTracks": _TRACKS})

    def test_exact_match_wins(self) -> None:
        """The requested language is chosen even when it isn't first."""
        assert select_track(self._tracks(), "de").language_code == "de"

    def test_falls_back_to_first_track(self) -> None:
        """A language the video doesn't offer falls back to the first track."""
        assert select_track(self._tracks(), "ja").language_code == "en"

    def test_empty_code_means_english(self) -> None:
        """An empty language code is treated as "en"."""
        tracks = list(reversed(self._tracks()))
        assert select_track(tracks, "").language_code == "en"

    def test_empty_list_raises(self) -> None:
        """No tracks at all is NoSuitableTrackError."""
        with pytest.raises(NoSuitableTrackError):
            select_track([], "en")

    def test_missing_base_url_raises(self) -> None:
        """A selected track without a baseUrl can't be downloaded."""
        with pytest.raises(NoSuitableTrackError):
            select_track([CaptionTrack(language_code="en", base_url="")], "en")


# ---------------------------------------------------------------------------
# parse_caption_xml — cue parsing
# ---------------------------------------------------------------------------

_CAPTION_XML = (
    '<?xml version="1.0" encoding="utf-8" ?><transcript>'
    '<text start="0.5" dur="2.1">Hello world</text>'
    '<text start="2.6" dur="3">Second line</text>'
    '<text start="5.6" dur="1.25">[Music]</text>'
    "</transcript>"
)


class TestParseCaptionXml:
    """Tests for the <text> cue matcher."""

    def test_parses_segments_in_order(self) -> None:
        """Each cue becomes one segment, in document order."""
        segments = parse_caption_xml(_CAPTION_XML)
        assert [s.text for s in segments] == ["Hello world", "Second line", "[Music]"]
        assert segments[0] == TimedTextSegment(
            text="Hello world", duration=2.1, offset=0.5, start=0.5,
        )

    def test_offset_equals_start(self) -> None:
        """offset and start carry the same value for every segment."""
        for segment in parse_caption_xml(_CAPTION_XML):
            assert segment.offset == segment.start

    def test_unescapes_entities(self) -> None:
        """The five XML entities are decoded to their literal characters."""
        body = '<text start="0" dur="1">Tom &amp; Jerry &lt;3 &gt; &quot;cats&quot; it&#39;s</text>'
        segments = parse_caption_xml(body)
        assert segments[0].text == "Tom & Jerry <3 > \"cats\" it's"

    def test_other_entities_left_alone(self) -> None:
        """Entities outside the fixed set are not decoded."""
        body = '<text start="0" dur="1">caf&eacute; &#233; &nbsp;</text>'
        assert parse_caption_xml(body)[0].text == "caf&eacute; &#233; &nbsp;"

    def test_nested_markup_is_literal_text(self) -> None:
        """Markup inside a cue is kept verbatim, not interpreted."""
        body = '<text start="1" dur="2"><font color="#E5E5E5">hi</font></text>'
        assert parse_caption_xml(body)[0].text == '<font color="#E5E5E5">hi</font>'

    def test_extra_attributes_and_multiline_payload(self) -> None:
        """Additional attributes are ignored and payloads may span lines."""
        body = '<text start="1" dur="2" foo="bar">first\nsecond</text>'
        assert parse_caption_xml(body)[0].text == "first\nsecond"

    def test_empty_payload(self) -> None:
        """Empty cues are kept as empty-text segments."""
        body = '<text start="1" dur="2"></text>'
        assert parse_caption_xml(body)[0].text == ""

    def test_bad_cue_is_dropped(self) -> None:
        """A cue with non-numeric timing is skipped; the rest survive."""
        body = (
            '<text start="abc" dur="1">skip me</text>'
            '<text start="3" dur="1">keep me</text>'
        )
        segments = parse_caption_xml(body)
        assert [s.text for s in segments] == ["keep me"]

    @pytest.mark.parametrize("value", ["1_0", " 1.5 ", "1e3", "-1", "nan", "inf", "0x10"])
    def test_non_decimal_timing_is_dropped(self, value: str) -> None:
        """Only plain digits-and-dots timing is accepted, even where float() would parse it."""
        body = (
            f'<text start="{value}" dur="2">skip me</text>'
            f'<text start="4" dur="{value}">skip me too</text>'
            '<text start="6" dur="1">keep me</text>'
        )
        segments = parse_caption_xml(body)
        assert [s.text for s in segments] == ["keep me"]

    def test_no_cues_raises_no_transcript_text(self) -> None:
        """A body with no <text> elements is NoTranscriptTextError."""
        with pytest.raises(NoTranscriptTextError):
            parse_caption_xml("<transcript></transcript>")

    def test_empty_body_raises_no_transcript_text(self) -> None:
        """An empty body is NoTranscriptTextError too."""
        with pytest.raises(NoTranscriptTextError):
            parse_caption_xml("")

    def test_all_cues_bad_raises_parse_failure(self) -> None:
        """Cues found but none usable is ParseFailureError."""
        body = (
            '<text start="x" dur="1">a</text>'
            '<text start="1.2.3" dur="1">b</text>'
            '<text start="1" dur="">c</text>'
        )
        with pytest.raises(ParseFailureError) as exc_info:
            parse_caption_xml(body)
        assert exc_info.value.cue_count == 3


class TestUnescapeEntities:
    """Tests for the fixed-order entity replacement."""

    def test_amp_is_decoded_first(self) -> None:
        """&amp;lt; decodes twice because &amp; is replaced before &lt;."""
        assert unescape_entities("&amp;lt;") == "<"

    def test_plain_text_unchanged(self) -> None:
        """Text without entities passes through untouched."""
        assert unescape_entities("no entities here") == "no entities here"


# ---------------------------------------------------------------------------
# TranscriptFetcher — HTTP handling
# ---------------------------------------------------------------------------

class TestTranscriptFetcher:
    """Tests for the two HTTP requests, using a mocked session."""

    def test_fetch_video_html_request(self) -> None:
        """The watch page is requested with a pinned Accept-Language header."""
        fetcher, session = _fetcher(_response("<html></html>"))
        assert fetcher.fetch_video_html("abc") == "<html></html>"
        session.get.assert_called_once_with(
            "https://www.youtube.com/watch?v=abc",
            headers={"Accept-Language": config.ACCEPT_LANGUAGE},
            timeout=5,
        )

    def test_non_200_raises_fetch_error(self) -> None:
        """Any status other than 200 is a FetchError carrying the status."""
        fetcher, _ = _fetcher(_response("gone", status_code=404))
        with pytest.raises(FetchError) as exc_info:
            fetcher.fetch_video_html("abc")
        assert exc_info.value.status_code == 404
        assert exc_info.value.http_status == 502

    def test_transport_error_raises_fetch_error(self) -> None:
        """requests exceptions are wrapped, with the original as __cause__."""
        session = MagicMock()
        session.headers = {}
        session.get.side_effect = requests.ConnectionError("connection refused")
        fetcher = TranscriptFetcher(session=session, timeout=5)

        with pytest.raises(FetchError) as exc_info:
            fetcher.fetch_caption_body("https://www.youtube.com/api/timedtext?v=abc")
        assert isinstance(exc_info.value.__cause__, requests.ConnectionError)

    def test_fetch_caption_body(self) -> None:
        """The caption body is fetched from the track's base URL as-is."""
        fetcher, session = _fetcher(_response(_CAPTION_XML))
        url = _TRACKS[0]["baseUrl"]
        assert fetcher.fetch_caption_body(url) == _CAPTION_XML
        assert session.get.call_args[0][0] == url

    def test_body_decoded_as_utf8_without_charset(self) -> None:
        """A text/* body without a charset is still read as UTF-8."""
        response = requests.Response()
        response.status_code = 200
        response.headers["Content-Type"] = "text/xml"
        response._content = '<text start="0" dur="1">Grüße ♪</text>'.encode("utf-8")
        # What requests itself picks for text/* with no charset.
        response.encoding = "ISO-8859-1"
        fetcher, _ = _fetcher(response)

        body = fetcher.fetch_caption_body("https://www.youtube.com/api/timedtext?v=abc")

        assert parse_caption_xml(body)[0].text == "Grüße ♪"

    def test_list_caption_tracks(self) -> None:
        """Fetching the page and parsing it yields the track list."""
        html = _watch_page({"playerCaptionsTracklistRenderer": {"captionTracks": _TRACKS}})
        fetcher, _ = _fetcher(_response(html))
        tracks = fetcher.list_caption_tracks("abc")
        assert [t.language_code for t in tracks] == ["en", "de"]
