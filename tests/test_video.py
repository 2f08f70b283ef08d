"""Tests for resolving YouTube videos into readable text."""
import json
from types import SimpleNamespace

import pytest
import requests
from youtube_transcript_api import TranscriptsDisabled

from recipe_feeder.const import YOUTUBE_OEMBED_URL
from recipe_feeder.exceptions import InvalidSourceError, TranscriptUnavailableError
from recipe_feeder.extractors.video import (
    VideoResolver,
    extract_video_id,
    is_youtube_url,
    parse_watch_page_description,
)

VIDEO_ID = "dQw4w9WgXcQ"
VIDEO_URL = f"https://www.youtube.com/watch?v={VIDEO_ID}"
WATCH_PREFIX = "https://www.youtube.com/watch?v="
SPOKEN = "Today we are making ramen. First boil two litres of water with the bones."
DESCRIPTION = "Ingredients: 200g noodles, 1 litre broth, 2 eggs. Boil, assemble, enjoy!"


def snippets(*texts):
    return [SimpleNamespace(text=text) for text in texts]


class FakeTranscriptApi:

    def __init__(self, listed=None, english=None):
        self.listed = listed
        self.english = english
        self.fetch_calls = []

    def list(self, video_id):
        if isinstance(self.listed, Exception):
            raise self.listed
        return [SimpleNamespace(fetch=lambda: self.listed)] if self.listed else []

    def fetch(self, video_id, languages=("en",)):
        self.fetch_calls.append((video_id, list(languages)))
        if isinstance(self.english, Exception):
            raise self.english
        return self.english or []


@pytest.mark.parametrize("url", [
    f"https://www.youtube.com/watch?v={VIDEO_ID}&t=10",
    f"https://www.youtube.com/watch?feature=share&v={VIDEO_ID}",
    f"https://youtu.be/{VIDEO_ID}",
    f"https://www.youtube.com/embed/{VIDEO_ID}",
    f"https://www.youtube.com/shorts/{VIDEO_ID}",
])
def test_extract_video_id(url):
    assert extract_video_id(url) == VIDEO_ID


def test_extract_video_id_without_id():
    assert extract_video_id("https://www.youtube.com/channel/UCabc") is None
    assert extract_video_id("") is None


def test_is_youtube_url():
    assert is_youtube_url(VIDEO_URL)
    assert is_youtube_url(f"https://m.youtube.com/watch?v={VIDEO_ID}")
    assert is_youtube_url(f"https://youtu.be/{VIDEO_ID}")
    assert not is_youtube_url("https://vimeo.com/12345")
    assert not is_youtube_url("https://notyoutube.com/watch")


class TestParseWatchPageDescription:

    def test_prefers_initial_data(self):
        data = {"contents": {"twoColumnWatchNextResults": {"results": {"results": {
            "contents": [
                {"videoPrimaryInfoRenderer": {}},
                {"videoSecondaryInfoRenderer": {
                    "attributedDescription": {"content": DESCRIPTION},
                }},
            ]
        }}}}}
        html = (
            '<html><head><meta name="description" content="Short meta text that is long '
            'enough to count as a description."></head><body>'
            f"<script>var ytInitialData = {json.dumps(data)};</script></body></html>"
        )
        assert parse_watch_page_description(html) == DESCRIPTION

    def test_description_runs(self):
        data = {"contents": {"twoColumnWatchNextResults": {"results": {"results": {
            "contents": [{"videoSecondaryInfoRenderer": {
                "description": {"runs": [{"text": DESCRIPTION[:30]}, {"text": DESCRIPTION[30:]}]},
            }}]
        }}}}}
        html = f"<script>var ytInitialData = {json.dumps(data)};</script>"
        assert parse_watch_page_description(html) == DESCRIPTION

    def test_meta_fallback(self):
        html = f'<html><head><meta property="og:description" content="{DESCRIPTION}"></head></html>'
        assert parse_watch_page_description(html) == DESCRIPTION

    def test_short_text_is_ignored(self):
        html = '<html><head><meta name="description" content="Too short"></head></html>'
        assert parse_watch_page_description(html) is None


class TestVideoResolver:

    def test_transcript_is_preferred(self, make_session, make_response):
        session = make_session({
            YOUTUBE_OEMBED_URL: make_response(json_data={"title": " Easy Ramen "}),
        })
        api = FakeTranscriptApi(listed=snippets("Today we are making ramen.",
                                                "First boil two litres of water with the bones."))
        info = VideoResolver(session=session, transcript_api=api).resolve(VIDEO_URL)

        assert info.source == "transcript"
        assert info.text == SPOKEN
        assert info.title == "Easy Ramen"
        assert info.thumbnail == f"https://img.youtube.com/vi/{VIDEO_ID}/hqdefault.jpg"
        assert api.fetch_calls == []
        assert session.calls[0]["params"] == {"url": VIDEO_URL, "format": "json"}

    def test_english_fetch_after_listing_fails(self, make_session):
        api = FakeTranscriptApi(listed=TranscriptsDisabled(VIDEO_ID), english=snippets(SPOKEN))
        info = VideoResolver(session=make_session(), transcript_api=api).resolve(VIDEO_URL)

        assert info.source == "transcript"
        assert info.text == SPOKEN
        assert api.fetch_calls == [(VIDEO_ID, ["en"])]

    def test_description_fallback(self, make_session, make_response):
        session = make_session({
            WATCH_PREFIX: make_response(
                f'<html><head><meta name="description" content="{DESCRIPTION}"></head></html>'),
        })
        api = FakeTranscriptApi(listed=TranscriptsDisabled(VIDEO_ID),
                                english=TranscriptsDisabled(VIDEO_ID))
        info = VideoResolver(session=session, transcript_api=api).resolve(VIDEO_URL)

        assert info.source == "description"
        assert info.text == DESCRIPTION

    def test_short_transcript_falls_back_to_description(self, make_session, make_response):
        session = make_session({
            WATCH_PREFIX: make_response(
                f'<html><head><meta name="description" content="{DESCRIPTION}"></head></html>'),
        })
        api = FakeTranscriptApi(listed=snippets("[Music]"))
        info = VideoResolver(session=session, transcript_api=api).resolve(VIDEO_URL)
        assert info.source == "description"

    def test_no_text_at_all(self, make_session):
        api = FakeTranscriptApi(listed=TranscriptsDisabled(VIDEO_ID),
                                english=TranscriptsDisabled(VIDEO_ID))
        resolver = VideoResolver(session=make_session(), transcript_api=api)

        with pytest.raises(TranscriptUnavailableError) as excinfo:
            resolver.resolve(VIDEO_URL)
        assert "No transcript or description" in excinfo.value.message

    def test_title_lookup_failure_uses_default(self, make_session):
        session = make_session({
            YOUTUBE_OEMBED_URL: requests.exceptions.ConnectionError("offline"),
        })
        api = FakeTranscriptApi(listed=snippets(SPOKEN))
        info = VideoResolver(session=session, transcript_api=api).resolve(VIDEO_URL)
        assert info.title == "YouTube Recipe"

    def test_url_without_video_id(self, make_session):
        resolver = VideoResolver(session=make_session(), transcript_api=FakeTranscriptApi())
        with pytest.raises(InvalidSourceError):
            resolver.resolve("https://www.youtube.com/@somechannel")
