"""
YouTube video text resolver.

Cooking videos rarely carry structured recipe data. This module gathers the
text a model can read instead: the spoken transcript when one exists, or
else the video description, along with the video title and thumbnail.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Literal

import requests
from bs4 import BeautifulSoup
from youtube_transcript_api import CouldNotRetrieveTranscript, YouTubeTranscriptApi

from ..const import (
    BROWSER_USER_AGENT,
    DEFAULT_VIDEO_TITLE,
    MIN_VIDEO_TEXT_LENGTH,
    OEMBED_TIMEOUT,
    TRANSCRIPT_TIMEOUT,
    WATCH_PAGE_TIMEOUT,
    YOUTUBE_HOSTS,
    YOUTUBE_OEMBED_URL,
    YOUTUBE_THUMBNAIL_URL,
    YOUTUBE_WATCH_URL,
)
from ..exceptions import InvalidSourceError, TranscriptUnavailableError
from ..normalizer import hostname_of

_LOGGER = logging.getLogger(__name__)

_VIDEO_ID = re.compile(
    r'(?:youtube\.com/watch\?.*?v=|youtu\.be/|youtube\.com/embed/|youtube\.com/shorts/)'
    r'([A-Za-z0-9_-]{11})'
)
_INITIAL_DATA = re.compile(r'var\s+ytInitialData\s*=\s*(\{[\s\S]+?\});')


class TimeoutSession(requests.Session):
    """Session that applies a default timeout to every request."""

    def __init__(self, timeout: float) -> None:
        super().__init__()
        self.timeout = timeout

    def request(self, method, url, **kwargs):
        kwargs.setdefault('timeout', self.timeout)
        return super().request(method, url, **kwargs)


@dataclass(frozen=True)
class VideoInfo:
    """Readable text gathered for one video."""

    title: str
    thumbnail: str
    text: str
    source: Literal['transcript', 'description']


def is_youtube_url(url: str | None) -> bool:
    """Check whether a URL points at YouTube."""
    return hostname_of(url) in YOUTUBE_HOSTS


def extract_video_id(url: str) -> str | None:
    """Extract the 11-character video ID from a YouTube URL.

    Supports watch, youtu.be, embed and shorts URLs.
    """
    match = _VIDEO_ID.search(url or '')
    return match.group(1) if match else None


def youtube_thumbnail(video_id: str) -> str:
    return YOUTUBE_THUMBNAIL_URL.format(video_id=video_id)


def _join_snippets(snippets) -> str:
    return ' '.join(snippet.text.strip() for snippet in snippets if snippet.text).strip()


def _description_from_initial_data(data: Any) -> str | None:
    """Read the full description out of the watch page's ytInitialData."""
    try:
        contents = data['contents']['twoColumnWatchNextResults']['results']['results']['contents']
    except (KeyError, TypeError):
        return None
    if not isinstance(contents, list):
        return None

    for item in contents:
        renderer = item.get('videoSecondaryInfoRenderer') if isinstance(item, dict) else None
        if not isinstance(renderer, dict):
            continue
        attributed = renderer.get('attributedDescription') or {}
        content = attributed.get('content') if isinstance(attributed, dict) else None
        if isinstance(content, str) and len(content) >= MIN_VIDEO_TEXT_LENGTH:
            return content
        runs = (renderer.get('description') or {}).get('runs')
        if isinstance(runs, list):
            joined = ''.join(run.get('text', '') for run in runs if isinstance(run, dict))
            if len(joined) >= MIN_VIDEO_TEXT_LENGTH:
                return joined
    return None


def parse_watch_page_description(html: str) -> str | None:
    """Extract a video description from watch page HTML.

    The ytInitialData description is complete, so it is preferred over the
    truncated meta description.
    """
    soup = BeautifulSoup(html, features="html.parser")

    for script in soup.find_all('script'):
        content = script.string or ''
        if 'ytInitialData' not in content:
            continue
        match = _INITIAL_DATA.search(content)
        if not match:
            continue
        try:
            data = json.loads(match.group(1))
        except json.JSONDecodeError as e:
            _LOGGER.debug("Failed to parse ytInitialData: %s", e)
            continue
        description = _description_from_initial_data(data)
        if description:
            return description

    for attrs in ({'name': 'description'}, {'property': 'og:description'}):
        tag = soup.find('meta', attrs=attrs)
        content = tag.get('content') if tag else None
        if content and len(content) >= MIN_VIDEO_TEXT_LENGTH:
            return content
    return None


class VideoResolver:
    """Resolves a YouTube URL into a title, thumbnail and readable text."""

    def __init__(self, session: requests.Session | None = None,
                 transcript_api: YouTubeTranscriptApi | None = None) -> None:
        self._session = session or requests.Session()
        self._transcript_api = transcript_api or YouTubeTranscriptApi(
            http_client=TimeoutSession(TRANSCRIPT_TIMEOUT))

    def resolve(self, url: str) -> VideoInfo:
        """Gather the readable text of a video.

        Args:
            url: A YouTube watch, short, embed or youtu.be URL

        Returns:
            VideoInfo with the transcript, or the description as a fallback

        Raises:
            InvalidSourceError: If no video ID can be found in the URL
            TranscriptUnavailableError: If neither text source is usable
        """
        video_id = extract_video_id(url)
        if not video_id:
            raise InvalidSourceError("Could not find a video ID in that YouTube link.")

        title = self.fetch_title(video_id)
        thumbnail = youtube_thumbnail(video_id)

        transcript = self.fetch_transcript(video_id)
        if transcript and len(transcript) >= MIN_VIDEO_TEXT_LENGTH:
            _LOGGER.info("Using transcript (%d characters) for video %s",
                         len(transcript), video_id)
            return VideoInfo(title, thumbnail, transcript, 'transcript')

        description = self.fetch_description(video_id)
        if description and len(description) >= MIN_VIDEO_TEXT_LENGTH:
            _LOGGER.info("Using description (%d characters) for video %s",
                         len(description), video_id)
            return VideoInfo(title, thumbnail, description, 'description')

        _LOGGER.warning("No transcript or description for video %s", video_id)
        raise TranscriptUnavailableError()

    def fetch_title(self, video_id: str) -> str:
        """Look up the video title via oEmbed, falling back to a default."""
        params = {'url': YOUTUBE_WATCH_URL.format(video_id=video_id), 'format': 'json'}
        try:
            response = self._session.get(YOUTUBE_OEMBED_URL, params=params,
                                         timeout=OEMBED_TIMEOUT)
            response.raise_for_status()
            title = response.json().get('title')
        except (requests.exceptions.RequestException, ValueError) as e:
            _LOGGER.debug("oEmbed lookup failed for %s: %s", video_id, e)
            return DEFAULT_VIDEO_TITLE
        return title.strip() if isinstance(title, str) and title.strip() else DEFAULT_VIDEO_TITLE

    def fetch_transcript(self, video_id: str) -> str | None:
        """Fetch a transcript: the first one available, else English."""
        try:
            transcripts = self._transcript_api.list(video_id)
            first = next(iter(transcripts), None)
            if first is not None:
                text = _join_snippets(first.fetch())
                if text:
                    return text
        except (CouldNotRetrieveTranscript, requests.exceptions.RequestException) as e:
            _LOGGER.debug("No default transcript for %s: %s", video_id, e)

        try:
            text = _join_snippets(self._transcript_api.fetch(video_id, languages=['en']))
        except (CouldNotRetrieveTranscript, requests.exceptions.RequestException) as e:
            _LOGGER.debug("No English transcript for %s: %s", video_id, e)
            return None
        return text or None

    def fetch_description(self, video_id: str) -> str | None:
        """Fetch the watch page and read the video description from it."""
        headers = {
            'User-Agent': BROWSER_USER_AGENT,
            'Accept-Language': 'en-US,en;q=0.9',
        }
        try:
            response = self._session.get(YOUTUBE_WATCH_URL.format(video_id=video_id),
                                         headers=headers, timeout=WATCH_PAGE_TIMEOUT)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            _LOGGER.debug("Watch page fetch failed for %s: %s", video_id, e)
            return None
        return parse_watch_page_description(response.text)
