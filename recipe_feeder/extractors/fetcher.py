"""
Content fetcher for recipe pages.

Recipe sites routinely block automated clients, so a page is acquired by a
chain of strategies tried in order until one yields real HTML: a browser-like
cloudscraper session, the curl binary, an optional rendering proxy, and the
Wayback Machine's archived copy. Bot-challenge interstitials are detected and
treated as a miss rather than as content.
"""
from __future__ import annotations

import json
import logging
import subprocess
from typing import Callable

import cloudscraper
import requests
from bs4 import UnicodeDammit
from cloudscraper.exceptions import CaptchaException, CloudflareException

from ..config import ExtractorConfig
from ..const import (
    ARCHIVE_INDEX_TIMEOUT,
    ARCHIVE_INDEX_URL,
    ARCHIVE_SNAPSHOT_TIMEOUT,
    ARCHIVE_SNAPSHOT_URL,
    BROWSER_HEADERS,
    CURL_FETCH_TIMEOUT,
    CURL_PROCESS_TIMEOUT,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_MAX_RESPONSE_SIZE,
    DIRECT_FETCH_TIMEOUT,
    RENDER_PROXY_TIMEOUT,
    RENDER_PROXY_URL,
    SEARCH_REFERER,
)
from ..exceptions import FetchFailedError, InvalidSourceError
from ..normalizer import is_http_url

_LOGGER = logging.getLogger(__name__)

# Provider fingerprints that only ever appear on interstitials
CHALLENGE_FINGERPRINTS = (
    '_cf_chl_opt',
    'cf-browser-verification',
    'cf_chl_',
    'captcha-delivery.com',
    'px-captcha',
    '_incapsula_resource',
)

# Interstitial wording, only meaningful next to a provider marker
CHALLENGE_PHRASES = (
    'just a moment',
    'checking your browser',
    'verifying you are human',
    'attention required',
    'access to this page has been denied',
    'please enable js and disable any ad blocker',
    'pardon our interruption',
)

PROVIDER_MARKERS = (
    'cloudflare',
    'cf-ray',
    '__cf_bm',
    'cdn-cgi',
    'datadome',
    'perimeterx',
    'incapsula',
    'akamai',
)

_CHUNK_SIZE = 8192

# Raised by cloudscraper when it gives up on a Cloudflare block or challenge
_SCRAPER_ERRORS = (CloudflareException, CaptchaException)


def is_challenge_page(html: str | None) -> bool:
    """Check whether HTML is a bot-challenge interstitial.

    A provider fingerprint is conclusive on its own. A challenge phrase only
    counts when a provider marker is also present, since ordinary pages
    served through these CDNs mention the provider without being blocked.
    """
    if not html:
        return False
    lowered = html.lower()
    if any(fingerprint in lowered for fingerprint in CHALLENGE_FINGERPRINTS):
        return True
    return (any(phrase in lowered for phrase in CHALLENGE_PHRASES)
            and any(marker in lowered for marker in PROVIDER_MARKERS))


def decode_html(content: bytes, declared: str | None = None) -> str:
    """Decode a page body to text.

    A charset named in the Content-Type header is trusted first, then the
    page's own <meta charset>, then UTF-8, then BeautifulSoup's guess.

    Args:
        content: Raw response body
        declared: Charset from the Content-Type header, if it named one
    """
    dammit = UnicodeDammit(
        content,
        known_definite_encodings=[declared] if declared else [],
        user_encodings=['utf-8'],
        is_html=True,
    )
    if dammit.unicode_markup is None:
        return content.decode('utf-8', errors='replace')
    _LOGGER.debug("Decoded page body as %s", dammit.original_encoding)
    return dammit.unicode_markup


def create_session() -> requests.Session:
    """Create the browser-impersonating session used for direct fetches."""
    session = cloudscraper.create_scraper(
        browser={
            'browser': 'chrome',
            'platform': 'windows',
            'desktop': True
        }
    )
    session.headers.update(BROWSER_HEADERS)
    session.max_redirects = DEFAULT_MAX_REDIRECTS
    return session


class ContentFetcher:
    """Acquires page HTML through a fallback chain of strategies."""

    def __init__(self, config: ExtractorConfig,
                 session: requests.Session | None = None,
                 runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
                 max_size: int = DEFAULT_MAX_RESPONSE_SIZE) -> None:
        """Initialize the fetcher.

        Args:
            config: Extractor configuration (proxy key, curl path)
            session: HTTP session; a cloudscraper session when not given
            runner: Callable used to run the curl subprocess
            max_size: Largest response body accepted, in bytes
        """
        self._config = config
        self._session = session or create_session()
        self._runner = runner
        self._max_size = max_size

    def fetch(self, url: str) -> str:
        """Fetch the HTML of a page.

        Args:
            url: An http(s) URL

        Returns:
            Non-empty page HTML that is not a bot challenge

        Raises:
            InvalidSourceError: If the URL is not http(s)
            FetchFailedError: If every strategy failed or was challenged
        """
        if not is_http_url(url):
            raise InvalidSourceError("Only http and https URLs are supported.")

        _LOGGER.info("Fetching recipe page %s", url)
        for name, strategy in self._strategies():
            html = strategy(url)
            if not html or not html.strip():
                _LOGGER.debug("Strategy %s returned nothing for %s", name, url)
                continue
            if is_challenge_page(html):
                _LOGGER.warning("Strategy %s hit a bot challenge on %s", name, url)
                continue
            _LOGGER.info("Fetched %d characters from %s via %s", len(html), url, name)
            return html

        _LOGGER.warning("All fetch strategies failed for %s", url)
        raise FetchFailedError()

    def _strategies(self) -> list[tuple[str, Callable[[str], str | None]]]:
        strategies = [
            ('direct', self._fetch_direct),
            ('curl', self._fetch_subprocess),
        ]
        if self._config.scraper_api_key:
            strategies.append(('render-proxy', self._fetch_rendered))
        strategies.append(('archive', self._fetch_archived))
        return strategies

    def _get(self, url: str, timeout: float, params: dict | None = None) -> str | None:
        """GET a URL and return its body, or None on any failure.

        The body is streamed so oversized responses are abandoned early.
        """
        try:
            response = self._session.get(
                url,
                params=params,
                timeout=timeout,
                allow_redirects=True,
                stream=True,
            )
        except requests.exceptions.RequestException as e:
            _LOGGER.debug("Request to %s failed: %s", url, e)
            return None
        except _SCRAPER_ERRORS as e:
            _LOGGER.warning("Cloudflare refused %s: %s", url, e)
            return None

        try:
            if not 200 <= response.status_code < 300:
                _LOGGER.debug("Got HTTP %d from %s", response.status_code, url)
                return None

            content_length = response.headers.get('content-length')
            if content_length and content_length.isdigit() \
                    and int(content_length) > self._max_size:
                _LOGGER.warning("Response too large for %s: %s bytes", url, content_length)
                return None

            content = b''
            for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                content += chunk
                if len(content) > self._max_size:
                    _LOGGER.warning("Response exceeded size limit while downloading from %s", url)
                    return None
        except requests.exceptions.RequestException as e:
            _LOGGER.debug("Reading %s failed: %s", url, e)
            return None
        finally:
            response.close()

        content_type = response.headers.get('content-type', '').lower()
        declared = response.encoding if 'charset=' in content_type else None
        return decode_html(content, declared)

    def _fetch_direct(self, url: str) -> str | None:
        return self._get(url, DIRECT_FETCH_TIMEOUT)

    def _fetch_subprocess(self, url: str) -> str | None:
        """Fetch through the curl binary, whose TLS fingerprint some sites accept."""
        command = [
            self._config.curl_path,
            '-sL',
            '--compressed',
            '--max-time', str(CURL_FETCH_TIMEOUT),
            '--max-filesize', str(self._max_size),
        ]
        for header, value in BROWSER_HEADERS.items():
            command.extend(['-H', f'{header}: {value}'])
        command.extend(['-H', f'Referer: {SEARCH_REFERER}', url])

        try:
            result = self._runner(command, capture_output=True, timeout=CURL_PROCESS_TIMEOUT)
        except FileNotFoundError:
            _LOGGER.debug("curl binary '%s' not found", self._config.curl_path)
            return None
        except subprocess.TimeoutExpired:
            _LOGGER.debug("curl timed out fetching %s", url)
            return None
        except OSError as e:
            _LOGGER.debug("curl could not run: %s", e)
            return None

        if result.returncode != 0:
            _LOGGER.debug("curl exited with %d for %s", result.returncode, url)
            return None
        if len(result.stdout) > self._max_size:
            _LOGGER.warning("curl output exceeded size limit for %s", url)
            return None
        return decode_html(result.stdout)

    def _fetch_rendered(self, url: str) -> str | None:
        if not self._config.scraper_api_key:
            return None
        params = {
            'api_key': self._config.scraper_api_key,
            'url': url,
            'render': 'true',
        }
        return self._get(RENDER_PROXY_URL, RENDER_PROXY_TIMEOUT, params=params)

    def _fetch_archived(self, url: str) -> str | None:
        """Fetch the most recent successful Wayback Machine capture."""
        params = {
            'url': url,
            'output': 'json',
            'limit': '-1',
            'fl': 'timestamp',
            'filter': 'statuscode:200',
        }
        index = self._get(ARCHIVE_INDEX_URL, ARCHIVE_INDEX_TIMEOUT, params=params)
        if not index or not index.strip():
            return None

        try:
            rows = json.loads(index)
        except json.JSONDecodeError:
            _LOGGER.debug("Archive index for %s was not JSON", url)
            return None

        # First row is the field header
        captures = [row for row in rows[1:] if isinstance(row, list) and row] \
            if isinstance(rows, list) else []
        if not captures:
            _LOGGER.debug("No archived captures for %s", url)
            return None

        timestamp = captures[-1][0]
        snapshot_url = ARCHIVE_SNAPSHOT_URL.format(timestamp=timestamp, url=url)
        _LOGGER.debug("Fetching archived capture %s", snapshot_url)
        return self._get(snapshot_url, ARCHIVE_SNAPSHOT_TIMEOUT)
