"""Shared fixtures and fakes for the recipe feeder tests."""
from __future__ import annotations

import json

import pytest
import requests

from recipe_feeder.config import ExtractorConfig


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, text: str = "", status_code: int = 200,
                 headers: dict | None = None, json_data=None) -> None:
        self.text = text
        self.content = text.encode("utf-8")
        self.status_code = status_code
        self.headers = headers or {}
        self.encoding = "utf-8"
        self._json_data = json_data
        self.closed = False

    def iter_content(self, chunk_size: int = 1):
        for start in range(0, len(self.content), chunk_size):
            yield self.content[start:start + chunk_size]

    def close(self) -> None:
        self.closed = True

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"HTTP {self.status_code}", response=self)

    def json(self):
        if self._json_data is not None:
            return self._json_data
        return json.loads(self.text)


class FakeSession:
    """Routes GET requests by URL prefix to canned responses or errors.

    Unrouted URLs get a 404.
    """

    def __init__(self, routes: dict | None = None) -> None:
        self.routes = routes or {}
        self.calls = []

    def get(self, url, params=None, **kwargs):
        self.calls.append({"url": url, "params": params, **kwargs})
        for prefix, outcome in self.routes.items():
            if url.startswith(prefix):
                if isinstance(outcome, Exception):
                    raise outcome
                return outcome
        return FakeResponse(status_code=404)

    def urls(self) -> list[str]:
        return [call["url"] for call in self.calls]


@pytest.fixture
def config() -> ExtractorConfig:
    return ExtractorConfig(ai_api_key="test-key", scraper_api_key=None)


@pytest.fixture
def make_session():
    return FakeSession


@pytest.fixture
def make_response():
    return FakeResponse


@pytest.fixture
def recipe_page() -> str:
    """A page with a JSON-LD Recipe inside an @graph."""
    data = {
        "@context": "https://schema.org",
        "@graph": [
            {"@type": "WebPage", "name": "Tomato Soup | My Blog"},
            {
                "@type": "Recipe",
                "name": "Tomato Soup",
                "image": ["https://example.com/images/soup.jpg"],
                "totalTime": "PT45M",
                "recipeYield": "4 servings",
                "recipeIngredient": ["4 tomatoes", "1 onion", "2 cups stock"],
                "recipeInstructions": [
                    {"@type": "HowToStep", "text": "Chop the tomatoes and onion."},
                    {"@type": "HowToStep", "text": "Simmer in stock for 30 minutes."},
                ],
                "description": "A simple soup.",
            },
        ],
    }
    return (
        "<html><head><title>Tomato Soup</title>"
        f'<script type="application/ld+json">{json.dumps(data)}</script>'
        "</head><body><h1>Tomato Soup</h1></body></html>"
    )


@pytest.fixture
def challenge_page() -> str:
    return (
        "<html><head><title>Just a moment...</title></head><body>"
        "<p>Checking your browser before accessing the site.</p>"
        '<script src="/cdn-cgi/challenge-platform/h/b/orchestrate/jsch/v1"></script>'
        "</body></html>"
    )
