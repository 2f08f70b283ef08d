"""Runtime configuration for the extraction pipeline."""
from __future__ import annotations

import logging
import os

from pydantic import BaseModel, Field, field_validator

from .const import (
    DEFAULT_CURL_PATH,
    DEFAULT_MODEL,
    ENV_AI_API_KEY,
    ENV_AI_MODEL,
    ENV_CURL_PATH,
    ENV_SCRAPER_API_KEY,
)
from .exceptions import ConfigurationError

_LOGGER = logging.getLogger(__name__)


class ExtractorConfig(BaseModel):
    """Credentials and tool locations used by the pipeline.

    Attributes:
        ai_api_key: API key for the hosted language model
        ai_model: Model used for document, video and text extraction
        scraper_api_key: Optional key for the JS rendering proxy
        curl_path: Command-line HTTP client used as a second fetch strategy
    """

    ai_api_key: str | None = Field(default=None, repr=False)
    ai_model: str = DEFAULT_MODEL
    scraper_api_key: str | None = Field(default=None, repr=False)
    curl_path: str = DEFAULT_CURL_PATH

    @field_validator("ai_api_key", "scraper_api_key", mode="before")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @field_validator("ai_model", "curl_path", mode="before")
    @classmethod
    def _strip(cls, value: str) -> str:
        return str(value).strip()

    @classmethod
    def from_env(cls, **overrides) -> ExtractorConfig:
        """Build a configuration from environment variables.

        Keyword overrides that are not None take precedence over the
        environment.
        """
        values = {
            "ai_api_key": os.getenv(ENV_AI_API_KEY),
            "ai_model": os.getenv(ENV_AI_MODEL) or DEFAULT_MODEL,
            "scraper_api_key": os.getenv(ENV_SCRAPER_API_KEY),
            "curl_path": os.getenv(ENV_CURL_PATH) or DEFAULT_CURL_PATH,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        config = cls(**values)
        _LOGGER.debug(
            "Loaded configuration (model=%s, ai_key=%s, render_proxy=%s)",
            config.ai_model,
            "set" if config.ai_api_key else "missing",
            "set" if config.scraper_api_key else "missing",
        )
        return config

    def require_ai_key(self) -> str:
        """Return the AI key or fail fast when it is missing."""
        if not self.ai_api_key:
            _LOGGER.error("No AI API key configured (%s)", ENV_AI_API_KEY)
            raise ConfigurationError()
        return self.ai_api_key
