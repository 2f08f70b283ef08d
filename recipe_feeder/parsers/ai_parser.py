"""
AI-based Recipe Parser using Gemini.

This module handles AI-powered extraction of recipe data from documents,
video transcripts and pasted text using Google's Gemini models. Every task
asks the model for JSON, which is then validated before it reaches the
rest of the pipeline.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any

import google.generativeai as genai
from google.api_core.exceptions import GoogleAPIError
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..const import (
    AI_REQUEST_TIMEOUT,
    DEFAULT_MODEL,
    MAX_AI_OUTPUT_TOKENS,
    MAX_VIDEO_TEXT_LENGTH,
)
from ..exceptions import (
    AIResponseError,
    AIServiceError,
    ConfigurationError,
    InvalidSourceError,
    NotARecipeError,
)
from ..extractors.prompts import (
    DOCUMENT_PROMPT,
    FORMAT_PROMPTS,
    PARSE_TEXT_PROMPT,
    RECIPE_JSON_SHAPE,
    VIDEO_PROMPT_HEADER,
    VIDEO_RULES,
    VIDEO_SOURCE_LABELS,
)
from ..normalizer import parse_servings

_LOGGER = logging.getLogger(__name__)

_FENCE = re.compile(r'```(?:json)?\s*([\s\S]*?)```')

NO_RECIPE = "no_recipe"


def strip_code_fence(text: str) -> str:
    """Return the contents of a fenced code block, or the text itself."""
    text = text.strip()
    match = _FENCE.search(text)
    return match.group(1).strip() if match else text


def _optional_str(value: Any) -> str | None:
    if value is None or isinstance(value, (list, dict)):
        return None
    value = str(value).strip()
    return value or None


class AIRecipePayload(BaseModel):
    """The JSON object the model returns for recipe extraction tasks."""

    model_config = ConfigDict(extra="ignore")

    error: str | None = None
    title: str | None = None
    source_name: str | None = None
    total_time: str | None = None
    prep_time: str | None = None
    cook_time: str | None = None
    servings: int | None = None
    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    notes: str | None = None

    @field_validator(
        "error", "title", "source_name", "total_time", "prep_time",
        "cook_time", "notes",
        mode="before",
    )
    @classmethod
    def _text(cls, value: Any) -> str | None:
        return _optional_str(value)

    @field_validator("servings", mode="before")
    @classmethod
    def _servings(cls, value: Any) -> int | None:
        return parse_servings(value)

    @field_validator("ingredients", "instructions", mode="before")
    @classmethod
    def _lines(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise ValueError("expected a list of strings")
        return [item.strip() for item in value if isinstance(item, str) and item.strip()]

    @property
    def is_empty(self) -> bool:
        return not self.ingredients and not self.instructions


class AIRecipeParser:
    """Extracts recipe data with a Gemini model."""

    def __init__(self, api_key: str | None, model: str = DEFAULT_MODEL,
                 client: Any = None) -> None:
        """Initialize the AI recipe parser.

        Args:
            api_key: API key for the language model
            model: The model to use for extraction
            client: Object exposing generate_content; a Gemini model by default

        Raises:
            ConfigurationError: If API key is empty
        """
        if not api_key or not api_key.strip():
            raise ConfigurationError()

        self.model = model
        if client is None:
            genai.configure(api_key=api_key)
            client = genai.GenerativeModel(model)
        self._client = client
        _LOGGER.debug("Initialized AIRecipeParser with model %s", model)

    def generate_json(self, parts: list[Any], prompt: str) -> Any:
        """Send content to the model and decode its JSON answer.

        Args:
            parts: Inline blobs ({"mime_type", "data"}) sent before the prompt
            prompt: The task instructions

        Returns:
            The decoded JSON value

        Raises:
            AIServiceError: If the call fails or the model returns no text
            AIResponseError: If the answer is not JSON
        """
        contents = [*parts, prompt]
        _LOGGER.debug("Calling %s with %d inline parts and %d prompt characters",
                      self.model, len(parts), len(prompt))
        try:
            response = self._client.generate_content(
                contents,
                generation_config={"max_output_tokens": MAX_AI_OUTPUT_TOKENS},
                # No client-side retry: one bounded attempt per call
                request_options={"retry": None, "timeout": AI_REQUEST_TIMEOUT},
            )
            # .text raises ValueError when the answer was blocked or empty
            text = response.text
        except (GoogleAPIError, ValueError) as e:
            _LOGGER.warning("AI request to %s failed: %s", self.model, e)
            raise AIServiceError() from e

        if not text or not text.strip():
            _LOGGER.warning("AI model %s returned an empty response", self.model)
            raise AIServiceError()

        try:
            return json.loads(strip_code_fence(text))
        except json.JSONDecodeError as e:
            _LOGGER.warning("AI response was not valid JSON: %s", e)
            raise AIResponseError() from e

    def extract_recipe_payload(self, parts: list[Any], prompt: str) -> AIRecipePayload:
        """Run a recipe extraction prompt and validate the answer.

        Raises:
            NotARecipeError: If the model reports the content is not a recipe
            AIResponseError: If the answer does not match the recipe shape
        """
        data = self.generate_json(parts, prompt)
        if not isinstance(data, dict):
            _LOGGER.warning("AI response was %s, expected an object", type(data).__name__)
            raise AIResponseError()

        try:
            payload = AIRecipePayload.model_validate(data)
        except ValidationError as e:
            _LOGGER.warning("AI response did not match the recipe shape: %s", e)
            raise AIResponseError() from e

        if payload.error == NO_RECIPE:
            _LOGGER.info("AI model reported the content is not a recipe")
            raise NotARecipeError()

        _LOGGER.info("AI extracted '%s' with %d ingredients and %d steps",
                     payload.title, len(payload.ingredients), len(payload.instructions))
        return payload

    def parse_document(self, blobs: list[dict[str, Any]]) -> AIRecipePayload:
        """Extract a recipe from document pages or photos.

        Args:
            blobs: Inline parts, each {"mime_type": ..., "data": bytes}
        """
        return self.extract_recipe_payload(blobs, DOCUMENT_PROMPT)

    def parse_video_text(self, title: str, text: str, source: str) -> AIRecipePayload:
        """Extract a recipe from a video transcript or description."""
        source_label, text_label = VIDEO_SOURCE_LABELS.get(
            source, VIDEO_SOURCE_LABELS["description"])
        if len(text) > MAX_VIDEO_TEXT_LENGTH:
            _LOGGER.debug("Truncating video text from %d to %d characters",
                          len(text), MAX_VIDEO_TEXT_LENGTH)
            text = text[:MAX_VIDEO_TEXT_LENGTH]

        header = VIDEO_PROMPT_HEADER.format(
            source_label=source_label,
            title=title,
            text_label=text_label,
            text=text,
        )
        return self.extract_recipe_payload([], header + RECIPE_JSON_SHAPE + VIDEO_RULES)

    def parse_text(self, text: str) -> AIRecipePayload:
        """Extract a recipe from free text pasted by the user."""
        return self.extract_recipe_payload([], PARSE_TEXT_PROMPT + text)

    def format_lines(self, text: str, field: str) -> list[str]:
        """Split messy ingredient or instruction text into clean lines.

        Args:
            text: The pasted text
            field: "ingredients" or "instructions"

        Returns:
            One string per ingredient or step; non-strings and blanks dropped
        """
        prompt = FORMAT_PROMPTS.get(field)
        if prompt is None:
            raise InvalidSourceError(
                "Field must be 'ingredients' or 'instructions'.")

        data = self.generate_json([], prompt + text)
        if not isinstance(data, list):
            _LOGGER.warning("Formatting response was %s, expected a list",
                            type(data).__name__)
            raise AIResponseError()

        lines = [item.strip() for item in data if isinstance(item, str) and item.strip()]
        _LOGGER.debug("Formatted %s into %d lines", field, len(lines))
        return lines
