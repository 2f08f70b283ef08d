"""
Recipe Extraction Service.

This module orchestrates the extraction of recipe data from every supported
source: web pages, social posts, YouTube videos, uploaded documents and
pasted text. It picks the extraction path for a source, runs it, and maps
the result onto the canonical ExtractedRecipe record.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Sequence

from bs4 import BeautifulSoup

from ..config import ExtractorConfig
from ..const import (
    DOCUMENT_TYPES,
    MAX_DOCUMENT_SIZE,
    SOCIAL_CAPTION_HOSTS,
    SOURCE_PASTED_TEXT,
    SOURCE_UPLOADED_DOCUMENT,
)
from ..exceptions import EmptyRecipeError, InvalidSourceError, RecipeNotFoundError
from ..extractors.fetcher import ContentFetcher
from ..extractors.video import VideoResolver, is_youtube_url
from ..models.recipe import ExtractedRecipe
from ..normalizer import hostname_of, is_http_url, normalize_duration_text
from ..parsers.ai_parser import AIRecipeParser, AIRecipePayload
from ..parsers.caption_parser import CaptionRecipeParser
from ..parsers.html_parser import HTMLRecipeParser
from ..parsers.jsonld_parser import JSONLDRecipeParser
from .storage import DocumentStore, LocalDocumentStore

_LOGGER = logging.getLogger(__name__)

FORMAT_FIELDS = ("ingredients", "instructions")


def is_social_caption_url(url: str) -> bool:
    """Check whether a URL is a social post whose caption holds the recipe."""
    hostname = hostname_of(url)
    if not hostname:
        return False
    return any(hostname == host or hostname.endswith(f".{host}")
               for host in SOCIAL_CAPTION_HOSTS)


def is_bare_url(text: str) -> bool:
    """Check whether pasted text is nothing but a single URL."""
    text = text.strip()
    return is_http_url(text) and not any(char.isspace() for char in text)


def payload_to_recipe(payload: AIRecipePayload, *, source_url: str,
                      source_name: str | None, title: str | None = None,
                      image_url: str | None = None,
                      source_images: list[str] | None = None) -> ExtractedRecipe:
    """Map a model answer onto the canonical record.

    Raises:
        EmptyRecipeError: If the answer has neither ingredients nor steps
    """
    if payload.is_empty:
        _LOGGER.warning("AI answer for %s had no ingredients or instructions", source_url)
        raise EmptyRecipeError()

    return ExtractedRecipe(
        title=payload.title or title,
        image_url=image_url,
        source_url=source_url,
        source_name=source_name,
        total_time=normalize_duration_text(payload.total_time),
        prep_time=normalize_duration_text(payload.prep_time),
        cook_time=normalize_duration_text(payload.cook_time),
        servings=payload.servings,
        ingredients=payload.ingredients,
        instructions=payload.instructions,
        notes=payload.notes,
        source_images=source_images or [],
    )


class RecipeService:
    """Extracts recipes from any supported source.

    Collaborators are created on first use, so a service that only handles
    web pages never needs an AI key.
    """

    def __init__(self, config: ExtractorConfig | None = None,
                 fetcher: ContentFetcher | None = None,
                 video_resolver: VideoResolver | None = None,
                 ai_parser: AIRecipeParser | None = None,
                 store: DocumentStore | None = None) -> None:
        self.config = config or ExtractorConfig.from_env()
        self._fetcher = fetcher
        self._video_resolver = video_resolver
        self._ai_parser = ai_parser
        self.store = store
        self._jsonld_parser = JSONLDRecipeParser()
        self._html_parser = HTMLRecipeParser()
        self._caption_parser = CaptionRecipeParser()

    @property
    def fetcher(self) -> ContentFetcher:
        if self._fetcher is None:
            self._fetcher = ContentFetcher(self.config)
        return self._fetcher

    @property
    def video_resolver(self) -> VideoResolver:
        if self._video_resolver is None:
            self._video_resolver = VideoResolver()
        return self._video_resolver

    @property
    def ai_parser(self) -> AIRecipeParser:
        """The AI adapter; raises ConfigurationError without an API key."""
        if self._ai_parser is None:
            self._ai_parser = AIRecipeParser(
                api_key=self.config.require_ai_key(),
                model=self.config.ai_model,
            )
        return self._ai_parser

    def extract(self, source: Any) -> ExtractedRecipe:
        """Extract a recipe from a source of any supported kind.

        Args:
            source: A URL, pasted text, a local document Path, or a sequence
                of storage paths for the configured document store

        Returns:
            The extracted recipe
        """
        if isinstance(source, Path):
            store = LocalDocumentStore(source.parent)
            return self.extract_from_documents([source.name], store)

        if isinstance(source, (list, tuple)):
            return self.extract_from_documents(list(source))

        if not isinstance(source, str):
            raise InvalidSourceError(f"Unsupported source type: {type(source).__name__}")

        if is_bare_url(source):
            return self.extract_recipe(source.strip())
        return self.parse_recipe_text(source)

    def extract_recipe(self, url: str) -> ExtractedRecipe:
        """Extract a recipe from a web page, social post or video URL.

        This function orchestrates the extraction process:
        1. YouTube links go to the video path
        2. Social posts are fetched and their caption is parsed
        3. Other pages are fetched and parsed from JSON-LD, falling back to
           the heuristic HTML parser

        Args:
            url: An http(s) URL

        Returns:
            The extracted recipe

        Raises:
            InvalidSourceError: If the URL is not http(s)
            FetchFailedError: If the page could not be acquired
            RecipeNotFoundError: If the page holds no recipe content
        """
        url = (url or '').strip()
        if not is_http_url(url):
            raise InvalidSourceError("Please enter a valid http or https URL.")

        if is_youtube_url(url):
            _LOGGER.debug("Dispatching %s to the video path", url)
            return self.extract_recipe_from_video(url)

        html = self.fetcher.fetch(url)
        soup = BeautifulSoup(html, features="html.parser")

        if is_social_caption_url(url):
            _LOGGER.debug("Parsing %s as a social caption", url)
            recipe = self._caption_parser.parse_recipe(soup, url)
            return self._require_content(recipe, url)

        recipe = self._jsonld_parser.parse_recipe(soup, url)
        if recipe and not recipe.is_empty:
            _LOGGER.info("Using JSON-LD recipe data for %s", url)
            return recipe

        _LOGGER.info("No usable JSON-LD on %s, using heuristic extraction", url)
        recipe = self._html_parser.parse_recipe(soup, url)
        return self._require_content(recipe, url)

    @staticmethod
    def _require_content(recipe: ExtractedRecipe | None, url: str) -> ExtractedRecipe:
        if recipe is None or recipe.is_empty:
            _LOGGER.warning("No recipe content found on %s", url)
            raise RecipeNotFoundError()
        _LOGGER.info("Successfully extracted recipe '%s' with %d ingredients from %s",
                     recipe.title, len(recipe.ingredients), url)
        return recipe

    def extract_recipe_from_video(self, url: str) -> ExtractedRecipe:
        """Extract a recipe from a YouTube video's transcript or description.

        Raises:
            InvalidSourceError: If the URL is not a YouTube link
            ConfigurationError: If no AI key is configured
            TranscriptUnavailableError: If the video has no usable text
        """
        url = (url or '').strip()
        if not is_youtube_url(url):
            raise InvalidSourceError("Please enter a YouTube video URL.")

        ai_parser = self.ai_parser
        info = self.video_resolver.resolve(url)
        _LOGGER.info("Extracting recipe from %s of '%s'", info.source, info.title)
        payload = ai_parser.parse_video_text(info.title, info.text, info.source)
        return payload_to_recipe(
            payload,
            source_url=url,
            source_name="youtube.com",
            title=info.title,
            image_url=info.thumbnail,
        )

    def extract_from_documents(self, paths: Sequence[str],
                               store: DocumentStore | None = None) -> ExtractedRecipe:
        """Extract a recipe from uploaded PDF pages or photos.

        Args:
            paths: Storage paths of the uploaded files, in page order
            store: Document store to read from; the service's store by default

        Raises:
            InvalidSourceError: If no files are given, or a file has an
                unsupported type or is too large
            ConfigurationError: If no AI key is configured
        """
        store = store or self.store
        if store is None:
            raise InvalidSourceError("No document storage is configured.")
        if not paths:
            raise InvalidSourceError("No file uploaded.")

        ai_parser = self.ai_parser

        blobs = []
        source_images = []
        names = []
        for path in paths:
            document = store.read(path)
            kind = DOCUMENT_TYPES.get(document.content_type)
            if kind is None:
                raise InvalidSourceError(
                    "Unsupported file type. Please upload a PDF or image "
                    "(JPEG, PNG, WebP, GIF).")
            if len(document.data) > MAX_DOCUMENT_SIZE:
                raise InvalidSourceError("File too large. Maximum size is 20MB.")

            blobs.append({"mime_type": document.content_type, "data": document.data})
            names.append(document.name)
            if kind == "image":
                source_images.append(store.public_url(path))

        _LOGGER.info("Extracting recipe from %d uploaded document(s)", len(blobs))
        payload = ai_parser.parse_document(blobs)
        return payload_to_recipe(
            payload,
            source_url=SOURCE_UPLOADED_DOCUMENT,
            source_name=names[0],
            source_images=source_images,
        )

    def parse_recipe_text(self, text: str) -> ExtractedRecipe:
        """Extract a recipe from pasted free text.

        A pasted bare URL is extracted as a web page instead.
        """
        text = (text or '').strip()
        if not text:
            raise InvalidSourceError("Please paste some recipe text.")

        if is_bare_url(text):
            _LOGGER.debug("Pasted text is a URL, extracting the page instead")
            return self.extract_recipe(text)

        payload = self.ai_parser.parse_text(text)
        return payload_to_recipe(
            payload,
            source_url=SOURCE_PASTED_TEXT,
            source_name=payload.source_name,
        )

    def format_recipe_text(self, text: str, field: str) -> list[str]:
        """Split messy ingredient or instruction text into clean lines."""
        text = (text or '').strip()
        if not text:
            raise InvalidSourceError("Please paste some text to format.")
        if field not in FORMAT_FIELDS:
            raise InvalidSourceError("Field must be 'ingredients' or 'instructions'.")
        return self.ai_parser.format_lines(text, field)


def extract_recipe(url: str, config: ExtractorConfig | None = None) -> ExtractedRecipe:
    """Extract a recipe from a URL with a default service."""
    return RecipeService(config).extract_recipe(url)


def extract_recipe_from_video(url: str, config: ExtractorConfig | None = None) -> ExtractedRecipe:
    """Extract a recipe from a YouTube URL with a default service."""
    return RecipeService(config).extract_recipe_from_video(url)


def extract_from_documents(paths: Sequence[str], store: DocumentStore,
                           config: ExtractorConfig | None = None) -> ExtractedRecipe:
    """Extract a recipe from stored documents with a default service."""
    return RecipeService(config, store=store).extract_from_documents(paths)


def parse_recipe_text(text: str, config: ExtractorConfig | None = None) -> ExtractedRecipe:
    """Extract a recipe from pasted text with a default service."""
    return RecipeService(config).parse_recipe_text(text)


def format_recipe_text(text: str, field: str,
                       config: ExtractorConfig | None = None) -> list[str]:
    """Format pasted ingredient or instruction text with a default service."""
    return RecipeService(config).format_recipe_text(text, field)


def extract(source: Any, config: ExtractorConfig | None = None,
            store: DocumentStore | None = None) -> ExtractedRecipe:
    """Extract a recipe from any supported source with a default service."""
    return RecipeService(config, store=store).extract(source)
