"""
Social Caption Recipe Parser.

Instagram-style posts carry the whole recipe in one unstructured caption.
This module segments such a caption into title, ingredients and numbered
instructions using the layout conventions these posts follow.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from bs4 import BeautifulSoup

from ..const import MAX_CAPTION_TITLE_LENGTH
from ..models.recipe import ExtractedRecipe
from ..normalizer import clean_text, hostname_of, resolve_image_url
from .base_parser import BaseRecipeParser

_LOGGER = logging.getLogger(__name__)

BULLET = '•'

_NUMBERED_STEP = re.compile(r'^\d+\.\s')
_STEP_BOUNDARY = re.compile(r'(?=\d+\.\s)')
_STEP_NUMBER = re.compile(r'^\d+\.\s*')
_CAPS_RUN = re.compile(r"[A-Z][A-Z'’&-]*(?:[ \t]+[A-Z][A-Z'’&-]*)*")
_HASHTAGS_ONLY = re.compile(r'^(?:#\S+\s*)+$')
_PLATFORM_PREFIX = re.compile(
    r'^.*?\bon\s+(?:Instagram|TikTok|Facebook)\s*:\s*', re.IGNORECASE)
# "1,234 likes, 56 comments - author on March 1, 2024: "caption""
_LIKES_PREFIX = re.compile(
    r'^[\d,.]+[KkMm]?\s+likes?,.*?\bon\s+[^:]*\d{4}\s*:\s*', re.IGNORECASE)
_QUOTES = '"“”\''


@dataclass
class CaptionRecipe:
    """Title, ingredients and steps segmented out of a caption."""

    title: str
    ingredients: list[str] = field(default_factory=list)
    instructions: list[str] = field(default_factory=list)


def _caps_title(segment: str) -> re.Match | None:
    """Find an all-caps run that can serve as a title.

    A run qualifies with 4+ letters in a single word, or as a phrase of
    several all-caps words of at least 2 letters each.
    """
    for match in _CAPS_RUN.finditer(segment):
        words = match.group(0).split()
        letters = [sum(char.isalpha() for char in word) for word in words]
        if len(words) == 1 and letters[0] >= 4:
            return match
        if len(words) > 1 and all(count >= 2 for count in letters):
            return match
    return None


def _split_steps(segment: str) -> list[str]:
    steps = []
    for piece in _STEP_BOUNDARY.split(segment):
        step = clean_text(_STEP_NUMBER.sub('', piece.strip()))
        if step:
            steps.append(step)
    return steps


def strip_attribution(text: str) -> str:
    """Remove a '<author> on <platform>: ' prefix and wrapping quotes."""
    text = clean_text(text)
    stripped = _LIKES_PREFIX.sub('', text, count=1)
    if stripped == text:
        stripped = _PLATFORM_PREFIX.sub('', text, count=1)
    return stripped.strip().strip(_QUOTES).strip()


def parse_caption(caption: str) -> CaptionRecipe:
    """Segment a caption into title, ingredients and instructions.

    Args:
        caption: The raw caption text

    Returns:
        CaptionRecipe with whatever structure the caption revealed
    """
    if BULLET in caption:
        raw_segments = caption.split(BULLET)
    else:
        raw_segments = caption.splitlines()
    segments = [segment.strip() for segment in raw_segments if segment.strip()]

    title = None
    pre_title = []
    ingredients = []
    instructions = []
    steps_started = False

    for segment in segments:
        if _NUMBERED_STEP.match(segment):
            steps_started = True
            instructions.extend(_split_steps(segment))
            continue

        if steps_started:
            if not _HASHTAGS_ONLY.match(segment):
                instructions.append(clean_text(segment))
            continue

        if title is None:
            match = _caps_title(segment)
            if match:
                title = clean_text(match.group(0))
                trailing = clean_text(segment[match.end():])
                if trailing:
                    ingredients.append(trailing)
                continue
            pre_title.append(segment)
            continue

        ingredients.append(clean_text(segment))

    if title is None:
        first = pre_title[0] if pre_title else (segments[0] if segments else '')
        title = strip_attribution(first)[:MAX_CAPTION_TITLE_LENGTH].strip()
        ingredients = [clean_text(segment) for segment in pre_title[1:]] + ingredients
        _LOGGER.debug("No all-caps title in caption, using '%s'", title)

    return CaptionRecipe(title=title, ingredients=ingredients, instructions=instructions)


class CaptionRecipeParser(BaseRecipeParser):
    """Reads a social post's caption from its page metadata and parses it."""

    CAPTION_META = (
        ('property', 'og:description'),
        ('name', 'description'),
        ('property', 'og:title'),
    )

    def find_caption(self, soup: BeautifulSoup) -> str | None:
        """Return the post caption with any attribution removed."""
        for attribute, value in self.CAPTION_META:
            tag = soup.find('meta', attrs={attribute: value})
            content = tag.get('content') if tag else None
            if content and content.strip():
                return strip_attribution(content)
        return None

    def parse_recipe(self, html: str | BeautifulSoup, url: str) -> ExtractedRecipe | None:
        soup = self._soup(html)
        caption = self.find_caption(soup)
        if not caption:
            _LOGGER.warning("No caption found on %s", url)
            return None

        parsed = parse_caption(caption)
        image_tag = soup.find('meta', attrs={'property': 'og:image'})
        image = image_tag.get('content') if image_tag else None

        _LOGGER.info("Parsed caption '%s' with %d ingredients and %d steps",
                     parsed.title, len(parsed.ingredients), len(parsed.instructions))
        return ExtractedRecipe(
            title=parsed.title,
            image_url=resolve_image_url(image, url),
            source_url=url,
            source_name=hostname_of(url),
            ingredients=parsed.ingredients,
            instructions=parsed.instructions,
        )
