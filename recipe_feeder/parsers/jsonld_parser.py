"""
JSON-LD Recipe Parser.

This module handles parsing of structured recipe data embedded in a page as
schema.org JSON-LD. The rules here are deliberately lenient: real sites nest
the Recipe node in graphs and type arrays, and often join ingredient lists
into a single string.
"""
from __future__ import annotations

import json
import logging
from typing import Any

from bs4 import BeautifulSoup

from ..models.recipe import ExtractedRecipe
from ..normalizer import (
    hostname_of,
    parse_iso_duration,
    parse_servings,
    resolve_image_url,
    strip_html,
)
from .base_parser import BaseRecipeParser

_LOGGER = logging.getLogger(__name__)

# Ingredient lists this short with this many commas per line were joined
# by the site and need splitting again.
REPAIR_MAX_LINES = 3
REPAIR_MIN_COMMAS = 3


def is_recipe(item: Any) -> bool:
    """Check if a JSON-LD item represents a Recipe."""
    if not isinstance(item, dict):
        return False
    item_type = item.get('@type')
    if isinstance(item_type, str):
        return item_type == 'Recipe'
    if isinstance(item_type, list):
        return 'Recipe' in item_type
    return False


def find_recipe_node(data: Any) -> dict[str, Any] | None:
    """Locate the first Recipe node in parsed JSON-LD.

    Lists are searched item by item. A dict with an '@graph' list has the
    graph's items checked, one level deep. The first match wins.
    """
    if isinstance(data, list):
        for item in data:
            found = find_recipe_node(item)
            if found:
                return found
        return None

    if isinstance(data, dict):
        if is_recipe(data):
            return data
        graph = data.get('@graph')
        if isinstance(graph, list):
            return next((item for item in graph if is_recipe(item)), None)

    return None


def split_top_level_commas(text: str) -> list[str]:
    """Split on commas that are not inside parentheses."""
    parts = []
    depth = 0
    current = []
    for char in text:
        if char == '(':
            depth += 1
        elif char == ')':
            depth = max(depth - 1, 0)
        if char == ',' and depth == 0:
            parts.append(''.join(current))
            current = []
            continue
        current.append(char)
    parts.append(''.join(current))
    return [part.strip() for part in parts if part.strip()]


def repair_joined_ingredients(lines: list[str]) -> list[str]:
    """Re-split ingredient lines that a site joined with commas.

    Only applies when there are at most three lines; each line with three or
    more top-level commas is split. Normal one-per-line lists are untouched.
    """
    if not lines or len(lines) > REPAIR_MAX_LINES:
        return lines

    repaired = []
    for line in lines:
        pieces = split_top_level_commas(line)
        if len(pieces) > REPAIR_MIN_COMMAS:
            _LOGGER.debug("Re-splitting joined ingredient line into %d items",
                          len(pieces))
            repaired.extend(pieces)
        else:
            repaired.append(line)
    return repaired


def extract_ingredients(raw: Any) -> list[str]:
    """Normalize a recipeIngredient value into ingredient lines."""
    if isinstance(raw, str):
        lines = split_top_level_commas(strip_html(raw))
    elif isinstance(raw, list):
        lines = [strip_html(item) for item in raw if isinstance(item, str)]
        lines = [line for line in lines if line]
    else:
        return []
    return repair_joined_ingredients(lines)


def _step_text(item: Any) -> str:
    if isinstance(item, str):
        return strip_html(item)
    if isinstance(item, dict):
        return strip_html(item.get('text') or item.get('name') or '')
    return ''


def extract_instructions(raw: Any) -> list[str]:
    """Normalize a recipeInstructions value into instruction steps.

    Accepts a newline-delimited string, a list of strings, or a list of
    objects where HowToSection groups contribute a bolded section marker
    followed by their nested steps.
    """
    if not raw:
        return []

    if isinstance(raw, str):
        text = raw
        if '<' in text:
            text = BeautifulSoup(text, features="html.parser").get_text('\n')
        return [strip_html(line) for line in text.split('\n') if strip_html(line)]

    if not isinstance(raw, list):
        raw = [raw]

    steps = []
    for item in raw:
        if isinstance(item, dict) and item.get('@type') == 'HowToSection':
            name = strip_html(item.get('name'))
            if name:
                steps.append(f"**{name}**")
            nested = item.get('itemListElement') or []
            if not isinstance(nested, list):
                nested = [nested]
            steps.extend(_step_text(sub) for sub in nested)
        else:
            steps.append(_step_text(item))
    return [step for step in steps if step]


def extract_image(raw: Any) -> str | None:
    """Pick an image reference from a string, list or ImageObject."""
    if isinstance(raw, str):
        return raw
    if isinstance(raw, list) and raw:
        first = raw[0]
        if isinstance(first, str):
            return first
        if isinstance(first, dict):
            return first.get('url') or first.get('contentUrl')
        return None
    if isinstance(raw, dict):
        return raw.get('url') or raw.get('contentUrl')
    return None


class JSONLDRecipeParser(BaseRecipeParser):
    """Parses recipe data from structured JSON-LD markup.

    This parser handles pre-structured recipe data that follows the Schema.org
    Recipe format, requiring no AI inference.
    """

    def __init__(self) -> None:
        """Initialize the JSON-LD recipe parser."""
        _LOGGER.debug("Initialized JSONLDRecipeParser")

    def find_recipe(self, soup: BeautifulSoup) -> dict[str, Any] | None:
        """Return the first Recipe node across all JSON-LD scripts."""
        json_lds = soup.find_all('script', type='application/ld+json')
        _LOGGER.debug("Found %d JSON-LD scripts", len(json_lds))

        for idx, json_ld in enumerate(json_lds):
            raw = json_ld.string or json_ld.get_text()
            if not raw or not raw.strip():
                continue
            try:
                parsed_data = json.loads(raw)
            except (json.JSONDecodeError, TypeError) as e:
                _LOGGER.debug("Failed to parse JSON-LD script %d: %s", idx, e)
                continue

            data = find_recipe_node(parsed_data)
            if data:
                _LOGGER.debug("Found recipe data in JSON-LD script %d", idx)
                return data
        return None

    def parse_recipe(self, html: str | BeautifulSoup, url: str) -> ExtractedRecipe | None:
        """Map the first JSON-LD Recipe node on the page to a recipe.

        Args:
            html: Page HTML or parsed document
            url: Page URL

        Returns:
            ExtractedRecipe, or None when the page has no Recipe node
        """
        data = self.find_recipe(self._soup(html))
        if not data:
            return None

        recipe = ExtractedRecipe(
            title=data.get('name'),
            image_url=resolve_image_url(extract_image(data.get('image')), url),
            source_url=url,
            source_name=hostname_of(url),
            total_time=parse_iso_duration(data.get('totalTime')),
            prep_time=parse_iso_duration(data.get('prepTime')),
            cook_time=parse_iso_duration(data.get('cookTime')),
            servings=parse_servings(data.get('recipeYield')),
            ingredients=extract_ingredients(data.get('recipeIngredient')),
            instructions=extract_instructions(data.get('recipeInstructions')),
            notes=strip_html(data.get('description')) or None,
        )
        _LOGGER.info("Parsed JSON-LD recipe '%s' with %d ingredients and %d steps",
                     recipe.title, len(recipe.ingredients), len(recipe.instructions))
        return recipe
