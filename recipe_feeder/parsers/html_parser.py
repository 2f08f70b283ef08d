"""
Heuristic HTML Recipe Parser.

Fallback for pages without JSON-LD Recipe markup. Every field is located by
an ordered selector cascade: a table of rules tried in sequence, where the
first rule with any accepted match wins. Targeted class, attribute and
microdata rules come first; generic rules only run when they all miss.
New site patterns are supported by adding rows to the tables.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable

from bs4 import BeautifulSoup, Tag

from ..const import DEFAULT_TITLE, MAX_HTML_INGREDIENTS, MAX_HTML_INSTRUCTIONS
from ..models.recipe import ExtractedRecipe
from ..normalizer import (
    clean_text,
    hostname_of,
    normalize_duration_text,
    parse_servings,
    resolve_image_url,
)
from .base_parser import BaseRecipeParser

_LOGGER = logging.getLogger(__name__)

_UNIT_KEYWORDS = re.compile(
    r'\b(?:cups?|tsp|tbsp|oz|lbs?|ml|tablespoons?|teaspoons?)\b', re.IGNORECASE)


def _any_text(text: str) -> bool:
    return bool(text)


def _looks_like_ingredient(text: str) -> bool:
    return (
        5 <= len(text) <= 300
        and any(char.isdigit() for char in text)
        and bool(_UNIT_KEYWORDS.search(text))
    )


def _looks_like_step(text: str) -> bool:
    return len(text) > 15


def _has_digit(text: str) -> bool:
    return any(char.isdigit() for char in text)


@dataclass(frozen=True)
class SelectorRule:
    """One row of a selector cascade.

    Attributes:
        selector: CSS selector locating candidate elements
        attribute: Read this attribute instead of the element text; several
            attributes may be given separated by '|', the first present wins
        accept: Predicate a candidate's text must pass
    """

    selector: str
    attribute: str | None = None
    accept: Callable[[str], bool] = _any_text

    def values(self, soup: BeautifulSoup | Tag) -> list[str]:
        """Return the accepted values of every element this rule matches."""
        results = []
        for element in soup.select(self.selector):
            value = self._read(element)
            if value and self.accept(value):
                results.append(value)
        return results

    def _read(self, element: Tag) -> str:
        if self.attribute:
            for name in self.attribute.split('|'):
                value = element.get(name)
                if isinstance(value, list):
                    value = ' '.join(value)
                if value and str(value).strip():
                    return clean_text(value)
            return ''
        return clean_text(element.get_text(' '))


def run_cascade(soup: BeautifulSoup | Tag, rules: tuple[SelectorRule, ...],
                limit: int | None = None) -> list[str]:
    """Return the values of the first rule that matches anything."""
    for rule in rules:
        values = rule.values(soup)
        if values:
            _LOGGER.debug("Selector '%s' matched %d elements",
                          rule.selector, len(values))
            return values[:limit] if limit else values
    return []


def first_value(soup: BeautifulSoup | Tag, rules: tuple[SelectorRule, ...]) -> str | None:
    """Return the first accepted value across a cascade."""
    values = run_cascade(soup, rules, limit=1)
    return values[0] if values else None


INGREDIENT_RULES = (
    SelectorRule('li[class*="ingredient"]'),
    SelectorRule('p[class*="ingredient"]'),
    SelectorRule('td[class*="ingredient"]'),
    SelectorRule('tr[class*="ingredient"]'),
    SelectorRule('[itemprop="recipeIngredient"]'),
    SelectorRule('[itemprop="ingredients"]'),
    SelectorRule('.wprm-recipe-ingredient'),
    SelectorRule('.tasty-recipes-ingredients li'),
    SelectorRule('.mv-create-ingredients li'),
    SelectorRule('.zrdn-ingredients-list li'),
    SelectorRule('.easyrecipe .ingredient'),
    # Generic: any bullet that reads like "2 cups flour"
    SelectorRule('li', accept=_looks_like_ingredient),
)

INSTRUCTION_RULES = (
    SelectorRule('li[class*="instruction"]'),
    SelectorRule('[class*="instruction"] li'),
    SelectorRule('p[class*="instruction"]'),
    SelectorRule('[class*="direction"] li'),
    SelectorRule('li[class*="direction"]'),
    SelectorRule('li[class*="step"]'),
    SelectorRule('[class*="step"] p'),
    SelectorRule('[itemprop="recipeInstructions"] li'),
    SelectorRule('[itemprop="recipeInstructions"]'),
    SelectorRule('.wprm-recipe-instruction-text'),
    SelectorRule('.tasty-recipes-instructions li'),
    SelectorRule('.mv-create-instructions li'),
    SelectorRule('.zrdn-instructions-list li'),
    # Generic: numbered list items long enough to be a step
    SelectorRule('ol li', accept=_looks_like_step),
)

TITLE_RULES = (
    SelectorRule('meta[property="og:title"]', attribute='content'),
    SelectorRule('h1'),
    SelectorRule('h2'),
    SelectorRule('title'),
)

_IMAGE_ATTRIBUTES = 'src|data-src|data-lazy-src|data-original'
IMAGE_RULES = (
    SelectorRule('meta[property="og:image"]', attribute='content'),
    SelectorRule('meta[name="twitter:image"]', attribute='content'),
    SelectorRule('[class*="recipe"] img', attribute=_IMAGE_ATTRIBUTES),
    SelectorRule('[class*="recipe"] img[srcset]', attribute='srcset'),
    SelectorRule('article img', attribute=_IMAGE_ATTRIBUTES),
    SelectorRule('article img[srcset]', attribute='srcset'),
)

_TIME_ATTRIBUTES = 'content|datetime'


def _time_rules(microdata: str, *class_names: str) -> tuple[SelectorRule, ...]:
    rules = [
        SelectorRule(f'[itemprop="{microdata}"]', attribute=_TIME_ATTRIBUTES),
        SelectorRule(f'[itemprop="{microdata}"]', accept=_has_digit),
    ]
    rules.extend(
        SelectorRule(f'[class*="{name}"]', accept=_has_digit) for name in class_names)
    return tuple(rules)


PREP_TIME_RULES = _time_rules('prepTime', 'prep-time', 'prep_time', 'preptime')
COOK_TIME_RULES = _time_rules('cookTime', 'cook-time', 'cook_time', 'cooktime')
TOTAL_TIME_RULES = _time_rules('totalTime', 'total-time', 'total_time', 'totaltime')

SERVINGS_RULES = (
    SelectorRule('[itemprop="recipeYield"]', attribute='content'),
    SelectorRule('[itemprop="recipeYield"]', accept=_has_digit),
    SelectorRule('[class*="servings"]', attribute='data-servings|data-original-servings'),
    SelectorRule('[class*="servings"]', accept=_has_digit),
    SelectorRule('[class*="yield"]', accept=_has_digit),
)

NOTES_RULES = (
    SelectorRule('meta[property="og:description"]', attribute='content'),
    SelectorRule('meta[name="description"]', attribute='content'),
)


def best_from_srcset(srcset: str) -> str | None:
    """Return the widest candidate of a srcset attribute."""
    if not srcset:
        return None
    items = []
    for part in srcset.split(','):
        seg = part.strip().split()
        if not seg:
            continue
        width = 0
        if len(seg) > 1 and seg[1].endswith('w') and seg[1][:-1].isdigit():
            width = int(seg[1][:-1])
        items.append((width, seg[0]))
    if not items:
        return None
    items.sort(key=lambda item: item[0], reverse=True)
    return items[0][1]


class HTMLRecipeParser(BaseRecipeParser):
    """Extracts recipe fields from arbitrary HTML using selector cascades."""

    def find_image(self, soup: BeautifulSoup, url: str) -> str | None:
        """Return the first usable image across the image cascade."""
        for rule in IMAGE_RULES:
            for value in rule.values(soup):
                if rule.attribute == 'srcset':
                    value = best_from_srcset(value)
                image_url = resolve_image_url(value, url)
                if image_url:
                    return image_url
        return None

    def parse_recipe(self, html: str | BeautifulSoup, url: str) -> ExtractedRecipe:
        """Extract a recipe from page HTML.

        Always returns a record; missing fields stay empty so the caller
        decides whether the result is good enough.
        """
        soup = self._soup(html)

        ingredients = run_cascade(soup, INGREDIENT_RULES, MAX_HTML_INGREDIENTS)
        instructions = run_cascade(soup, INSTRUCTION_RULES, MAX_HTML_INSTRUCTIONS)

        recipe = ExtractedRecipe(
            title=first_value(soup, TITLE_RULES) or DEFAULT_TITLE,
            image_url=self.find_image(soup, url),
            source_url=url,
            source_name=hostname_of(url),
            total_time=normalize_duration_text(first_value(soup, TOTAL_TIME_RULES)),
            prep_time=normalize_duration_text(first_value(soup, PREP_TIME_RULES)),
            cook_time=normalize_duration_text(first_value(soup, COOK_TIME_RULES)),
            servings=parse_servings(first_value(soup, SERVINGS_RULES)),
            ingredients=ingredients,
            instructions=instructions,
            notes=first_value(soup, NOTES_RULES),
        )
        _LOGGER.info("Heuristic extraction found %d ingredients and %d steps on %s",
                     len(recipe.ingredients), len(recipe.instructions), url)
        return recipe
