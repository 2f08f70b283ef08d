"""
Normalization utilities for extracted recipe data.

Pure functions that turn the loosely formatted values found on recipe pages
(ISO-8601 durations, free-text times, yields, fractional quantities, HTML
fragments, image references) into the canonical forms stored on an
ExtractedRecipe.
"""
from __future__ import annotations

import logging
import re
from typing import Any
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

_LOGGER = logging.getLogger(__name__)

# Map unicode fractions to their decimal values
UNICODE_FRACTIONS = {
    '½': 1 / 2,
    '¼': 1 / 4,
    '¾': 3 / 4,
    '⅓': 1 / 3,
    '⅔': 2 / 3,
    '⅛': 1 / 8,
}
_FRACTION_CHARS = ''.join(UNICODE_FRACTIONS)

# A whole ISO-8601 time duration with at least one component; days are
# accepted but ignored
_ISO_DURATION = re.compile(
    r'P(?:\d+D)?T(?=\d)(?:(\d+)H)?(?:(\d+)M)?(?:(\d+(?:\.\d+)?)S)?')
_FIRST_INT = re.compile(r'(\d+)')
_WHITESPACE = re.compile(r'\s+')

# A leading quantity: one whole number, decimal or fraction, optionally
# followed by fractions only ("2 1/2", "1½"). A second whole number is never
# absorbed, so "2 14-ounce cans" scales the 2 alone.
_QUANTITY = (
    rf'(?:\d+/\d+|\d+(?:\.\d+)?|[{_FRACTION_CHARS}])'
    rf'(?:\s*(?:\d+/\d+|[{_FRACTION_CHARS}]))*'
)
_QUANTITY_PREFIX = re.compile(rf'^{_QUANTITY}')
_QUANTITY_TOKEN = re.compile(rf'\d+/\d+|\d+(?:\.\d+)?|[{_FRACTION_CHARS}]')
# Units may run straight into the next number ("1h30m")
_HOURS_TEXT = re.compile(rf'({_QUANTITY})\s*(?:hours?|hrs?|h)(?![a-z])', re.IGNORECASE)
_MINUTES_TEXT = re.compile(rf'({_QUANTITY})\s*(?:minutes?|mins?|m)(?![a-z])', re.IGNORECASE)
_RANGE_TEXT = re.compile(r'\d\s*(?:-|\u2013|to)\s*\d', re.IGNORECASE)

IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.webp', '.gif', '.avif')
IMAGE_PATH_HINTS = (
    'image', 'images', 'img', 'photo', 'photos', 'media', 'uploads',
    'wp-content', 'thumbnail', 'thumbnails', 'vi',
)
IMAGE_QUERY_HINTS = ('format=', 'fm=', 'auto=format')


def clean_text(value: Any) -> str:
    """Collapse runs of whitespace and trim."""
    if value is None:
        return ""
    return _WHITESPACE.sub(" ", str(value)).strip()


def strip_html(value: Any) -> str:
    """Remove markup and entities from a text fragment.

    Args:
        value: Raw value, possibly containing HTML tags or entities

    Returns:
        Plain, whitespace-normalized text
    """
    if value is None:
        return ""
    text = str(value)
    if '<' in text or '&' in text:
        text = BeautifulSoup(text, features="html.parser").get_text(" ")
    return clean_text(text)


def hostname_of(url: str | None) -> str | None:
    """Return the URL's hostname without a leading 'www.'."""
    if not url:
        return None
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return None
    if not hostname:
        return None
    return re.sub(r'^www\.', '', hostname)


def is_http_url(value: str | None) -> bool:
    """Check that a value parses as an absolute http(s) URL."""
    if not value or not isinstance(value, str):
        return False
    try:
        parsed = urlparse(value.strip())
    except ValueError:
        return False
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)


def looks_like_image_url(url: str) -> bool:
    """Judge whether an absolute URL plausibly references an image."""
    parsed = urlparse(url)
    path = parsed.path.lower()
    if path.endswith(IMAGE_EXTENSIONS):
        return True
    segments = {segment for segment in path.split('/') if segment}
    if segments & set(IMAGE_PATH_HINTS):
        return True
    query = parsed.query.lower()
    return any(hint in query for hint in IMAGE_QUERY_HINTS)


def resolve_image_url(candidate: Any, page_url: str | None) -> str | None:
    """Turn a raw image reference into an absolute, plausible image URL.

    Args:
        candidate: The raw reference (may be relative or protocol-relative)
        page_url: URL of the page the reference was found on

    Returns:
        An absolute http(s) image URL, or None when the reference is not
        usable or merely points back at the page itself
    """
    if not candidate or not isinstance(candidate, str):
        return None
    candidate = candidate.strip()
    if not candidate or candidate.startswith('data:'):
        return None

    url = urljoin(page_url, candidate) if page_url else candidate
    if not is_http_url(url):
        return None
    if page_url and url.rstrip('/') == page_url.strip().rstrip('/'):
        _LOGGER.debug("Rejecting image URL equal to the page URL: %s", url)
        return None
    if not looks_like_image_url(url):
        _LOGGER.debug("Rejecting image URL without image hints: %s", url)
        return None
    return url


def _render_duration(hours: int, minutes: int) -> str | None:
    parts = []
    if hours:
        parts.append(f"{hours} hr")
    if minutes:
        parts.append(f"{minutes} min")
    return " ".join(parts) if parts else None


def is_iso_duration(value: Any) -> bool:
    """Return True when the whole value is an ISO-8601 time duration."""
    return isinstance(value, str) and bool(_ISO_DURATION.fullmatch(value.strip()))


def parse_iso_duration(value: Any, strict: bool = False) -> str | None:
    """Convert an ISO-8601 duration into a human-readable string.

    Values that are not ISO-8601-shaped are passed through unchanged, since
    many sites put free text ("about 20 minutes") into duration fields. Use
    ``strict=True`` to get None for those instead.

    Examples:
        >>> parse_iso_duration("PT1H15M")
        '1 hr 15 min'
        >>> parse_iso_duration("PT45M")
        '45 min'
        >>> parse_iso_duration("not-iso")
        'not-iso'
    """
    if not value or not isinstance(value, str):
        return None

    match = _ISO_DURATION.fullmatch(value.strip())
    if not match:
        return None if strict else value

    hours = int(match.group(1) or 0)
    minutes = int(match.group(2) or 0)
    return _render_duration(hours, minutes)


def normalize_duration_text(text: Any) -> str | None:
    """Normalize a free-text or ISO duration to '<h> hr <m> min' form.

    Ranges ("10-15 minutes") and unrecognized text are returned cleaned but
    otherwise unchanged.
    """
    if text is None:
        return None
    text = clean_text(text)
    if not text:
        return None
    if is_iso_duration(text):
        return parse_iso_duration(text)
    if _RANGE_TEXT.search(text):
        return text

    hours_match = _HOURS_TEXT.search(text)
    minutes_match = _MINUTES_TEXT.search(text)
    if not hours_match and not minutes_match:
        return text

    hours = parse_quantity(hours_match.group(1)) if hours_match else None
    minutes = parse_quantity(minutes_match.group(1)) if minutes_match else None
    # Fractional hours ("1 1/2 hours") roll into minutes
    total = round((hours or 0) * 60 + (minutes or 0))
    return _render_duration(total // 60, total % 60) or text


def duration_to_minutes(text: str | None) -> int | None:
    """Convert a canonical or free-text duration into total minutes."""
    if not text:
        return None
    lower = text.lower()
    total = 0
    hours_match = re.search(r'(\d+)\s*h', lower)
    minutes_match = re.search(r'(\d+)\s*m', lower)
    if hours_match:
        total += int(hours_match.group(1)) * 60
    if minutes_match:
        total += int(minutes_match.group(1))
    if total == 0:
        number = _FIRST_INT.search(lower)
        if number:
            total = int(number.group(1))
    return total if total > 0 else None


def parse_servings(value: Any) -> int | None:
    """Extract a servings count from a yield value.

    Accepts a number, a string (the first integer wins) or a list (the first
    element is used). Anything else yields None.

    Examples:
        >>> parse_servings("Serves 4 people")
        4
        >>> parse_servings([6, 8])
        6
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        servings = int(value)
        return servings if servings > 0 else None
    if isinstance(value, str):
        match = _FIRST_INT.search(value)
        if not match:
            return None
        servings = int(match.group(1))
        return servings if servings > 0 else None
    if isinstance(value, (list, tuple)) and value:
        return parse_servings(value[0])
    return None


def _parse_fraction(fraction_str: str) -> float:
    """Parse a fraction string like '1/2' or '3/4'.

    Raises:
        ZeroDivisionError: If denominator is zero
    """
    numerator, denominator = fraction_str.split('/')
    if float(denominator) == 0:
        raise ZeroDivisionError(f"Fraction has zero denominator: {fraction_str}")
    return float(numerator) / float(denominator)


def parse_quantity(token: str) -> float | None:
    """Sum the integers, decimals and fractions in a quantity token.

    Args:
        token: String like '2', '1/2', '2 1/2', '1½' or '¾'

    Returns:
        Parsed float value or None if nothing numeric was found
    """
    if not token:
        return None
    total = 0.0
    found = False
    for part in _QUANTITY_TOKEN.findall(token):
        try:
            if part in UNICODE_FRACTIONS:
                total += UNICODE_FRACTIONS[part]
            elif '/' in part:
                total += _parse_fraction(part)
            else:
                total += float(part)
            found = True
        except (ValueError, ZeroDivisionError) as e:
            _LOGGER.debug("Failed to parse quantity part '%s': %s", part, e)
    return total if found else None


def format_quantity(quantity: float) -> str:
    """Render a quantity as an integer when whole, else with one decimal.

    Examples:
        >>> format_quantity(3.0)
        '3'
        >>> format_quantity(1.5)
        '1.5'
        >>> format_quantity(0.333)
        '0.3'
    """
    if quantity == int(quantity):
        return str(int(quantity))
    rendered = f"{quantity:.1f}"
    if rendered.endswith('.0'):
        rendered = rendered[:-2]
    return rendered


def scale_quantity(text: str, ratio: float) -> str:
    """Scale the leading quantity of an ingredient line.

    Lines without a numeric leading token are returned untouched, and a ratio
    of 1 always returns the input unchanged.

    Examples:
        >>> scale_quantity("1 1/2 cups flour", 2)
        '3 cups flour'
        >>> scale_quantity("salt to taste", 2)
        'salt to taste'
    """
    if not text or ratio == 1 or ratio <= 0:
        return text

    match = _QUANTITY_PREFIX.match(text)
    if not match:
        return text

    quantity = parse_quantity(match.group(0))
    if quantity is None:
        return text

    rendered = format_quantity(quantity * ratio)
    rest = text[match.end():].lstrip()
    return f"{rendered} {rest}" if rest else rendered


def scale_ingredients(
    ingredients: list[str],
    original_servings: int | float | None,
    target_servings: int | float,
) -> list[str]:
    """Scale ingredient lines based on servings.

    Args:
        ingredients: Ingredient lines as stored on a recipe
        original_servings: Original number of servings in the recipe
        target_servings: Target number of servings to scale to

    Returns:
        List of scaled ingredient lines
    """
    if original_servings is None or original_servings <= 0:
        _LOGGER.warning(
            "Cannot scale recipe: original servings not available or invalid")
        return list(ingredients)

    if target_servings <= 0:
        _LOGGER.warning(
            "Cannot scale recipe: target servings must be positive")
        return list(ingredients)

    ratio = target_servings / original_servings
    _LOGGER.info("Scaling ingredients from %s to %s servings (factor: %.2f)",
                 original_servings, target_servings, ratio)
    return [scale_quantity(line, ratio) for line in ingredients]
