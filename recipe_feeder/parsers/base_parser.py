"""
Base Recipe Parser.

This module defines the base interface that all page parsers implement.
"""
from __future__ import annotations

from abc import ABC, abstractmethod

from bs4 import BeautifulSoup

from ..models.recipe import ExtractedRecipe


class BaseRecipeParser(ABC):
    """Abstract base class for HTML recipe parsers.

    Parsers never raise for "no recipe here"; they return None and let the
    orchestrator move on to the next tier.
    """

    @abstractmethod
    def parse_recipe(self, html: str | BeautifulSoup, url: str) -> ExtractedRecipe | None:
        """Parse recipe information from a fetched page.

        Args:
            html: Page HTML, or an already parsed document
            url: The page URL, used for relative links and source naming

        Returns:
            An ExtractedRecipe, or None if this parser found nothing
        """

    @staticmethod
    def _soup(html: str | BeautifulSoup) -> BeautifulSoup:
        if isinstance(html, BeautifulSoup):
            return html
        return BeautifulSoup(html, features="html.parser")
