"""
Recipe data models for the Recipe Feeder pipeline.

This module defines the Pydantic models used to carry recipe data from the
extractors to the persistence layer, plus the read-only views of a user's
collection used to build a taste profile.
"""
from __future__ import annotations

from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..const import DEFAULT_TITLE
from ..normalizer import clean_text, is_http_url, parse_servings, strip_html

RecipeCategory = Literal[
    "Go-to Recipes",
    "Breakfast",
    "Lunch",
    "Dinner",
    "Snacks",
    "New Ideas",
]
RECIPE_CATEGORIES: tuple[str, ...] = get_args(RecipeCategory)


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    value = clean_text(value)
    return value or None


def _text_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    lines = []
    for item in value:
        if not isinstance(item, str):
            continue
        text = strip_html(item)
        if text:
            lines.append(text)
    return lines


class ExtractedRecipe(BaseModel):
    """The canonical record every extraction path produces.

    The record is a value object: it is created fresh per extraction and
    handed to the persistence layer, which assigns identity. Callers attach
    tags or categories with ``model_copy(update=...)``.

    Attributes:
        title: The recipe title, never empty
        image_url: Absolute http(s) image URL, or None
        source_url: Where the recipe came from
        source_name: Hostname (without 'www.'), file name or detected source
        total_time: Canonical duration, e.g. '1 hr 15 min'
        prep_time: Canonical duration
        cook_time: Canonical duration
        servings: Positive number of servings, or None
        ingredients: Ordered ingredient lines without markup
        instructions: Ordered instruction steps without markup
        notes: Description or tips
        source_images: Addresses of uploaded page images (documents only)
    """

    model_config = ConfigDict(frozen=True)

    title: str = Field(
        default=DEFAULT_TITLE,
        description="The title of the recipe"
    )
    image_url: str | None = None
    source_url: str
    source_name: str | None = None
    total_time: str | None = None
    prep_time: str | None = None
    cook_time: str | None = None
    servings: int | None = None
    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    notes: str | None = None
    source_images: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    categories: list[RecipeCategory] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, value: Any) -> str:
        return strip_html(value) or DEFAULT_TITLE

    @field_validator("source_url", mode="before")
    @classmethod
    def _source_url(cls, value: Any) -> str:
        return clean_text(value)

    @field_validator(
        "source_name", "total_time", "prep_time", "cook_time", "notes",
        mode="before",
    )
    @classmethod
    def _optional(cls, value: Any) -> str | None:
        return _optional_text(value)

    @field_validator("servings", mode="before")
    @classmethod
    def _servings(cls, value: Any) -> int | None:
        return parse_servings(value)

    @field_validator("ingredients", "instructions", mode="before")
    @classmethod
    def _lines(cls, value: Any) -> list[str]:
        return _text_list(value)

    @field_validator("source_images", "tags", mode="before")
    @classmethod
    def _plain_list(cls, value: Any) -> list[str]:
        if value is None:
            return []
        return [clean_text(item) for item in value if clean_text(item)]

    @model_validator(mode="before")
    @classmethod
    def _image(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        image_url = _optional_text(data.get("image_url"))
        source_url = clean_text(data.get("source_url"))
        if image_url and (not is_http_url(image_url) or image_url == source_url):
            image_url = None
        return {**data, "image_url": image_url}

    @property
    def is_empty(self) -> bool:
        """True when neither ingredients nor instructions were found."""
        return not self.ingredients and not self.instructions


class StoredRecipe(BaseModel):
    """A recipe as read back from the user's collection."""

    id: str
    title: str
    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    total_time: str | None = None
    cook_time: str | None = None
    servings: int | None = None
    tags: list[str] | None = None
    categories: list[str] = Field(default_factory=list)


class MealPlanEntry(BaseModel):
    """A planned meal referencing a stored recipe."""

    id: str | None = None
    recipe_id: str
    planned_date: str
    meal_type: Literal["breakfast", "lunch", "dinner", "snack"]


class IngredientCount(BaseModel):
    name: str
    count: int


class TasteProfile(BaseModel):
    """Aggregate view of a user's collection, rebuilt on demand."""

    top_ingredients: list[IngredientCount] = Field(default_factory=list)
    category_distribution: dict[str, int] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)
    cuisine_signals: list[str] = Field(default_factory=list)
    avg_cooking_minutes: int | None = None
    common_servings: int | None = None
    total_recipes: int = 0
    most_planned_titles: list[str] = Field(default_factory=list)
    all_titles: list[str] = Field(default_factory=list)
