"""Tests for the canonical recipe record."""
import pytest
from pydantic import ValidationError

from recipe_feeder.models import RECIPE_CATEGORIES, ExtractedRecipe


def test_title_falls_back_to_default():
    assert ExtractedRecipe(source_url="https://example.com/r").title == "Untitled Recipe"
    assert ExtractedRecipe(title="  ", source_url="https://example.com/r").title == \
        "Untitled Recipe"


def test_lines_are_stripped_of_markup_and_blanks():
    recipe = ExtractedRecipe(
        source_url="https://example.com/r",
        ingredients=["<b>2 cups</b> flour", "   ", None, "1 egg"],
        instructions=["<p>Mix &amp; bake.</p>"],
    )
    assert recipe.ingredients == ["2 cups flour", "1 egg"]
    assert recipe.instructions == ["Mix & bake."]


def test_image_must_be_http_and_not_the_page():
    page = "https://example.com/recipe"
    assert ExtractedRecipe(source_url=page, image_url=page).image_url is None
    assert ExtractedRecipe(source_url=page, image_url="/img/a.jpg").image_url is None
    assert ExtractedRecipe(source_url=page, image_url="https://example.com/a.jpg").image_url == \
        "https://example.com/a.jpg"


def test_servings_are_normalized():
    assert ExtractedRecipe(source_url="x", servings="Makes 6").servings == 6
    assert ExtractedRecipe(source_url="x", servings=0).servings is None


def test_empty_optional_strings_become_none():
    recipe = ExtractedRecipe(source_url="x", notes="   ", total_time="")
    assert recipe.notes is None
    assert recipe.total_time is None


def test_is_empty():
    assert ExtractedRecipe(source_url="x").is_empty
    assert not ExtractedRecipe(source_url="x", instructions=["Bake"]).is_empty


def test_record_is_frozen():
    recipe = ExtractedRecipe(source_url="x", title="Soup")
    with pytest.raises(ValidationError):
        recipe.title = "Stew"
    updated = recipe.model_copy(update={"tags": ["quick"]})
    assert updated.tags == ["quick"]
    assert recipe.tags == []


def test_categories_are_validated():
    recipe = ExtractedRecipe(source_url="x", categories=["Dinner"])
    assert recipe.categories == ["Dinner"]
    with pytest.raises(ValidationError):
        ExtractedRecipe(source_url="x", categories=["Brunch"])


def test_category_list_matches_the_model():
    assert RECIPE_CATEGORIES[0] == "Go-to Recipes"
    assert len(RECIPE_CATEGORIES) == 6
    recipe = ExtractedRecipe(source_url="x", categories=list(RECIPE_CATEGORIES))
    assert tuple(recipe.categories) == RECIPE_CATEGORIES
