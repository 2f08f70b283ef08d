"""Tests for building and rendering a taste profile."""
import pytest

from recipe_feeder.models.recipe import MealPlanEntry, StoredRecipe
from recipe_feeder.services.taste_profile import (
    build_taste_profile,
    detect_cuisines,
    normalize_ingredient,
    profile_to_prompt_context,
)


@pytest.fixture
def recipes():
    return [
        StoredRecipe(
            id="1",
            title="Pesto Pasta",
            ingredients=["2 cups fresh basil", "1 lb pasta", "1/2 cup parmesan"],
            total_time="30 min",
            servings=4,
            tags=["Quick", "vegetarian"],
            categories=["Dinner"],
        ),
        StoredRecipe(
            id="2",
            title="Tacos",
            ingredients=["8 tortilla", "1 tsp cumin", "1 lime", "1 cup fresh basil"],
            cook_time="1 hr",
            servings=3,
            tags=["quick"],
            categories=["Dinner", "Lunch"],
        ),
    ]


@pytest.fixture
def meal_plans():
    return [
        MealPlanEntry(recipe_id="2", planned_date="2024-05-01", meal_type="dinner"),
        MealPlanEntry(recipe_id="1", planned_date="2024-05-02", meal_type="lunch"),
        MealPlanEntry(recipe_id="deleted", planned_date="2024-05-03", meal_type="dinner"),
        MealPlanEntry(recipe_id="2", planned_date="2024-05-04", meal_type="dinner"),
    ]


@pytest.mark.parametrize("line,expected", [
    ("2 cups chopped fresh basil", "basil"),
    ("1/2 cup parmesan", "parmesan"),
    ("3 cloves garlic, minced", "garlic"),
    ("Salt to taste", "salt"),
])
def test_normalize_ingredient(line, expected):
    assert normalize_ingredient(line) == expected


def test_detect_cuisines_needs_two_markers():
    assert detect_cuisines(["soy sauce", "ginger", "rice"]) == ["Asian"]
    assert detect_cuisines(["pasta", "salt"]) == []


def test_build_taste_profile(recipes, meal_plans):
    profile = build_taste_profile(recipes, meal_plans)

    assert profile.total_recipes == 2
    assert profile.top_ingredients[0].name == "basil"
    assert profile.top_ingredients[0].count == 2
    assert profile.category_distribution == {"Dinner": 2, "Lunch": 1}
    assert profile.tags == ["quick", "vegetarian"]
    assert profile.cuisine_signals == ["Italian", "Mexican"]
    assert profile.avg_cooking_minutes == 45
    assert profile.common_servings == 4
    assert profile.most_planned_titles == ["Tacos", "Pesto Pasta"]
    assert profile.all_titles == ["Pesto Pasta", "Tacos"]


def test_prompt_context(recipes, meal_plans):
    context = profile_to_prompt_context(build_taste_profile(recipes, meal_plans))
    lines = context.split("\n")

    assert lines[0] == "Total recipes saved: 2"
    assert lines[1].startswith("Most-used ingredients: basil (2x), ")
    assert "Category breakdown: Dinner: 2, Lunch: 1" in lines
    assert "Cuisine leanings: Italian, Mexican" in lines
    assert "Tags used: quick, vegetarian" in lines
    assert "Average cooking time: ~45 minutes" in lines
    assert "Typical servings: 4" in lines
    assert lines[-1] == "Most meal-planned recipes (true favorites): Tacos, Pesto Pasta"


def test_empty_collection():
    profile = build_taste_profile([], [])
    assert profile.avg_cooking_minutes is None
    assert profile_to_prompt_context(profile) == "Total recipes saved: 0"
