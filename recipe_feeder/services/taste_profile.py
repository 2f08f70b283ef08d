"""
Taste profile built from a user's saved recipes and meal plans.

The profile summarizes what a household actually cooks (frequent
ingredients, categories, cuisines, cooking times) and renders it as plain
text context for recipe suggestion prompts.
"""
from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Iterable

from ..models.recipe import IngredientCount, MealPlanEntry, StoredRecipe, TasteProfile
from ..normalizer import duration_to_minutes

_LOGGER = logging.getLogger(__name__)

CUISINE_MARKERS = {
    "Italian": ["parmesan", "mozzarella", "basil", "oregano", "marinara", "pasta",
                "risotto", "prosciutto", "pancetta"],
    "Mexican": ["cumin", "cilantro", "jalapeño", "jalapeno", "chipotle", "tortilla",
                "salsa", "avocado", "lime", "chili powder"],
    "Asian": ["soy sauce", "ginger", "sesame", "rice vinegar", "sriracha", "fish sauce",
              "hoisin", "miso", "tofu", "bok choy"],
    "Indian": ["turmeric", "garam masala", "curry", "cardamom", "coriander", "naan",
               "ghee", "cumin", "chana"],
    "Mediterranean": ["olive oil", "feta", "hummus", "tahini", "za'atar", "sumac",
                      "pita", "chickpea", "lemon"],
    "Thai": ["coconut milk", "lemongrass", "thai basil", "fish sauce", "galangal",
             "curry paste", "peanut"],
    "Japanese": ["miso", "dashi", "nori", "wasabi", "mirin", "sake", "sushi",
                 "edamame", "teriyaki"],
    "French": ["butter", "shallot", "thyme", "dijon", "wine", "crème", "béchamel",
               "brioche"],
    "Korean": ["gochujang", "kimchi", "sesame oil", "doenjang", "bulgogi", "bibimbap"],
    "MiddleEastern": ["sumac", "za'atar", "pomegranate", "tahini", "harissa", "saffron",
                      "rosewater"],
}

MIN_CUISINE_HITS = 2
TOP_INGREDIENTS = 25
MOST_PLANNED = 5
PROMPT_INGREDIENTS = 15
PROMPT_TAGS = 20

_LEADING_QUANTITY = re.compile(r'^[\d\s/.¼½¾⅓⅔⅛⅜⅝⅞]+')
_MEASURE_WORDS = re.compile(
    r'\b(?:cups?|tbsps?|tsps?|tablespoons?|teaspoons?|ounces?|oz|lbs?|pounds?|grams?|g|ml'
    r'|liters?|l|pinch(?:es)?|dash(?:es)?|bunch(?:es)?|cloves?|cans?|packages?|pieces?'
    r'|slices?|large|medium|small|fresh|dried|ground|chopped|minced|diced|sliced|whole'
    r'|thin(?:ly)?|fine(?:ly)?|roughly|to taste|optional|about|approximately|heaping)\b'
)
_PUNCTUATION = re.compile(r'[(),]')
_WHITESPACE = re.compile(r'\s+')


def normalize_ingredient(raw: str) -> str:
    """Reduce an ingredient line to its bare name.

    Examples:
        >>> normalize_ingredient("2 cups chopped fresh basil")
        'basil'
    """
    text = _LEADING_QUANTITY.sub('', raw.lower())
    text = _MEASURE_WORDS.sub('', text)
    text = _PUNCTUATION.sub('', text)
    return _WHITESPACE.sub(' ', text).strip()


def detect_cuisines(ingredient_names: Iterable[str]) -> list[str]:
    """Return cuisines with at least two marker ingredients present."""
    text = ' '.join(ingredient_names)
    cuisines = []
    for cuisine, markers in CUISINE_MARKERS.items():
        hits = sum(1 for marker in markers if marker in text)
        if hits >= MIN_CUISINE_HITS:
            cuisines.append(cuisine)
    return cuisines


def _mean(values: list[int]) -> int | None:
    if not values:
        return None
    return int(sum(values) / len(values) + 0.5)


def build_taste_profile(recipes: list[StoredRecipe],
                        meal_plans: list[MealPlanEntry]) -> TasteProfile:
    """Aggregate a collection into a taste profile.

    Args:
        recipes: The user's saved recipes
        meal_plans: The user's meal plan entries

    Returns:
        TasteProfile summarizing the collection
    """
    ingredient_counts: Counter[str] = Counter()
    category_counts: Counter[str] = Counter()
    tags: dict[str, None] = {}
    times = []
    servings = []

    for recipe in recipes:
        for line in recipe.ingredients:
            name = normalize_ingredient(line)
            if 1 < len(name) < 60:
                ingredient_counts[name] += 1

        category_counts.update(recipe.categories)

        for tag in recipe.tags or []:
            tags.setdefault(tag.lower(), None)

        minutes = duration_to_minutes(recipe.total_time) or duration_to_minutes(recipe.cook_time)
        if minutes:
            times.append(minutes)

        if recipe.servings:
            servings.append(recipe.servings)

    plan_counts = Counter(plan.recipe_id for plan in meal_plans)
    titles_by_id = {recipe.id: recipe.title for recipe in recipes}
    most_planned = [
        titles_by_id[recipe_id]
        for recipe_id, _ in plan_counts.most_common(MOST_PLANNED)
        if titles_by_id.get(recipe_id)
    ]

    profile = TasteProfile(
        top_ingredients=[
            IngredientCount(name=name, count=count)
            for name, count in ingredient_counts.most_common(TOP_INGREDIENTS)
        ],
        category_distribution=dict(category_counts),
        tags=list(tags),
        cuisine_signals=detect_cuisines(ingredient_counts),
        avg_cooking_minutes=_mean(times),
        common_servings=_mean(servings),
        total_recipes=len(recipes),
        most_planned_titles=most_planned,
        all_titles=[recipe.title for recipe in recipes],
    )
    _LOGGER.debug("Built taste profile from %d recipes and %d meal plans",
                  len(recipes), len(meal_plans))
    return profile


def profile_to_prompt_context(profile: TasteProfile) -> str:
    """Render a taste profile as prompt context, one fact per line."""
    lines = [f"Total recipes saved: {profile.total_recipes}"]

    if profile.top_ingredients:
        ingredients = ", ".join(
            f"{item.name} ({item.count}x)"
            for item in profile.top_ingredients[:PROMPT_INGREDIENTS]
        )
        lines.append(f"Most-used ingredients: {ingredients}")

    if profile.category_distribution:
        categories = ", ".join(
            f"{category}: {count}"
            for category, count in sorted(profile.category_distribution.items(),
                                          key=lambda item: item[1], reverse=True)
        )
        lines.append(f"Category breakdown: {categories}")

    if profile.cuisine_signals:
        lines.append(f"Cuisine leanings: {', '.join(profile.cuisine_signals)}")

    if profile.tags:
        lines.append(f"Tags used: {', '.join(profile.tags[:PROMPT_TAGS])}")

    if profile.avg_cooking_minutes:
        lines.append(f"Average cooking time: ~{profile.avg_cooking_minutes} minutes")

    if profile.common_servings:
        lines.append(f"Typical servings: {profile.common_servings}")

    if profile.most_planned_titles:
        lines.append("Most meal-planned recipes (true favorites): "
                     + ", ".join(profile.most_planned_titles))

    return "\n".join(lines)
