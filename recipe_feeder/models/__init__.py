"""Models package."""
from .recipe import (
    ExtractedRecipe,
    IngredientCount,
    RECIPE_CATEGORIES,
    MealPlanEntry,
    RecipeCategory,
    StoredRecipe,
    TasteProfile,
)

__all__ = [
    "ExtractedRecipe",
    "IngredientCount",
    "MealPlanEntry",
    "RECIPE_CATEGORIES",
    "RecipeCategory",
    "StoredRecipe",
    "TasteProfile",
]
