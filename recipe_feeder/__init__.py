"""Recipe Feeder: turn URLs, videos, documents and pasted text into recipes."""
from .exceptions import RecipeExtractionError
from .models.recipe import ExtractedRecipe
from .services.recipe_service import (
    RecipeService,
    extract,
    extract_from_documents,
    extract_recipe,
    extract_recipe_from_video,
    format_recipe_text,
    parse_recipe_text,
)

__version__ = "0.1.0"

__all__ = [
    "ExtractedRecipe",
    "RecipeExtractionError",
    "RecipeService",
    "extract",
    "extract_from_documents",
    "extract_recipe",
    "extract_recipe_from_video",
    "format_recipe_text",
    "parse_recipe_text",
]
