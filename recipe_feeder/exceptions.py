"""
Extraction errors.

Every error carries a short, user-facing message and an HTTP-style status
code so that API routes can map it to a response without inspecting it.
"""
from __future__ import annotations


class RecipeExtractionError(Exception):
    """Base class for all failures surfaced by the extraction pipeline."""

    status_code = 500
    default_message = "Failed to extract recipe"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidSourceError(RecipeExtractionError):
    """The submitted URL, document or text cannot be processed at all."""

    status_code = 400
    default_message = "Invalid recipe source"


class FetchFailedError(RecipeExtractionError):
    """Every content acquisition strategy was exhausted."""

    status_code = 502
    default_message = (
        "We couldn't load that page. The site may be blocking automated "
        "access. Try again later or enter the recipe manually."
    )


class RecipeNotFoundError(RecipeExtractionError):
    """The source was read but contained no recognizable recipe."""

    status_code = 422
    default_message = (
        "Couldn't find a recipe on that page. Try entering it manually."
    )


class TranscriptUnavailableError(RecipeNotFoundError):
    """A video has neither a usable transcript nor a usable description."""

    default_message = (
        "No transcript or description available for this video. "
        "The recipe could not be extracted."
    )


class ConfigurationError(RecipeExtractionError):
    """A required credential is missing."""

    status_code = 500
    default_message = "Recipe extraction is not configured. Missing API key."


class AIServiceError(RecipeExtractionError):
    """The hosted model could not be reached or returned nothing."""

    status_code = 502
    default_message = "AI service is unavailable. Please try again."


class AIResponseError(RecipeExtractionError):
    """The model answered, but not with the JSON shape that was asked for."""

    status_code = 422
    default_message = "Failed to parse AI response."


class EmptyRecipeError(RecipeExtractionError):
    """The model answered with a recipe that has no ingredients or steps."""

    status_code = 422
    default_message = "Could not find recipe content. Try a clearer source."


class NotARecipeError(EmptyRecipeError):
    """The model reported that the content is not a recipe."""

    default_message = (
        "This doesn't appear to contain a recipe. Try a cooking source instead."
    )
