"""
Recipe Feeder - Extract recipes from websites, videos, documents and text

Runs the extraction pipeline on a single source and saves the resulting
recipe as JSON.
"""
from __future__ import annotations

import argparse
import json
import logging
import mimetypes
import sys
from pathlib import Path

from dotenv import load_dotenv

from .config import ExtractorConfig
from .const import AVAILABLE_MODELS, DOCUMENT_TYPES
from .exceptions import RecipeExtractionError
from .models.recipe import ExtractedRecipe
from .normalizer import scale_ingredients
from .services.recipe_service import RecipeService, is_bare_url

_LOGGER = logging.getLogger(__name__)

STDIN_SOURCE = "-"


def safe_filename(title: str) -> str:
    """Turn a recipe title into a file name stem."""
    safe_title = "".join(c for c in title if c.isalnum() or c in (' ', '-', '_')).rstrip()
    safe_title = safe_title.replace(' ', '_').lower()
    return safe_title or "recipe"


def _looks_like_document(source: str) -> bool:
    path = Path(source)
    if not path.is_file():
        return False
    content_type, _ = mimetypes.guess_type(path.name)
    return content_type in DOCUMENT_TYPES


def resolve_source(source: str):
    """Map a command-line SOURCE argument onto a pipeline input.

    Returns a URL string, a document Path, or the text read from stdin.
    """
    if source == STDIN_SOURCE:
        return sys.stdin.read()
    if is_bare_url(source):
        return source
    if _looks_like_document(source):
        return Path(source).resolve()
    path = Path(source)
    if path.is_file():
        return path.read_text(encoding='utf-8')
    return source


def save_recipe(recipe: ExtractedRecipe, output_dir: Path) -> Path:
    """Write the recipe as JSON and return the file path."""
    output_dir.mkdir(parents=True, exist_ok=True)
    json_file = output_dir / f"{safe_filename(recipe.title)}.json"
    _LOGGER.info("Saving structured recipe to: %s", json_file)
    with open(json_file, 'w', encoding='utf-8') as f:
        json.dump(recipe.model_dump(), f, indent=2, ensure_ascii=False)
    return json_file


def run(source: str, output_dir: Path, config: ExtractorConfig,
        servings: int | None = None, service: RecipeService | None = None) -> bool:
    """Extract a recipe from a source and save the results.

    Args:
        source: URL, document path, text file path or '-' for stdin
        output_dir: Directory to save the output file
        config: Pipeline configuration
        servings: Rescale ingredients to this many servings
        service: Extraction service, created from config when omitted

    Returns:
        True if successful, False otherwise
    """
    service = service or RecipeService(config)
    try:
        recipe = service.extract(resolve_source(source))
    except RecipeExtractionError as e:
        _LOGGER.error("Error extracting recipe: %s", e.message, exc_info=True)
        print(f"\n❌ {e.message}", file=sys.stderr)
        return False

    if servings:
        if recipe.servings:
            recipe = recipe.model_copy(update={
                "ingredients": scale_ingredients(recipe.ingredients, recipe.servings, servings),
                "servings": servings,
            })
        else:
            _LOGGER.warning("Recipe has no servings count, ingredients left unscaled")

    json_file = save_recipe(recipe, output_dir)

    print(f"\n✅ Recipe successfully extracted!")
    print(f"📝 Title: {recipe.title}")
    print(f"🥘 Ingredients: {len(recipe.ingredients)}")
    print(f"👣 Steps: {len(recipe.instructions)}")
    if recipe.servings:
        print(f"🍽  Servings: {recipe.servings}")
    print(f"\n📄 Output file: {json_file}")
    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="recipe-feeder",
        description="Extract recipes from websites, videos, documents and text into JSON"
    )
    parser.add_argument(
        "source",
        type=str,
        help="Recipe URL, PDF/image path, text file path, or '-' to read text from stdin"
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("output"),
        help="Directory to save output files (default: ./output)"
    )
    parser.add_argument(
        "--api-key",
        help="API key for the language model (can also be set via GEMINI_API_KEY env var)"
    )
    parser.add_argument(
        "--model",
        choices=AVAILABLE_MODELS,
        help="Model to use for extraction (default: GEMINI_MODEL env var or gemini-2.5-flash)"
    )
    parser.add_argument(
        "--servings",
        type=int,
        help="Scale ingredient quantities to this many servings"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the recipe feeder."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Load environment variables
    load_dotenv()

    config = ExtractorConfig.from_env(ai_api_key=args.api_key, ai_model=args.model)
    success = run(
        source=args.source,
        output_dir=args.output_dir,
        config=config,
        servings=args.servings,
    )
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
