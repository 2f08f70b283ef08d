"""
Batch extraction with retry for transient upstream failures.

Used when importing a list of recipes at once, where an overloaded or
rate-limited model should not sink the whole import.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, TypeVar

from ..const import BATCH_BACKOFF_SECONDS, BATCH_MAX_RETRIES, RETRYABLE_ERROR_MARKERS
from ..exceptions import RecipeExtractionError
from ..models.recipe import ExtractedRecipe

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class BatchResult:
    """Outcome of one item in a batch."""

    source: Any
    recipe: ExtractedRecipe | None = None
    error: RecipeExtractionError | None = None

    @property
    def ok(self) -> bool:
        return self.recipe is not None


def _error_text(error: BaseException) -> str:
    """Collect the messages of an error and the errors that caused it."""
    messages = []
    current: BaseException | None = error
    while current is not None and len(messages) < 10:
        messages.append(str(current))
        current = current.__cause__ or current.__context__
    return " ".join(messages).lower()


def is_retryable(error: BaseException) -> bool:
    """Check whether an error looks transient (overload, rate limit, network)."""
    text = _error_text(error)
    return any(marker in text for marker in RETRYABLE_ERROR_MARKERS)


def with_retry(fn: Callable[[], T], label: str, retries: int = BATCH_MAX_RETRIES,
               sleep: Callable[[float], None] = time.sleep) -> T:
    """Call fn, retrying transient failures with a linear backoff.

    Args:
        fn: Zero-argument callable to run
        label: Name of the item, for logging
        retries: Retries after the first attempt
        sleep: Sleep function, replaceable in tests

    Returns:
        Whatever fn returns

    Raises:
        The last error when it is not transient or retries are exhausted
    """
    attempt = 0
    while True:
        try:
            return fn()
        except Exception as e:
            if attempt >= retries or not is_retryable(e):
                raise
            attempt += 1
            wait = BATCH_BACKOFF_SECONDS * attempt
            _LOGGER.warning("Retry %d/%d for %s in %ds: %s",
                            attempt, retries, label, wait, str(e)[:60])
            sleep(wait)


def extract_many(sources: Iterable[Any], extract: Callable[[Any], ExtractedRecipe],
                 retries: int = BATCH_MAX_RETRIES,
                 sleep: Callable[[float], None] = time.sleep) -> list[BatchResult]:
    """Extract recipes from several sources, one after another.

    Failures are recorded per item instead of aborting the batch.

    Args:
        sources: Inputs accepted by the extract callable
        extract: Extraction function, usually RecipeService.extract
        retries: Retries per item for transient failures
        sleep: Sleep function, replaceable in tests

    Returns:
        One BatchResult per source, in input order
    """
    results = []
    for source in sources:
        label = str(source)[:80]
        try:
            recipe = with_retry(lambda: extract(source), label, retries=retries, sleep=sleep)
        except RecipeExtractionError as e:
            _LOGGER.warning("Failed to extract %s: %s", label, e.message)
            results.append(BatchResult(source=source, error=e))
            continue
        _LOGGER.info("Extracted '%s' from %s", recipe.title, label)
        results.append(BatchResult(source=source, recipe=recipe))

    succeeded = sum(1 for result in results if result.ok)
    _LOGGER.info("Batch finished: %d of %d recipes extracted", succeeded, len(results))
    return results
