"""
Query Normalizer - validates and canonicalizes incoming query parameters.
"""
import logging
from typing import Optional, Union

from pagesearch.cleaner.parser import Parser
from pagesearch.config import Settings, get_settings
from pagesearch.errors import InvalidQuery
from pagesearch.models import SearchRequest

logger = logging.getLogger(__name__)

IntLike = Union[int, str, None]


def _to_int(name: str, value: IntLike) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidQuery(f"{name} must be an integer, got {value!r}")


def _bounded(name: str, value: IntLike, default: int, limit: int) -> int:
    """Positive integer, clamped to the configured upper bound."""
    number = _to_int(name, value)
    if number is None:
        number = default
    if number < 1:
        raise InvalidQuery(f"{name} must be a positive integer, got {number}")
    return min(number, limit)


def normalize_query(
    term: Optional[str],
    max_results: IntLike = None,
    page_size: IntLike = None,
    page: IntLike = 1,
    settings: Optional[Settings] = None,
) -> SearchRequest:
    """
    Build a validated SearchRequest from raw parameters.

    The term is NFKC-normalized with whitespace trimmed and collapsed; case
    is kept. max_results and page_size fall back to their configured defaults
    and are clamped to the configured limits. A page below 1 becomes 1.

    Raises:
        InvalidQuery: empty or overlong term, non-integer or non-positive bounds
    """
    settings = settings or get_settings()

    canonical = Parser.collapse(term or "")
    if not canonical:
        raise InvalidQuery("Query term must not be empty")
    if len(canonical) > settings.max_term_length:
        raise InvalidQuery(
            f"Query exceeded maximum length of {settings.max_term_length} characters"
        )

    max_results = _bounded("max", max_results, settings.default_max_results, settings.max_results_limit)
    page_size = _bounded("pageResults", page_size, settings.default_page_size, settings.page_size_limit)

    page_number = _to_int("page", page)
    if page_number is None or page_number < 1:
        page_number = 1

    request = SearchRequest(term=canonical, max_results=max_results, page_size=page_size, page=page_number)
    logger.debug("Normalized query %r -> %s", term, request)
    return request
