"""
Pager - slices a ranked document sequence into pages.
"""
from typing import List, Sequence, TypeVar

T = TypeVar("T")


def paginate(documents: Sequence[T], page: int, page_size: int) -> List[T]:
    """
    Return the documents on ``page`` (1-based).

    The slice is [(page-1)*page_size, min(page*page_size, len)). Asking for a
    page past the end yields an empty list, not an error.
    """
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")

    start = (page - 1) * page_size
    if start >= len(documents):
        return []
    return list(documents[start:min(page * page_size, len(documents))])


def total_pages(total: int, page_size: int) -> int:
    """Number of pages needed for ``total`` documents."""
    if total <= 0:
        return 0
    return (total + page_size - 1) // page_size


def page_numbers(current: int, pages: int, window: int = 10) -> List[int]:
    """
    Page numbers to offer around ``current``.

    Near the start the window is 1..window; further on the current page is
    preceded by ``window // 2 - 1`` pages (1..10 until page 6, then
    current-4..current+5 with the default window). Numbers past ``pages``
    are dropped.
    """
    if pages <= 0:
        return []
    lead = max(window // 2 - 1, 0)
    if current <= lead + 1:
        first = 1
    else:
        first = current - lead
    last = min(first + window - 1, pages)
    return list(range(first, last + 1))
