"""
contrib_graph/ingestion/paginator.py - Page-until-short-page loop.

Both GitHub list endpoints signal end-of-data the same way: a page with fewer
than per_page items. paginate() requests page 1, 2, ... and stops at the first
short page (an empty page included).

There is no page ceiling by default. An API that keeps returning exactly
page_size items makes the loop run forever; config.max_pages turns that into
a PaginationLimitError for callers that prefer a bounded failure. The ceiling
only trips when page max_pages + 1 is non-empty, so data that ends on an exact
multiple of page_size still succeeds.
"""

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from contrib_graph.errors import PaginationLimitError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# A page fetcher returns the items on one page, or None when the endpoint
# answered with something other than a list.
PageFetcher = Callable[[int], Awaitable[Optional[list[T]]]]


async def paginate(
    fetch_page: PageFetcher,
    page_size: int,
    *,
    max_pages: Optional[int] = None,
) -> list[T]:
    """
    Accumulate every page returned by *fetch_page*.

    Args:
        fetch_page: Async callable taking a 1-based page number.
        page_size:  per_page sent to the API; a page shorter than this is last.
        max_pages:  Optional ceiling. None means unbounded.

    Returns:
        Concatenation of all pages in page order. When fetch_page returns None
        the items accumulated so far are returned.

    Raises:
        ValueError:           If page_size < 1 or max_pages < 1.
        PaginationLimitError: If max_pages full pages were read and page
                              max_pages + 1 still has items.
        Whatever fetch_page raises, unchanged.
    """
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    if max_pages is not None and max_pages < 1:
        raise ValueError(f"max_pages must be >= 1, got {max_pages}")

    items: list[T] = []
    page = 1
    while True:
        data = await fetch_page(page)
        if data is None:
            logger.debug("Page %d was not a list; stopping with %d items.", page, len(items))
            return items

        # Page max_pages + 1 is only read to tell "data ended" from "more remain".
        if max_pages is not None and page > max_pages:
            if data:
                raise PaginationLimitError(max_pages)
            return items

        items.extend(data)
        if len(data) < page_size:
            return items
        page += 1
