"""
Unit tests for contrib_graph.ingestion.paginator.

Tests verify:
- The result is the exact concatenation of all pages.
- Pagination stops at the first page shorter than page_size.
- An empty first page returns [] after one call.
- A None page (non-list payload) stops with what was accumulated.
- max_pages turns an endless full-page API into PaginationLimitError.
- Data ending on an exact multiple of page_size stays within max_pages.
"""

import pytest

from contrib_graph.errors import PaginationLimitError
from contrib_graph.ingestion.paginator import paginate


def make_fetcher(pages):
    """Return (fetch_page, calls) serving pages[0], pages[1], ... then []."""
    calls = []

    async def fetch_page(page):
        calls.append(page)
        if page - 1 < len(pages):
            return pages[page - 1]
        return []

    return fetch_page, calls


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "pages,page_size,expected_calls",
    [
        ([[1, 2, 3], [4, 5, 6], [7]], 3, 3),
        ([[1, 2], [3, 4], []], 2, 3),
        ([[1]], 5, 1),
        ([["a", "b", "c", "d"]], 4, 2),
    ],
)
async def test_concatenates_until_short_page(pages, page_size, expected_calls):
    """All pages are concatenated and the loop ends on the first short page."""
    fetch_page, calls = make_fetcher(pages)
    result = await paginate(fetch_page, page_size)

    expected = [item for page in pages[:expected_calls] for item in page]
    assert result == expected
    assert calls == list(range(1, expected_calls + 1))


@pytest.mark.asyncio
async def test_empty_first_page_returns_immediately():
    fetch_page, calls = make_fetcher([[]])
    assert await paginate(fetch_page, 100) == []
    assert calls == [1]


@pytest.mark.asyncio
async def test_none_page_stops_with_accumulated_items():
    """A non-list payload mid-way returns what earlier pages produced."""
    fetch_page, calls = make_fetcher([[1, 2], None, [5, 6]])
    assert await paginate(fetch_page, 2) == [1, 2]
    assert calls == [1, 2]


@pytest.mark.asyncio
async def test_none_first_page_returns_empty():
    fetch_page, _ = make_fetcher([None])
    assert await paginate(fetch_page, 2) == []


@pytest.mark.asyncio
async def test_max_pages_raises_when_pages_keep_coming():
    calls = []

    async def always_full(page):
        calls.append(page)
        return [page, page]

    with pytest.raises(PaginationLimitError) as exc_info:
        await paginate(always_full, 2, max_pages=3)

    assert calls == [1, 2, 3, 4]
    assert exc_info.value.max_pages == 3


@pytest.mark.asyncio
async def test_max_pages_not_hit_when_data_ends_in_time():
    fetch_page, _ = make_fetcher([[1, 2], [3]])
    assert await paginate(fetch_page, 2, max_pages=2) == [1, 2, 3]


@pytest.mark.asyncio
async def test_max_pages_exact_multiple_of_page_size_succeeds():
    """Data filling exactly max_pages full pages ends on an empty page, not an error."""
    fetch_page, calls = make_fetcher([[1, 2], [3, 4]])
    assert await paginate(fetch_page, 2, max_pages=2) == [1, 2, 3, 4]
    assert calls == [1, 2, 3]


@pytest.mark.asyncio
async def test_max_pages_none_after_last_full_page_succeeds():
    fetch_page, _ = make_fetcher([[1, 2], None])
    assert await paginate(fetch_page, 2, max_pages=1) == [1, 2]


@pytest.mark.asyncio
async def test_fetch_errors_propagate():
    async def boom(page):
        raise RuntimeError("network down")

    with pytest.raises(RuntimeError, match="network down"):
        await paginate(boom, 10)


@pytest.mark.asyncio
@pytest.mark.parametrize("page_size", [0, -1])
async def test_invalid_page_size(page_size):
    fetch_page, calls = make_fetcher([[1]])
    with pytest.raises(ValueError):
        await paginate(fetch_page, page_size)
    assert calls == []
