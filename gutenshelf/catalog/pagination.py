"""
Page indicator helpers for the paginated catalogue view.

``page_range()`` compresses the page numbers shown under a result list to
at most seven slots (six numbers plus ellipses), always keeping the first
and last page reachable. ``None`` stands for an ellipsis.
"""

from __future__ import annotations

import math
import urllib.parse
from typing import Dict, List, Optional

from .schemas import PageLink


MAX_FULL_PAGES = 6


def total_pages(count: int, page_size: int) -> int:
    if page_size < 1:
        raise ValueError("page_size must be >= 1")
    return max(1, math.ceil(max(0, count) / page_size))


def page_range(current_page: int, total: int) -> List[Optional[int]]:
    """Return the page numbers to display, with ``None`` for an ellipsis.

    >>> page_range(5, 10)
    [1, None, 4, 5, 6, None, 10]
    """
    if total < 1:
        raise ValueError("total_pages must be >= 1")
    if current_page < 1:
        raise ValueError("current_page must be >= 1")
    current = min(current_page, total)

    if total <= MAX_FULL_PAGES:
        return list(range(1, total + 1))
    if current <= 3:
        return [1, 2, 3, 4, None, total]
    if current >= total - 2:
        return [1, None] + list(range(total - 3, total + 1))
    return [1, None, current - 1, current, current + 1, None, total]


def state_query(params: Dict[str, Optional[str]], page: int = 1) -> str:
    """Build the query string that mirrors the current view state.

    Empty parameters and the default first page are left out so the URL
    stays short, e.g. ``?search=dickens&page=3``.
    """
    items = [(k, v) for k, v in params.items() if v]
    if page > 1:
        items.append(("page", str(page)))
    if not items:
        return ""
    return "?" + urllib.parse.urlencode(items)


def page_links(
    current_page: int, total: int, params: Optional[Dict[str, Optional[str]]] = None
) -> List[PageLink]:
    params = params or {}
    current = min(max(1, current_page), max(1, total))
    links: List[PageLink] = []
    for number in page_range(current, total):
        if number is None:
            links.append(PageLink(page=None, label="...", active=False, href=None))
        else:
            links.append(
                PageLink(
                    page=number,
                    label=str(number),
                    active=number == current,
                    href=state_query(params, number) or "?",
                )
            )
    return links


def cursor_page(url: Optional[str]) -> Optional[int]:
    """Extract the page number from a next/previous cursor URL.

    Gutendex drops the ``page`` parameter for the first page, so a cursor
    without one points at page 1.
    """
    if not url:
        return None
    query = urllib.parse.parse_qs(urllib.parse.urlparse(url).query)
    values = query.get("page")
    if not values:
        return 1
    try:
        return int(values[0])
    except ValueError:
        return None
