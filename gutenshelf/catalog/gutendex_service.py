"""
Gutendex integration for the catalogue. Gutendex serves Project
Gutenberg metadata as JSON without authentication. This module exposes:

* ``search_books()``: one page of books matching a free-text search
  and optional topic (genre), language and sort filters.

* ``get_book()``: a single book by its numeric Gutenberg ID.

* ``get_books_by_ids()``: the books behind a list of IDs, used to
  render the wishlist.

Results are cached in memory per query and per book. Network, HTTP and
decoding failures are logged and raised as ``GutendexError`` so that the
router can answer with an error placeholder instead of an empty page.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError

from ..config import get_settings
from .pagination import total_pages
from .schemas import Book, BookPage


logger = logging.getLogger(__name__)

SORT_OPTIONS = ("popular", "ascending", "descending")


class GutendexError(Exception):
    """Raised when Gutendex cannot be reached or answers garbage."""


def _http_get_json(url: str) -> Optional[dict]:
    """Perform an HTTP GET and return the parsed JSON body.

    ``None`` is returned for a 404 so callers can report "not found";
    any other failure raises ``GutendexError``.
    """
    settings = get_settings()
    request = urllib.request.Request(
        url,
        headers={
            'User-Agent': 'gutenshelf/1.0 (+https://gutendex.com)',
            'Accept': 'application/json',
        },
    )
    try:
        with urllib.request.urlopen(request, timeout=settings.request_timeout) as response:
            data = response.read().decode('utf-8', errors='ignore')
    except urllib.error.HTTPError as exc:
        if exc.code == 404:
            logger.info("Gutendex returned 404 for %s", url)
            return None
        logger.error("Gutendex request to %s returned status %s", url, exc.code)
        raise GutendexError(f"Gutendex returned status {exc.code}") from exc
    except (urllib.error.URLError, OSError) as exc:
        logger.error("Error fetching %s: %s", url, exc)
        raise GutendexError(str(exc)) from exc
    try:
        return json.loads(data)
    except json.JSONDecodeError as exc:
        logger.error("Invalid JSON from %s: %s", url, exc)
        raise GutendexError("Invalid JSON from Gutendex") from exc


# Caches for listing queries and single books
_search_cache: Dict[str, BookPage] = {}
_book_cache: Dict[int, Book] = {}


def clear_caches() -> None:
    _search_cache.clear()
    _book_cache.clear()


def _books_url(params: Dict[str, str]) -> str:
    base = get_settings().gutendex_base_url.rstrip('/')
    if not params:
        return f"{base}/books/"
    return f"{base}/books/?{urllib.parse.urlencode(params)}"


def _parse_page(data: Optional[dict], url: str) -> BookPage:
    if not data or not isinstance(data, dict):
        return BookPage()
    try:
        return BookPage.model_validate(data)
    except ValidationError as exc:
        logger.error("Unexpected listing payload from %s: %s", url, exc)
        raise GutendexError("Unexpected response from Gutendex") from exc


def search_books(
    search: Optional[str] = None,
    topic: Optional[str] = None,
    languages: Optional[str] = None,
    sort: Optional[str] = None,
    page: int = 1,
    ids: Optional[Iterable[int]] = None,
) -> BookPage:
    """Fetch one page of books from Gutendex.

    Empty filters are omitted from the request. ``languages`` is a
    comma-separated list of two-letter codes; ``sort`` is one of
    ``SORT_OPTIONS``.
    """
    if sort and sort not in SORT_OPTIONS:
        raise ValueError(f"Unknown sort option: {sort!r}")
    params: Dict[str, str] = {}
    if search and search.strip():
        params['search'] = search.strip()
    if topic and topic.strip():
        params['topic'] = topic.strip()
    if languages and languages.strip():
        params['languages'] = languages.strip()
    if sort:
        params['sort'] = sort
    if ids is not None:
        ids = [int(i) for i in ids]
        params['ids'] = ",".join(str(i) for i in ids)
    page = max(1, int(page))
    if page > 1:
        params['page'] = str(page)

    url = _books_url(params)
    if url in _search_cache:
        return _search_cache[url]
    logger.info("Fetching %s", url)
    data = _http_get_json(url)
    if data is None and page > 1:
        # Gutendex answers 404 "Invalid page." past the last page
        first = search_books(search, topic, languages, sort, 1, ids)
        last = total_pages(first.count, get_settings().page_size)
        if last >= page:
            return BookPage(count=first.count)
        logger.info("Page %s is past the last page %s, using the last page", page, last)
        return search_books(search, topic, languages, sort, last, ids)
    result = _parse_page(data, url)
    _search_cache[url] = result
    for book in result.results:
        _book_cache.setdefault(book.id, book)
    return result


def get_book(book_id: int) -> Optional[Book]:
    """Return metadata for one book, or ``None`` if Gutendex has no such ID."""
    if book_id in _book_cache:
        return _book_cache[book_id]
    base = get_settings().gutendex_base_url.rstrip('/')
    url = f"{base}/books/{int(book_id)}/"
    data = _http_get_json(url)
    if not data:
        return None
    try:
        book = Book.model_validate(data)
    except ValidationError as exc:
        logger.error("Unexpected book payload from %s: %s", url, exc)
        raise GutendexError("Unexpected response from Gutendex") from exc
    _book_cache[book.id] = book
    return book


def get_books_by_ids(ids: List[int]) -> List[Book]:
    """Return the books for ``ids`` in the order given.

    IDs unknown to Gutendex are skipped. IDs are requested in chunks of
    one result page each.
    """
    if not ids:
        return []
    size = get_settings().page_size
    by_id: Dict[int, Book] = {}
    for start in range(0, len(ids), size):
        page = search_books(ids=ids[start:start + size])
        by_id.update((b.id, b) for b in page.results)
    return [by_id[i] for i in ids if i in by_id]
