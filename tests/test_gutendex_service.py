import io
import json
import urllib.error

import pytest

from gutenshelf.catalog import gutendex_service
from gutenshelf.catalog.gutendex_service import GutendexError

from conftest import make_book, make_listing


def test_search_builds_query_and_skips_empty_filters(gutendex):
    gutendex.books = {84: make_book(84, "Frankenstein")}
    page = gutendex_service.search_books(search="  frankenstein ", topic="", page=1)

    assert gutendex.urls == ["https://gutendex.test/books/?search=frankenstein"]
    assert page.count == 1
    assert page.results[0].title == "Frankenstein"


def test_search_passes_all_filters(gutendex):
    gutendex.listing = make_listing([])
    gutendex_service.search_books(
        search="dickens", topic="children", languages="en,fr", sort="popular", page=3
    )
    assert gutendex.params() == {
        "search": "dickens",
        "topic": "children",
        "languages": "en,fr",
        "sort": "popular",
        "page": "3",
    }


def test_search_rejects_unknown_sort(gutendex):
    with pytest.raises(ValueError):
        gutendex_service.search_books(sort="rating")
    assert gutendex.urls == []


def test_search_results_are_cached(gutendex):
    gutendex.books = {1: make_book(1)}
    gutendex_service.search_books(topic="poetry")
    gutendex_service.search_books(topic="poetry")
    assert len(gutendex.urls) == 1

    gutendex_service.clear_caches()
    gutendex_service.search_books(topic="poetry")
    assert len(gutendex.urls) == 2


def test_search_empty_body_gives_empty_page(gutendex):
    gutendex.listing = {}
    page = gutendex_service.search_books(search="nothing")
    assert page.count == 0
    assert page.results == []


def test_search_unexpected_payload_raises(gutendex):
    gutendex.listing = {"count": "many", "results": "nope"}
    with pytest.raises(GutendexError):
        gutendex_service.search_books(search="x")


def test_get_book_and_cache(gutendex):
    gutendex.books = {1342: make_book(1342, "Pride and Prejudice", ["Austen, Jane"])}
    book = gutendex_service.get_book(1342)
    assert book.title == "Pride and Prejudice"
    assert book.authors[0].name == "Austen, Jane"
    assert gutendex.urls == ["https://gutendex.test/books/1342/"]

    gutendex_service.get_book(1342)
    assert len(gutendex.urls) == 1


def test_get_book_missing_returns_none(gutendex):
    assert gutendex_service.get_book(999999) is None


def test_search_results_prime_book_cache(gutendex):
    gutendex.books = {5: make_book(5)}
    gutendex_service.search_books()
    gutendex_service.get_book(5)
    assert len(gutendex.urls) == 1


def test_get_books_by_ids_keeps_wishlist_order(gutendex):
    gutendex.books = {1: make_book(1), 2: make_book(2), 3: make_book(3)}
    books = gutendex_service.get_books_by_ids([3, 404, 1])
    assert [b.id for b in books] == [3, 1]
    assert gutendex.params()["ids"] == "3,404,1"


def test_get_books_by_ids_chunks_by_page_size(gutendex):
    ids = list(range(1, 41))
    gutendex.books = {i: make_book(i) for i in ids}
    books = gutendex_service.get_books_by_ids(ids)
    assert [b.id for b in books] == ids
    assert len(gutendex.urls) == 2
    assert gutendex.params(1)["ids"] == ",".join(str(i) for i in range(33, 41))


def test_get_books_by_ids_empty_makes_no_request(gutendex):
    assert gutendex_service.get_books_by_ids([]) == []
    assert gutendex.urls == []


class _Response(io.BytesIO):
    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def test_http_get_json_parses_body(monkeypatch):
    body = json.dumps(make_listing([make_book(1)])).encode("utf-8")
    seen = {}

    def fake_urlopen(request, timeout):
        seen["url"] = request.full_url
        seen["timeout"] = timeout
        return _Response(body)

    monkeypatch.setattr(gutendex_service.urllib.request, "urlopen", fake_urlopen)
    data = gutendex_service._http_get_json("https://gutendex.test/books")
    assert data["count"] == 1
    assert seen == {"url": "https://gutendex.test/books", "timeout": 10.0}


def test_http_get_json_404_is_none(monkeypatch):
    def fake_urlopen(request, timeout):
        raise urllib.error.HTTPError(request.full_url, 404, "Not Found", None, None)

    monkeypatch.setattr(gutendex_service.urllib.request, "urlopen", fake_urlopen)
    assert gutendex_service._http_get_json("https://gutendex.test/books/0") is None


@pytest.mark.parametrize(
    "error",
    [
        urllib.error.HTTPError("https://gutendex.test/books", 500, "Server Error", None, None),
        urllib.error.URLError("connection refused"),
        TimeoutError("timed out"),
    ],
)
def test_http_get_json_failures_raise(monkeypatch, error):
    def fake_urlopen(request, timeout):
        raise error

    monkeypatch.setattr(gutendex_service.urllib.request, "urlopen", fake_urlopen)
    with pytest.raises(GutendexError):
        gutendex_service._http_get_json("https://gutendex.test/books")


def test_http_get_json_invalid_json_raises(monkeypatch):
    monkeypatch.setattr(
        gutendex_service.urllib.request,
        "urlopen",
        lambda request, timeout: _Response(b"<html>oops</html>"),
    )
    with pytest.raises(GutendexError):
        gutendex_service._http_get_json("https://gutendex.test/books")


def test_page_past_the_end_falls_back_to_last_page(gutendex):
    def listing(params):
        page = int(params.get("page", 1))
        return None if page > 2 else make_listing([make_book(page)], count=40)

    gutendex.listing = listing
    page = gutendex_service.search_books(topic="sea", page=7)
    assert page.count == 40
    assert [b.id for b in page.results] == [2]

    # the 404 itself is not cached, so a later request asks again
    gutendex_service.search_books(topic="sea", page=7)
    assert [gutendex.params(i).get("page") for i in range(len(gutendex.urls))] == ["7", None, "2", "7"]
