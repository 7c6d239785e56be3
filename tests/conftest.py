import urllib.parse

import pytest

from gutenshelf.catalog import gutendex_service
from gutenshelf.config import get_settings


def make_book(book_id, title="A Book", authors=("Jane Doe",), subjects=("Fiction",), cover=True):
    formats = {"text/html": f"https://www.gutenberg.org/ebooks/{book_id}.html.images"}
    if cover:
        formats["image/jpeg"] = f"https://www.gutenberg.org/cache/epub/{book_id}/pg{book_id}.cover.medium.jpg"
    return {
        "id": book_id,
        "title": title,
        "authors": [{"name": a, "birth_year": 1800, "death_year": 1870} for a in authors],
        "translators": [],
        "subjects": list(subjects),
        "bookshelves": ["Best Books Ever Listings"],
        "languages": ["en"],
        "copyright": False,
        "media_type": "Text",
        "formats": formats,
        "download_count": 1000 + book_id,
    }


def make_listing(books, count=None, next_url=None, previous_url=None):
    return {
        "count": len(books) if count is None else count,
        "next": next_url,
        "previous": previous_url,
        "results": books,
    }


class FakeGutendex:
    """Stands in for ``_http_get_json`` and records requested URLs."""

    def __init__(self):
        self.urls = []
        self.books = {}
        self.listing = None
        self.error = None

    def params(self, index=-1):
        query = urllib.parse.urlparse(self.urls[index]).query
        return dict(urllib.parse.parse_qsl(query))

    def __call__(self, url):
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        parts = urllib.parse.urlparse(url).path.strip("/").split("/")
        if len(parts) == 2:
            return self.books.get(int(parts[1]))
        if self.listing is not None:
            return self.listing(self.params()) if callable(self.listing) else self.listing
        ids = self.params().get("ids")
        if ids:
            found = [self.books[int(i)] for i in ids.split(",") if int(i) in self.books]
            return make_listing(found)
        return make_listing(list(self.books.values()))


@pytest.fixture(autouse=True)
def settings_env(tmp_path, monkeypatch):
    monkeypatch.setenv("GUTENSHELF_STORAGE_FILE", str(tmp_path / "local_storage.json"))
    monkeypatch.setenv("GUTENSHELF_SEARCH_DEBOUNCE_MS", "200")
    monkeypatch.setenv("GUTENSHELF_GUTENDEX_BASE_URL", "https://gutendex.test")
    get_settings.cache_clear()
    gutendex_service.clear_caches()
    yield get_settings()
    get_settings.cache_clear()
    gutendex_service.clear_caches()


@pytest.fixture
def gutendex(monkeypatch):
    fake = FakeGutendex()
    monkeypatch.setattr(gutendex_service, "_http_get_json", fake)
    return fake


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    from gutenshelf.main import app

    with TestClient(app) as c:
        yield c
