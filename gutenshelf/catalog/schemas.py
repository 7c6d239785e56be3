"""
Pydantic schema definitions for the catalog module.

``Book`` and ``BookPage`` hold the subset of the Gutendex payload that the
catalogue uses; unknown fields are ignored. ``BookCard`` and
``BookDetail`` are what the front-end renders, and ``PaginatedBooks``
bundles cards with the pagination controls for one result page.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class Person(BaseModel):
    name: str
    birth_year: Optional[int] = None
    death_year: Optional[int] = None


class Book(BaseModel):
    """A single Gutendex book record."""

    id: int
    title: str = ""
    authors: List[Person] = Field(default_factory=list)
    translators: List[Person] = Field(default_factory=list)
    subjects: List[str] = Field(default_factory=list)
    bookshelves: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)
    copyright: Optional[bool] = None
    media_type: str = ""
    # MIME type -> URL; covers live under ``image/jpeg``
    formats: Dict[str, str] = Field(default_factory=dict)
    download_count: int = 0


class BookPage(BaseModel):
    """One page of a Gutendex listing.

    ``next`` and ``previous`` are the cursor URLs returned by the API.
    """

    count: int = 0
    next: Optional[str] = None
    previous: Optional[str] = None
    results: List[Book] = Field(default_factory=list)


class BookCard(BaseModel):
    id: int
    title: str
    author: str
    genre: str
    cover_url: str
    wishlisted: bool = False


class BookDetail(BaseModel):
    id: int
    title: str
    authors: str
    subjects: List[str] = Field(default_factory=list)
    bookshelves: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)
    download_count: int = 0
    cover_url: str
    formats: Dict[str, str] = Field(default_factory=dict)
    wishlisted: bool = False


class PageLink(BaseModel):
    """A pagination control. ``page`` is ``None`` for an ellipsis."""

    page: Optional[int] = None
    label: str
    active: bool = False
    href: Optional[str] = None


class PaginatedBooks(BaseModel):
    """A wrapper for paginated results returned from ``/books`` endpoint."""

    count: int
    page: int
    page_size: int
    total_pages: int
    next_page: Optional[int] = None
    previous_page: Optional[int] = None
    pages: List[PageLink] = Field(default_factory=list)
    items: List[BookCard] = Field(default_factory=list)


class WishlistAdd(BaseModel):
    book_id: int = Field(..., ge=1)


class WishlistIds(BaseModel):
    ids: List[int] = Field(default_factory=list)


class LiveSearchQuery(BaseModel):
    search: str = ""
    topic: str = ""
