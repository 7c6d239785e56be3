"""Turn Gutendex records into the card and detail views the front-end shows."""

from __future__ import annotations

from typing import Container, List

from ..config import get_settings
from .schemas import Book, BookCard, BookDetail


UNKNOWN_AUTHOR = "Unknown Author"
UNKNOWN_GENRE = "Unknown Genre"


def cover_url(book: Book) -> str:
    return book.formats.get("image/jpeg") or get_settings().default_cover


def to_card(book: Book, wishlisted: bool = False) -> BookCard:
    return BookCard(
        id=book.id,
        title=book.title,
        author=book.authors[0].name if book.authors else UNKNOWN_AUTHOR,
        genre=book.subjects[0] if book.subjects else UNKNOWN_GENRE,
        cover_url=cover_url(book),
        wishlisted=wishlisted,
    )


def to_cards(books: List[Book], wishlist_ids: Container[int] = ()) -> List[BookCard]:
    return [to_card(b, b.id in wishlist_ids) for b in books]


def to_detail(book: Book, wishlisted: bool = False) -> BookDetail:
    return BookDetail(
        id=book.id,
        title=book.title,
        authors=", ".join(a.name for a in book.authors) or UNKNOWN_AUTHOR,
        subjects=list(book.subjects),
        bookshelves=list(book.bookshelves),
        languages=list(book.languages),
        download_count=book.download_count,
        cover_url=cover_url(book),
        formats=dict(book.formats),
        wishlisted=wishlisted,
    )
