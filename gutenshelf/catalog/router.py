"""
Route definitions for the catalogue API.

Endpoints under /api/catalog:
- GET    /books                       : search/filter books, one page of cards
- GET    /books/{book_id}             : detail view of one book
- GET    /wishlist                    : wishlisted book IDs
- GET    /wishlist/books              : cards for the wishlisted books
- POST   /wishlist                    : add a book ID
- POST   /wishlist/{book_id}/toggle   : add or remove a book ID
- DELETE /wishlist/{book_id}          : remove a book ID
- DELETE /wishlist                    : clear the wishlist
- WS     /live-search                 : debounced search-as-you-type
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError
from typing_extensions import Literal

from ..config import get_settings
from ..debounce import Debouncer
from ..storage import LocalStorage
from . import gutendex_service
from .cards import to_cards, to_detail
from .gutendex_service import GutendexError
from .pagination import cursor_page, page_links, total_pages
from .schemas import (
    BookCard,
    BookDetail,
    LiveSearchQuery,
    PaginatedBooks,
    WishlistAdd,
    WishlistIds,
)
from .wishlist import Wishlist


logger = logging.getLogger(__name__)

BOOKS_ERROR = "Failed to load books. Please try again later."
DETAILS_ERROR = "Failed to load book details. Please try again later."
WISHLIST_ERROR = "Failed to load wishlist. Please try again later."

SortField = Literal["popular", "ascending", "descending"]

router = APIRouter(prefix="/api/catalog", tags=["catalog"])


def get_wishlist() -> Wishlist:
    settings = get_settings()
    return Wishlist(LocalStorage(settings.storage_file), key=settings.wishlist_key)


def build_page(
    search: Optional[str],
    topic: Optional[str],
    languages: Optional[str],
    sort: Optional[str],
    page: int,
    wishlist: Wishlist,
) -> PaginatedBooks:
    """Fetch one Gutendex page and wrap it with pagination controls."""
    settings = get_settings()
    result = gutendex_service.search_books(
        search=search, topic=topic, languages=languages, sort=sort, page=page
    )
    pages = total_pages(result.count, settings.page_size)
    current = min(page, pages)
    params: Dict[str, Optional[str]] = {
        "search": search,
        "topic": topic,
        "languages": languages,
        "sort": sort,
    }
    return PaginatedBooks(
        count=result.count,
        page=current,
        page_size=settings.page_size,
        total_pages=pages,
        next_page=cursor_page(result.next),
        previous_page=cursor_page(result.previous),
        pages=page_links(current, pages, params),
        items=to_cards(result.results, set(wishlist.ids())),
    )


@router.get("/books", response_model=PaginatedBooks)
def list_books(
    search: Optional[str] = Query(default=None, description="Search titles and authors"),
    topic: Optional[str] = Query(default=None, description="Filter by genre/subject"),
    languages: Optional[str] = Query(default=None, description="Comma-separated language codes"),
    sort: Optional[SortField] = Query(default=None, description="Sort order"),
    page: int = Query(default=1, ge=1, description="Current page (1-indexed)"),
    wishlist: Wishlist = Depends(get_wishlist),
) -> PaginatedBooks:
    try:
        return build_page(search, topic, languages, sort, page, wishlist)
    except GutendexError:
        raise HTTPException(status_code=502, detail=BOOKS_ERROR)


@router.get("/books/{book_id}", response_model=BookDetail)
def get_book(book_id: int, wishlist: Wishlist = Depends(get_wishlist)) -> BookDetail:
    try:
        book = gutendex_service.get_book(book_id)
    except GutendexError:
        raise HTTPException(status_code=502, detail=DETAILS_ERROR)
    if book is None:
        raise HTTPException(status_code=404, detail="Book not found")
    return to_detail(book, wishlist.contains(book.id))


@router.get("/wishlist", response_model=WishlistIds)
def list_wishlist(wishlist: Wishlist = Depends(get_wishlist)) -> WishlistIds:
    return WishlistIds(ids=wishlist.ids())


@router.get("/wishlist/books", response_model=List[BookCard])
def list_wishlist_books(wishlist: Wishlist = Depends(get_wishlist)) -> List[BookCard]:
    ids = wishlist.ids()
    if not ids:
        return []
    try:
        books = gutendex_service.get_books_by_ids(ids)
    except GutendexError:
        raise HTTPException(status_code=502, detail=WISHLIST_ERROR)
    return to_cards(books, set(ids))


@router.post("/wishlist", response_model=WishlistIds)
def add_to_wishlist(req: WishlistAdd, wishlist: Wishlist = Depends(get_wishlist)) -> WishlistIds:
    wishlist.add(req.book_id)
    return WishlistIds(ids=wishlist.ids())


@router.post("/wishlist/{book_id}/toggle", response_model=WishlistIds)
def toggle_wishlist(book_id: int, wishlist: Wishlist = Depends(get_wishlist)) -> WishlistIds:
    try:
        wishlist.toggle(book_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return WishlistIds(ids=wishlist.ids())


@router.delete("/wishlist/{book_id}", response_model=WishlistIds)
def remove_from_wishlist(book_id: int, wishlist: Wishlist = Depends(get_wishlist)) -> WishlistIds:
    try:
        wishlist.remove(book_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return WishlistIds(ids=wishlist.ids())


@router.delete("/wishlist", response_model=WishlistIds)
def clear_wishlist(wishlist: Wishlist = Depends(get_wishlist)) -> WishlistIds:
    wishlist.clear()
    return WishlistIds(ids=[])


@router.websocket("/live-search")
async def live_search(websocket: WebSocket, wishlist: Wishlist = Depends(get_wishlist)):
    """Push the first result page for the latest query once typing pauses.

    Every message is a JSON object ``{"search": ..., "topic": ...}``.
    Queries arriving within the debounce window replace each other, so
    only the last one reaches Gutendex.
    """
    await websocket.accept()

    async def push_results(query: LiveSearchQuery) -> None:
        try:
            result = await run_in_threadpool(
                build_page, query.search, query.topic, None, None, 1, wishlist
            )
        except GutendexError:
            await websocket.send_json({"error": BOOKS_ERROR})
            return
        await websocket.send_json(result.model_dump(mode="json"))

    debounced = Debouncer(push_results, get_settings().search_debounce_ms)
    try:
        while True:
            message = await websocket.receive_text()
            try:
                query = LiveSearchQuery.model_validate_json(message)
            except ValidationError:
                await websocket.send_json({"error": "Invalid search message"})
                continue
            debounced(query)
    except WebSocketDisconnect:
        logger.debug("Live search client disconnected")
    finally:
        debounced.cancel()
