"""
Wishlist of liked books.

The wishlist is a flat list of numeric Gutendex book IDs kept under a
single key in :class:`~gutenshelf.storage.LocalStorage`, serialized as a
JSON array. Insertion order is preserved and IDs never repeat.
"""

from __future__ import annotations

import json
import logging
from typing import List

from ..storage import LocalStorage


logger = logging.getLogger(__name__)


def _check_id(book_id: int) -> int:
    if isinstance(book_id, bool) or not isinstance(book_id, int) or book_id < 1:
        raise ValueError(f"Invalid book id: {book_id!r}")
    return book_id


class Wishlist:
    def __init__(self, storage: LocalStorage, key: str = "wishlist") -> None:
        self.storage = storage
        self.key = key

    def ids(self) -> List[int]:
        """Return the stored IDs; malformed data reads as an empty list."""
        raw = self.storage.get_item(self.key)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Wishlist under %r is not valid JSON, ignoring it", self.key)
            return []
        if not isinstance(data, list):
            logger.warning("Wishlist under %r is not a list, ignoring it", self.key)
            return []
        ids: List[int] = []
        for value in data:
            if isinstance(value, int) and not isinstance(value, bool) and value not in ids:
                ids.append(value)
        return ids

    def _save(self, ids: List[int]) -> None:
        self.storage.set_item(self.key, json.dumps(ids))

    def contains(self, book_id: int) -> bool:
        return book_id in self.ids()

    def add(self, book_id: int) -> bool:
        book_id = _check_id(book_id)
        with self.storage.lock:
            ids = self.ids()
            if book_id in ids:
                return False
            ids.append(book_id)
            self._save(ids)
        logger.info("Added book %s to wishlist", book_id)
        return True

    def remove(self, book_id: int) -> bool:
        book_id = _check_id(book_id)
        with self.storage.lock:
            ids = self.ids()
            if book_id not in ids:
                return False
            self._save([i for i in ids if i != book_id])
        logger.info("Removed book %s from wishlist", book_id)
        return True

    def toggle(self, book_id: int) -> bool:
        """Flip membership and return whether the book is now wishlisted."""
        with self.storage.lock:
            if self.remove(book_id):
                return False
            self.add(book_id)
            return True

    def clear(self) -> None:
        self._save([])
