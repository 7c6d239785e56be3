"""
Catalog package for the book catalog API.

This package contains schemas and route definitions that expose a
simple REST API for browsing Project Gutenberg through Gutendex: search
by title or author, filter by genre, page through results, open a
single book and keep a local wishlist of liked book IDs. The router is
meant to back a thin front-end page that renders the cards it returns.
"""

from .router import router as catalog_router  # noqa: F401
