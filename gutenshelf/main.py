# gutenshelf/main.py
import logging

from fastapi import FastAPI

from .catalog import catalog_router
from .config import get_settings


settings = get_settings()
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Gutenshelf",
    description=(
        "Book catalog over the Gutendex API: search, genre filter, "
        "pagination, book details and a local wishlist."
    ),
    version="1.0.0",
)
app.include_router(catalog_router)


# Quick liveness check
@app.get("/")
def health_check():
    return {"status": "ok", "message": "Gutenshelf catalog is up"}
