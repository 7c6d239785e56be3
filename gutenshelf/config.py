# gutenshelf/config.py
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    gutendex_base_url: str = "https://gutendex.com"
    request_timeout: float = 10.0
    # Gutendex always serves 32 results per page
    page_size: int = 32

    storage_file: Path = Path("data") / "local_storage.json"
    wishlist_key: str = "wishlist"

    search_debounce_ms: int = 500
    default_cover: str = "default-cover.jpg"
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_prefix": "GUTENSHELF_"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
