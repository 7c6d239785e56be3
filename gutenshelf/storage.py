# gutenshelf/storage.py
"""
Local key-value storage backed by a single JSON file.

This mirrors the browser ``localStorage`` API: keys and values are plain
strings and callers serialize their own data (the wishlist stores a JSON
array under one key). The whole file is read on every access so that
several ``LocalStorage`` objects pointed at the same file see each
other's writes.

All access in the process goes through one re-entrant lock. Callers that
read, change and write back a value hold ``storage.lock`` around the
whole update.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, List, Optional, Union


logger = logging.getLogger(__name__)

# Shared by every LocalStorage instance; requests each build their own
_storage_lock = threading.RLock()


class LocalStorage:
    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    @property
    def lock(self):
        return _storage_lock

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable storage file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring storage file %s: expected a JSON object", self.path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _save(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=self.path.parent,
            prefix=self.path.name + ".",
            suffix=".tmp",
            delete=False,
        ) as f:
            tmp_name = f.name
            json.dump(data, f, ensure_ascii=False, indent=2)
        try:
            os.replace(tmp_name, self.path)
        except OSError:
            os.unlink(tmp_name)
            raise

    def get_item(self, key: str) -> Optional[str]:
        with _storage_lock:
            return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError("storage values must be strings")
        with _storage_lock:
            data = self._load()
            data[key] = value
            self._save(data)

    def remove_item(self, key: str) -> None:
        with _storage_lock:
            data = self._load()
            if key in data:
                del data[key]
                self._save(data)

    def clear(self) -> None:
        with _storage_lock:
            self._save({})

    def keys(self) -> List[str]:
        with _storage_lock:
            return list(self._load())
