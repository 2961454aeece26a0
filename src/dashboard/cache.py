"""The two cache tiers: an in-process LRU/TTL response cache and the snapshot store."""

from __future__ import annotations

import json
import os
import re
import threading
import time
from typing import Any, Callable, Dict, Optional

from cachetools import TTLCache

from .config import CACHE_MAX_ENTRIES, CACHE_TTL_SEC


class ResponseCache:
    """Thread-safe key/value cache bounded by entry count (LRU) and entry age (TTL)."""

    def __init__(
        self,
        maxsize: int = CACHE_MAX_ENTRIES,
        ttl: float = CACHE_TTL_SEC,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._store.get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._store[key] = value

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._store

    def __len__(self) -> int:
        with self._lock:
            self._store.expire()
            return len(self._store)


def _slug(path: str) -> str:
    return re.sub(r"[^A-Za-z0-9._-]+", "_", path).strip("_") or "root"


class SnapshotStore:
    """Externally visible `resource path -> JSON value` cache written by the primer.

    Without a `directory` values live in memory only. With one, each path is a
    JSON file and the file is the source of truth: every read loads it, so a
    serving process sees what a separate priming process last wrote. Files are
    replaced atomically; readers see the old or the new value, never a partial one.
    """

    def __init__(self, directory: Optional[str] = None) -> None:
        self.directory = directory
        self._values: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def _file_for(self, path: str) -> str:
        return os.path.join(self.directory or ".", f"{_slug(path)}.json")

    def read(self, path: str) -> Optional[Any]:
        if not self.directory:
            with self._lock:
                return self._values.get(path)
        file_path = self._file_for(path)
        if not os.path.exists(file_path):
            return None
        with open(file_path, "r", encoding="utf-8") as fh:
            try:
                value = json.load(fh)
            except json.JSONDecodeError:
                print(f"[warn] ignoring unreadable snapshot {file_path}")
                return None
        return value

    def write(self, path: str, value: Any) -> None:
        if self.directory:
            os.makedirs(self.directory, exist_ok=True)
            file_path = self._file_for(path)
            tmp_path = f"{file_path}.tmp"
            with self._lock:
                with open(tmp_path, "w", encoding="utf-8") as fh:
                    json.dump(value, fh, indent=2, ensure_ascii=False)
                os.replace(tmp_path, file_path)
            return
        with self._lock:
            self._values[path] = value

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.read(path) is not None


__all__ = ["ResponseCache", "SnapshotStore"]
