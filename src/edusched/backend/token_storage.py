"""Key/value stores for persisted auth sessions.

`FallbackTokenStorage` writes to a persistent store and, when that store is
full or unavailable, keeps the token in a session (in-process) store so the
user can still log in.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Dict, Optional, Protocol

from ..core.exceptions import StorageQuotaError

logger = logging.getLogger(__name__)


class TokenStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError


class MemoryTokenStorage:
    """Session storage: lives as long as the process."""

    def __init__(self, max_bytes: Optional[int] = None):
        self._items: Dict[str, str] = {}
        self._max_bytes = max_bytes
        self._lock = threading.Lock()

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            if self._max_bytes is not None:
                used = sum(len(k) + len(v) for k, v in self._items.items() if k != key)
                if used + len(key) + len(value) > self._max_bytes:
                    raise StorageQuotaError("Session storage quota exceeded")
            self._items[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)


class FileTokenStorage:
    """Persistent storage: a JSON object on disk, capped at `max_bytes`."""

    def __init__(self, path: str | Path, *, max_bytes: int):
        self._path = Path(path)
        self._max_bytes = int(max_bytes)
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        raw = self._path.read_text(encoding="utf-8")
        if not raw.strip():
            return {}
        data = json.loads(raw)
        return dict(data) if isinstance(data, dict) else {}

    def _dump(self, items: Dict[str, str]) -> None:
        payload = json.dumps(items)
        if len(payload.encode("utf-8")) > self._max_bytes:
            raise StorageQuotaError(f"Token store {self._path} is full")
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(payload, encoding="utf-8")

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            items = self._load()
            items[key] = value
            self._dump(items)

    def remove_item(self, key: str) -> None:
        with self._lock:
            items = self._load()
            if key in items:
                del items[key]
                self._dump(items)


class FallbackTokenStorage:
    def __init__(self, primary: TokenStorage, fallback: TokenStorage):
        self._primary = primary
        self._fallback = fallback

    def get_item(self, key: str) -> Optional[str]:
        try:
            value = self._primary.get_item(key)
        except (OSError, ValueError) as e:
            logger.error("Error getting item from persistent token storage: %s", e)
            value = None
        if value is not None:
            return value
        return self._fallback.get_item(key)

    def set_item(self, key: str, value: str) -> None:
        # Only one store may hold a key, otherwise reads can return an old token.
        try:
            self._primary.set_item(key, value)
        except (StorageQuotaError, OSError, ValueError) as e:
            logger.warning("Persistent token storage failed (%s); falling back to session storage", e)
        else:
            self._fallback.remove_item(key)
            return

        try:
            self._primary.remove_item(key)
        except (StorageQuotaError, OSError, ValueError) as e:
            logger.error("Could not drop old value from persistent token storage: %s", e)

        try:
            self._fallback.set_item(key, value)
        except (StorageQuotaError, OSError) as e:
            logger.error("Session storage also full or unavailable: %s", e)

    def remove_item(self, key: str) -> None:
        try:
            self._primary.remove_item(key)
        except (StorageQuotaError, OSError, ValueError) as e:
            logger.error("Error removing item from persistent token storage: %s", e)
        self._fallback.remove_item(key)
