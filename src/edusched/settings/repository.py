from __future__ import annotations

from typing import Dict, Iterable, Optional, Protocol


class SettingsRepository(Protocol):
    """Organization-wide key/value settings (branding, backup preferences)."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def get_many(self, keys: Iterable[str]) -> Dict[str, Optional[str]]:
        raise NotImplementedError

    def set(self, key: str, value: Optional[str]) -> None:
        raise NotImplementedError

    def set_many(self, values: Dict[str, Optional[str]]) -> None:
        raise NotImplementedError
