from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import CatalogKind
from .model import CatalogItem


class CatalogRepository(Protocol):
    def list(self, kind: CatalogKind) -> Sequence[CatalogItem]:
        raise NotImplementedError

    def get(self, kind: CatalogKind, item_id: str) -> Optional[CatalogItem]:
        raise NotImplementedError

    def add(self, kind: CatalogKind, item: CatalogItem) -> None:
        raise NotImplementedError

    def update(self, kind: CatalogKind, item: CatalogItem) -> bool:
        raise NotImplementedError

    def delete(self, kind: CatalogKind, item_id: str) -> bool:
        raise NotImplementedError

    def replace_all(self, kind: CatalogKind, items: Sequence[CatalogItem]) -> None:
        raise NotImplementedError
