from __future__ import annotations

import logging
import secrets
from dataclasses import replace
from typing import Dict, List, Optional

from ..common.validators import require_non_empty
from ..core.enums import CatalogKind, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import CatalogItem
from .repository import CatalogRepository

logger = logging.getLogger(__name__)


def new_item_id() -> str:
    return secrets.token_hex(5)


def parse_kind(value: str) -> CatalogKind:
    try:
        return CatalogKind(value)
    except ValueError:
        raise NotFoundError("Lista não encontrada")


class CatalogService:
    """Reference lists managed by supervision: competencies, workloads, areas, activity categories."""

    def __init__(self, catalog: CatalogRepository, users: UserRepository):
        self._catalog = catalog
        self._users = users

    def list(self, kind: CatalogKind) -> List[CatalogItem]:
        return list(self._catalog.list(kind))

    def list_all(self) -> Dict[CatalogKind, List[CatalogItem]]:
        return {kind: self.list(kind) for kind in CatalogKind}

    def add(self, *, current_role: Role, kind: CatalogKind, name: str, color: Optional[str] = None) -> CatalogItem:
        if current_role != Role.SUPERVISION:
            raise AuthorizationError("Você não tem permissão para esta ação")
        name = require_non_empty(name, "Nome")
        item = CatalogItem(
            id=new_item_id(),
            name=name,
            color=(color or None) if kind == CatalogKind.AREAS else None,
        )
        self._catalog.add(kind, item)
        return item

    def rename(
        self, *, current_role: Role, kind: CatalogKind, item_id: str, name: str, color: Optional[str] = None
    ) -> CatalogItem:
        if current_role != Role.SUPERVISION:
            raise AuthorizationError("Você não tem permissão para esta ação")
        name = require_non_empty(name, "Nome")
        item = self._catalog.get(kind, item_id)
        if not item:
            raise NotFoundError("Item não encontrado")
        updated = replace(item, name=name)
        if kind == CatalogKind.AREAS and color is not None:
            updated = replace(updated, color=color or None)
        self._catalog.update(kind, updated)
        return updated

    def remove(self, *, current_role: Role, kind: CatalogKind, item_id: str) -> None:
        if current_role != Role.SUPERVISION:
            raise AuthorizationError("Você não tem permissão para esta ação")
        item = self._catalog.get(kind, item_id)
        if not item:
            raise NotFoundError("Item não encontrado")
        if item.is_system:
            raise ValidationError("Categorias do sistema não podem ser excluídas")

        self._catalog.delete(kind, item_id)
        if kind == CatalogKind.COMPETENCIES:
            n = self._users.remove_competency_everywhere(item_id)
            if n:
                logger.info("Competency %s removed from %d user(s)", item_id, n)
