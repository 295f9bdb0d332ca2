from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import CatalogKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import CatalogItem
from .repository import CatalogRepository

_TABLES = {
    CatalogKind.COMPETENCIES: "competencies",
    CatalogKind.WORKLOADS: "workloads",
    CatalogKind.AREAS: "areas",
    CatalogKind.ACTIVITY_CATEGORIES: "activity_categories",
}


def _columns(kind: CatalogKind) -> str:
    if kind == CatalogKind.AREAS:
        return "id, name, color"
    if kind == CatalogKind.ACTIVITY_CATEGORIES:
        return "id, name, is_system"
    return "id, name"


def _to_item(row: dict) -> CatalogItem:
    return CatalogItem(
        id=str(row["id"]),
        name=row["name"],
        color=row.get("color"),
        is_system=bool(row.get("is_system") or False),
    )


def _params(kind: CatalogKind, item: CatalogItem) -> tuple:
    if kind == CatalogKind.AREAS:
        return (item.id, item.name, item.color)
    if kind == CatalogKind.ACTIVITY_CATEGORIES:
        return (item.id, item.name, int(item.is_system))
    return (item.id, item.name)


class MySQLCatalogRepository(CatalogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list(self, kind: CatalogKind) -> Sequence[CatalogItem]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_columns(kind)} FROM {_TABLES[kind]} ORDER BY name")
            return [_to_item(r) for r in fetchall(cur)]

    def get(self, kind: CatalogKind, item_id: str) -> Optional[CatalogItem]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_columns(kind)} FROM {_TABLES[kind]} WHERE id=%s", (item_id,))
            row = fetchone(cur)
            return _to_item(row) if row else None

    def _insert_sql(self, kind: CatalogKind) -> str:
        cols = _columns(kind)
        placeholders = ",".join(["%s"] * len(cols.split(",")))
        return f"INSERT INTO {_TABLES[kind]} ({cols}) VALUES ({placeholders})"

    def add(self, kind: CatalogKind, item: CatalogItem) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(self._insert_sql(kind), _params(kind, item))

    def update(self, kind: CatalogKind, item: CatalogItem) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            if kind == CatalogKind.AREAS:
                cur.execute("UPDATE areas SET name=%s, color=%s WHERE id=%s", (item.name, item.color, item.id))
            else:
                cur.execute(f"UPDATE {_TABLES[kind]} SET name=%s WHERE id=%s", (item.name, item.id))
            return cur.rowcount > 0

    def delete(self, kind: CatalogKind, item_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"DELETE FROM {_TABLES[kind]} WHERE id=%s", (item_id,))
            return cur.rowcount > 0

    def replace_all(self, kind: CatalogKind, items: Sequence[CatalogItem]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"DELETE FROM {_TABLES[kind]}")
            if items:
                cur.executemany(self._insert_sql(kind), [_params(kind, i) for i in items])
