from __future__ import annotations

from typing import Dict, Iterable, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .repository import SettingsRepository

_UPSERT = """
    INSERT INTO app_settings(setting_key, setting_value)
    VALUES(%s,%s)
    ON DUPLICATE KEY UPDATE setting_value=VALUES(setting_value)
"""


class MySQLSettingsRepository(SettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, key: str) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT setting_value FROM app_settings WHERE setting_key=%s", (key,))
            row = fetchone(cur)
            return row["setting_value"] if row else None

    def get_many(self, keys: Iterable[str]) -> Dict[str, Optional[str]]:
        keys = list(keys)
        out: Dict[str, Optional[str]] = {k: None for k in keys}
        if not keys:
            return out
        placeholders = ",".join(["%s"] * len(keys))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT setting_key, setting_value FROM app_settings WHERE setting_key IN ({placeholders})",
                tuple(keys),
            )
            for r in fetchall(cur):
                out[r["setting_key"]] = r["setting_value"]
        return out

    def set(self, key: str, value: Optional[str]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_UPSERT, (key, value))

    def set_many(self, values: Dict[str, Optional[str]]) -> None:
        if not values:
            return
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(_UPSERT, list(values.items()))
