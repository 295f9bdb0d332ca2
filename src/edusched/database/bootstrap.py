from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import mysql.connector

from ..catalog.defaults import (
    INITIAL_ACTIVITY_CATEGORIES,
    INITIAL_AREAS,
    INITIAL_COMPETENCIES,
    INITIAL_WORKLOADS,
)
from ..core.constants import DEFAULT_ADMIN_NAME, DEFAULT_ADMIN_USERNAME
from ..core.enums import Role, UserStatus


@dataclass(frozen=True)
class DBTarget:
    host: str
    port: int
    user: str
    password: str
    database: str


def _as_target(db_config: dict) -> DBTarget:
    return DBTarget(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "edusched_db")),
    )


def _connect(target: DBTarget, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_line_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    target = _as_target(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)

    sql = Path(schema_path).read_text(encoding="utf-8")
    sql = _strip_line_comments(_strip_create_db_and_use(sql))

    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def ensure_catalog_defaults(db_config: dict) -> None:
    """Seed reference lists, only into tables that are still empty."""
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()

        def is_empty(table: str) -> bool:
            cur.execute(f"SELECT COUNT(*) FROM {table}")
            return int(cur.fetchone()[0]) == 0

        if is_empty("competencies"):
            cur.executemany("INSERT INTO competencies (id, name) VALUES (%s, %s)", INITIAL_COMPETENCIES)
        if is_empty("workloads"):
            cur.executemany("INSERT INTO workloads (id, name) VALUES (%s, %s)", INITIAL_WORKLOADS)
        if is_empty("areas"):
            cur.executemany("INSERT INTO areas (id, name, color) VALUES (%s, %s, %s)", INITIAL_AREAS)
        if is_empty("activity_categories"):
            cur.executemany(
                "INSERT INTO activity_categories (id, name, is_system) VALUES (%s, %s, %s)",
                [(i, n, int(s)) for i, n, s in INITIAL_ACTIVITY_CATEGORIES],
            )
        conn.commit()
    finally:
        conn.close()


def ensure_default_admin(db_config: dict, *, user_id: str, email: str) -> None:
    """Make sure the 'admin' supervision account exists and is active.

    `user_id` must be the hosted auth id of the admin login.
    """
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor(dictionary=True)
        cur.execute("SELECT user_id FROM users WHERE username=%s", (DEFAULT_ADMIN_USERNAME,))
        existing = cur.fetchone()
        if existing:
            cur.execute(
                "UPDATE users SET role=%s, status=%s WHERE username=%s",
                (Role.SUPERVISION.value, UserStatus.ACTIVE.value, DEFAULT_ADMIN_USERNAME),
            )
        else:
            cur.execute(
                """
                INSERT INTO users (user_id, name, username, role, status, email)
                VALUES (%s, %s, %s, %s, %s, %s)
                """,
                (
                    user_id,
                    DEFAULT_ADMIN_NAME,
                    DEFAULT_ADMIN_USERNAME,
                    Role.SUPERVISION.value,
                    UserStatus.ACTIVE.value,
                    email,
                ),
            )
        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
