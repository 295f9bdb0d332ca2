from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from ..core.enums import Role, UserStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_mysql_datetime, to_mysql_datetime
from .model import User
from .repository import UserRepository

_USER_COLUMNS = """
    user_id, name, username, role, status, email, phone, photo_url,
    area_id, workload_id, re, google_email, last_login
"""


def _row_to_user(row: dict, competency_ids: Sequence[str]) -> User:
    status = row.get("status")
    return User(
        user_id=str(row["user_id"]),
        name=row["name"],
        username=row["username"],
        role=Role(row["role"]),
        status=UserStatus(status) if status else None,
        email=row.get("email"),
        phone=row.get("phone"),
        photo_url=row.get("photo_url"),
        area_id=row.get("area_id"),
        workload_id=row.get("workload_id"),
        re=row.get("re"),
        google_email=row.get("google_email"),
        competency_ids=tuple(competency_ids),
        last_login=from_mysql_datetime(row.get("last_login")),
    )


def _user_params(user: User) -> tuple:
    return (
        user.name,
        user.username,
        user.role.value,
        user.status.value if user.status else None,
        user.email,
        user.phone,
        user.photo_url,
        user.area_id,
        user.workload_id,
        user.re,
        user.google_email,
        to_mysql_datetime(user.last_login),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _competencies_for(self, cur, user_ids: Sequence[str]) -> Dict[str, List[str]]:
        out: Dict[str, List[str]] = defaultdict(list)
        if not user_ids:
            return out
        placeholders = ",".join(["%s"] * len(user_ids))
        cur.execute(
            f"""
            SELECT user_id, competency_id
            FROM user_competencies
            WHERE user_id IN ({placeholders})
            ORDER BY competency_id
            """,
            tuple(user_ids),
        )
        for r in fetchall(cur):
            out[str(r["user_id"])].append(r["competency_id"])
        return out

    def _get_where(self, clause: str, value: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE {clause}=%s", (value,))
            row = fetchone(cur)
            if not row:
                return None
            comps = self._competencies_for(cur, [str(row["user_id"])])
            return _row_to_user(row, comps.get(str(row["user_id"]), []))

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self._get_where("user_id", user_id)

    def get_by_username(self, username: str) -> Optional[User]:
        return self._get_where("username", username)

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users ORDER BY name")
            rows = fetchall(cur)
            comps = self._competencies_for(cur, [str(r["user_id"]) for r in rows])
            return [_row_to_user(r, comps.get(str(r["user_id"]), [])) for r in rows]

    def _insert(self, cur, user: User) -> None:
        cur.execute(
            """
            INSERT INTO users(user_id, name, username, role, status, email, phone, photo_url,
                              area_id, workload_id, re, google_email, last_login)
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
            """,
            (user.user_id, *_user_params(user)),
        )
        if user.competency_ids:
            cur.executemany(
                "INSERT INTO user_competencies(user_id, competency_id) VALUES(%s,%s)",
                [(user.user_id, cid) for cid in dict.fromkeys(user.competency_ids)],
            )

    def create(self, user: User) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            self._insert(cur, user)

    def update(self, user: User) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT user_id FROM users WHERE user_id=%s", (user.user_id,))
            if not fetchone(cur):
                return False
            cur.execute(
                """
                UPDATE users
                SET name=%s, username=%s, role=%s, status=%s, email=%s, phone=%s, photo_url=%s,
                    area_id=%s, workload_id=%s, re=%s, google_email=%s, last_login=%s
                WHERE user_id=%s
                """,
                (*_user_params(user), user.user_id),
            )
            cur.execute("DELETE FROM user_competencies WHERE user_id=%s", (user.user_id,))
            if user.competency_ids:
                cur.executemany(
                    "INSERT INTO user_competencies(user_id, competency_id) VALUES(%s,%s)",
                    [(user.user_id, cid) for cid in dict.fromkeys(user.competency_ids)],
                )
            return True

    def set_status(self, user_id: str, status: UserStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET status=%s WHERE user_id=%s", (status.value, user_id))
            return cur.rowcount > 0

    def set_competencies(self, user_id: str, competency_ids: Sequence[str]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM user_competencies WHERE user_id=%s", (user_id,))
            if competency_ids:
                cur.executemany(
                    "INSERT INTO user_competencies(user_id, competency_id) VALUES(%s,%s)",
                    [(user_id, cid) for cid in dict.fromkeys(competency_ids)],
                )

    def remove_competency_everywhere(self, competency_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM user_competencies WHERE competency_id=%s", (competency_id,))
            return int(cur.rowcount)

    def touch_last_login(self, user_id: str, when: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET last_login=%s WHERE user_id=%s", (to_mysql_datetime(when), user_id))

    def delete_by_id(self, user_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM user_competencies WHERE user_id=%s", (user_id,))
            cur.execute("DELETE FROM users WHERE user_id=%s", (user_id,))
            return cur.rowcount > 0

    def replace_all(self, users: Sequence[User]) -> None:
        # Uma transação: ou troca tudo ou nada
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM user_competencies")
            cur.execute("DELETE FROM users")
            for user in users:
                self._insert(cur, user)
