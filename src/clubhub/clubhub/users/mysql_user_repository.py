from __future__ import annotations

from typing import Any, Dict, Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, as_float, db_cursor, fetchone
from .model import User
from .repository import UserRepository

_USER_COLUMNS = """
    user_id, email, password_hash, first_name, last_name, student_id, role,
    is_active, total_points, total_volunteer_hours
"""


def row_to_user(row: Dict[str, Any]) -> User:
    return User(
        user_id=row["user_id"],
        email=row["email"],
        password_hash=row["password_hash"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        student_id=row.get("student_id"),
        role=Role(row["role"]),
        is_active=as_bool(row.get("is_active", 1)),
        total_points=int(row.get("total_points") or 0),
        total_volunteer_hours=as_float(row.get("total_volunteer_hours")),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE user_id=%s", (user_id,))
            row = fetchone(cur)
            return row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return row_to_user(row) if row else None
