from __future__ import annotations

from typing import Optional

from ..core.enums import ClubRole
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchone
from .model import ClubMembership
from .repository import ClubRepository


class MySQLClubRepository(ClubRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_membership(self, *, user_id: str, club_id: str) -> Optional[ClubMembership]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, club_id, role, is_active
                FROM club_memberships
                WHERE user_id=%s AND club_id=%s
                """,
                (user_id, club_id),
            )
            r = fetchone(cur)
            if not r:
                return None
            return ClubMembership(
                user_id=r["user_id"],
                club_id=r["club_id"],
                role=ClubRole(r["role"]),
                is_active=as_bool(r["is_active"]),
            )
