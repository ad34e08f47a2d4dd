from __future__ import annotations

from typing import Any, Dict

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchall, fetchone
from .model import PointsEntry
from .repository import PointsRepository

INSERT_POINTS_HISTORY_SQL = """
    INSERT INTO points_history
        (entry_id, user_id, event_id, points_earned, volunteer_hours_earned, reason, created_by, created_at)
    VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
"""

UPDATE_USER_TOTALS_SQL = """
    UPDATE users
    SET total_points = total_points + %s,
        total_volunteer_hours = total_volunteer_hours + %s
    WHERE user_id=%s
"""


def points_entry_params(entry: PointsEntry) -> tuple:
    return (
        entry.entry_id,
        entry.user_id,
        entry.event_id,
        entry.points_earned,
        entry.volunteer_hours_earned,
        entry.reason,
        entry.created_by,
        entry.created_at,
    )


def row_to_points_entry(row: Dict[str, Any]) -> PointsEntry:
    return PointsEntry(
        entry_id=row["entry_id"],
        user_id=row["user_id"],
        event_id=row.get("event_id"),
        points_earned=int(row.get("points_earned") or 0),
        volunteer_hours_earned=as_float(row.get("volunteer_hours_earned")),
        reason=row["reason"],
        created_by=row.get("created_by"),
        created_at=row["created_at"],
    )


class MySQLPointsRepository(PointsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def apply_adjustment(self, entry: PointsEntry) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(UPDATE_USER_TOTALS_SQL, (entry.points_earned, entry.volunteer_hours_earned, entry.user_id))
            cur.execute(INSERT_POINTS_HISTORY_SQL, points_entry_params(entry))

    def list_for_user(self, user_id: str, *, page: int, limit: int) -> tuple[list[PointsEntry], int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM points_history WHERE user_id=%s", (user_id,))
            total = int((fetchone(cur) or {"n": 0})["n"])
            cur.execute(
                """
                SELECT entry_id, user_id, event_id, points_earned, volunteer_hours_earned,
                       reason, created_by, created_at
                FROM points_history
                WHERE user_id=%s
                ORDER BY created_at DESC
                LIMIT %s OFFSET %s
                """,
                (user_id, limit, (page - 1) * limit),
            )
            return [row_to_points_entry(r) for r in fetchall(cur)], total
