from __future__ import annotations

import uuid
from typing import Any, Dict, Optional

from ..common.datetime_utils import now_utc
from ..core.enums import AttendanceMethod, RegistrationStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, as_float, db_cursor, fetchone
from .model import Event, EventRegistration
from .repository import EventRepository

EVENT_COLUMNS = """
    event_id, club_id, title, created_by, start_date, end_date,
    registration_deadline, max_participants, points_reward, volunteer_hours,
    is_published
"""

REGISTRATION_COLUMNS = """
    registration_id, user_id, event_id, registration_date, status, attended,
    attendance_marked_by, attendance_marked_at, attendance_method,
    check_in_time, check_out_time, points_awarded, volunteer_hours_awarded, notes
"""


def row_to_event(row: Dict[str, Any]) -> Event:
    max_participants = row.get("max_participants")
    return Event(
        event_id=row["event_id"],
        club_id=row["club_id"],
        title=row["title"],
        created_by=row["created_by"],
        start_date=row["start_date"],
        end_date=row["end_date"],
        points_reward=int(row.get("points_reward") or 0),
        volunteer_hours=as_float(row.get("volunteer_hours")),
        max_participants=int(max_participants) if max_participants is not None else None,
        registration_deadline=row.get("registration_deadline"),
        is_published=as_bool(row.get("is_published", 1)),
    )


def row_to_registration(row: Dict[str, Any]) -> EventRegistration:
    method = row.get("attendance_method")
    return EventRegistration(
        registration_id=row["registration_id"],
        user_id=row["user_id"],
        event_id=row["event_id"],
        registration_date=row["registration_date"],
        status=RegistrationStatus(row["status"]),
        attended=as_bool(row.get("attended")),
        attendance_marked_by=row.get("attendance_marked_by"),
        attendance_marked_at=row.get("attendance_marked_at"),
        attendance_method=AttendanceMethod(method) if method else None,
        check_in_time=row.get("check_in_time"),
        check_out_time=row.get("check_out_time"),
        points_awarded=int(row.get("points_awarded") or 0),
        volunteer_hours_awarded=as_float(row.get("volunteer_hours_awarded")),
        notes=row.get("notes"),
    )


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, event_id: str) -> Optional[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {EVENT_COLUMNS} FROM events WHERE event_id=%s", (event_id,))
            row = fetchone(cur)
            return row_to_event(row) if row else None

    def get_registration(self, *, event_id: str, user_id: str) -> Optional[EventRegistration]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {REGISTRATION_COLUMNS} FROM event_registrations WHERE event_id=%s AND user_id=%s",
                (event_id, user_id),
            )
            row = fetchone(cur)
            return row_to_registration(row) if row else None

    def create_registration(
        self, *, event_id: str, user_id: str, capacity: Optional[int] = None
    ) -> Optional[EventRegistration]:
        registration = EventRegistration(
            registration_id=str(uuid.uuid4()),
            user_id=user_id,
            event_id=event_id,
            registration_date=now_utc(),
            status=RegistrationStatus.REGISTERED,
        )
        with db_cursor(self._conn_factory) as (_, cur):
            # event row lock serialises concurrent registrations for this event
            cur.execute("SELECT event_id FROM events WHERE event_id=%s FOR UPDATE", (event_id,))
            cur.fetchall()
            if capacity is not None:
                cur.execute(
                    "SELECT COUNT(*) AS n FROM event_registrations WHERE event_id=%s AND status<>%s",
                    (event_id, RegistrationStatus.CANCELLED.value),
                )
                row = fetchone(cur)
                if row and int(row["n"]) >= capacity:
                    return None
            cur.execute(
                """
                INSERT INTO event_registrations
                    (registration_id, user_id, event_id, registration_date, status, attended)
                VALUES (%s, %s, %s, %s, %s, 0)
                """,
                (
                    registration.registration_id,
                    registration.user_id,
                    registration.event_id,
                    registration.registration_date,
                    registration.status.value,
                ),
            )
        return registration

    def delete_registration(self, *, event_id: str, user_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                DELETE FROM event_registrations
                WHERE event_id=%s AND user_id=%s AND attendance_marked_at IS NULL
                """,
                (event_id, user_id),
            )
            return cur.rowcount > 0
