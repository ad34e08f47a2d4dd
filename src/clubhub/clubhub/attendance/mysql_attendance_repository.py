from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, Sequence

from ..core.constants import ATTENDANCE_SORT_COLUMNS
from ..core.enums import AttendanceAction
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from ..events.model import EventRegistration
from ..events.mysql_event_repository import REGISTRATION_COLUMNS, row_to_registration
from ..points.model import PointsEntry
from ..points.mysql_points_repository import (
    INSERT_POINTS_HISTORY_SQL,
    UPDATE_USER_TOTALS_SQL,
    points_entry_params,
)
from .model import AttendanceLog, AttendeeRow, EventQRCode
from .repository import AttendanceRepository, AttendanceTransaction

_ATTENDEE_SELECT = """
    SELECT er.registration_id, er.user_id, er.event_id, er.registration_date, er.status,
           er.attended, er.attendance_marked_by, er.attendance_marked_at, er.attendance_method,
           er.check_in_time, er.check_out_time, er.points_awarded, er.volunteer_hours_awarded,
           er.notes, u.first_name, u.last_name, u.email, u.student_id
    FROM event_registrations er
    JOIN users u ON u.user_id = er.user_id
"""

_QR_COLUMNS = """
    qr_id, event_id, qr_code_data, valid_from, valid_until, max_scans,
    current_scans, is_active, created_by, created_at
"""


def _row_to_attendee(row: Dict[str, Any]) -> AttendeeRow:
    return AttendeeRow(
        registration=row_to_registration(row),
        first_name=row["first_name"],
        last_name=row["last_name"],
        email=row["email"],
        student_id=row.get("student_id"),
    )


def _row_to_log(row: Dict[str, Any]) -> AttendanceLog:
    return AttendanceLog(
        log_id=row["log_id"],
        event_id=row["event_id"],
        user_id=row["user_id"],
        marked_by=row["marked_by"],
        action=AttendanceAction(row["action"]),
        previous_status=as_bool(row.get("previous_status")),
        new_status=as_bool(row.get("new_status")),
        reason=row.get("reason"),
        created_at=row["created_at"],
    )


def _row_to_qr(row: Dict[str, Any]) -> EventQRCode:
    max_scans = row.get("max_scans")
    return EventQRCode(
        qr_id=row["qr_id"],
        event_id=row["event_id"],
        qr_code_data=row["qr_code_data"],
        valid_from=row["valid_from"],
        valid_until=row["valid_until"],
        max_scans=int(max_scans) if max_scans is not None else None,
        current_scans=int(row.get("current_scans") or 0),
        is_active=as_bool(row.get("is_active", 1)),
        created_by=row["created_by"],
        created_at=row["created_at"],
    )


class _MySQLAttendanceTransaction(AttendanceTransaction):
    def __init__(self, cur):
        self._cur = cur

    def lock_registration(self, *, event_id: str, user_id: str) -> Optional[EventRegistration]:
        self._cur.execute(
            f"""
            SELECT {REGISTRATION_COLUMNS}
            FROM event_registrations
            WHERE event_id=%s AND user_id=%s
            FOR UPDATE
            """,
            (event_id, user_id),
        )
        row = fetchone(self._cur)
        return row_to_registration(row) if row else None

    def update_registration(self, registration: EventRegistration) -> None:
        self._cur.execute(
            """
            UPDATE event_registrations
            SET status=%s, attended=%s, attendance_marked_by=%s, attendance_marked_at=%s,
                attendance_method=%s, check_in_time=%s, check_out_time=%s,
                points_awarded=%s, volunteer_hours_awarded=%s, notes=%s
            WHERE registration_id=%s
            """,
            (
                registration.status.value,
                1 if registration.attended else 0,
                registration.attendance_marked_by,
                registration.attendance_marked_at,
                registration.attendance_method.value if registration.attendance_method else None,
                registration.check_in_time,
                registration.check_out_time,
                registration.points_awarded,
                registration.volunteer_hours_awarded,
                registration.notes,
                registration.registration_id,
            ),
        )

    def adjust_user_totals(self, *, user_id: str, points: int, volunteer_hours: float) -> None:
        self._cur.execute(UPDATE_USER_TOTALS_SQL, (points, volunteer_hours, user_id))

    def append_points_history(self, entry: PointsEntry) -> None:
        self._cur.execute(INSERT_POINTS_HISTORY_SQL, points_entry_params(entry))

    def append_log(self, log: AttendanceLog) -> None:
        self._cur.execute(
            """
            INSERT INTO attendance_logs
                (log_id, event_id, user_id, marked_by, action, previous_status, new_status, reason, created_at)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
            """,
            (
                log.log_id,
                log.event_id,
                log.user_id,
                log.marked_by,
                log.action.value,
                1 if log.previous_status else 0,
                1 if log.new_status else 0,
                log.reason,
                log.created_at,
            ),
        )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def transaction(self) -> Iterator[AttendanceTransaction]:
        with db_cursor(self._conn_factory) as (_, cur):
            yield _MySQLAttendanceTransaction(cur)

    def list_attendees(
        self,
        *,
        event_id: str,
        page: int,
        limit: int,
        search: Optional[str] = None,
        status: Optional[str] = None,
        sort_by: str = "registration_date",
        sort_order: str = "desc",
    ) -> tuple[list[AttendeeRow], int]:
        where = ["er.event_id=%s"]
        params: list = [event_id]
        if status:
            where.append("er.status=%s")
            params.append(status)
        if search:
            like = f"%{search}%"
            where.append("(u.first_name LIKE %s OR u.last_name LIKE %s OR u.email LIKE %s OR u.student_id LIKE %s)")
            params.extend([like, like, like, like])

        # whitelisted column names only; never interpolate user input
        order_col = ATTENDANCE_SORT_COLUMNS.get(sort_by, ATTENDANCE_SORT_COLUMNS["registration_date"])
        order_dir = "ASC" if str(sort_order).lower() == "asc" else "DESC"
        where_sql = " AND ".join(where)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COUNT(*) AS n
                FROM event_registrations er
                JOIN users u ON u.user_id = er.user_id
                WHERE {where_sql}
                """,
                tuple(params),
            )
            total = int((fetchone(cur) or {"n": 0})["n"])
            cur.execute(
                f"{_ATTENDEE_SELECT} WHERE {where_sql} ORDER BY {order_col} {order_dir} LIMIT %s OFFSET %s",
                tuple(params + [limit, (page - 1) * limit]),
            )
            return [_row_to_attendee(r) for r in fetchall(cur)], total

    def all_attendees(self, event_id: str) -> Sequence[AttendeeRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_ATTENDEE_SELECT} WHERE er.event_id=%s ORDER BY u.last_name, u.first_name",
                (event_id,),
            )
            return [_row_to_attendee(r) for r in fetchall(cur)]

    def list_logs(
        self,
        *,
        event_id: str,
        page: int,
        limit: int,
        user_id: Optional[str] = None,
    ) -> tuple[list[AttendanceLog], int]:
        where = "event_id=%s"
        params: list = [event_id]
        if user_id:
            where += " AND user_id=%s"
            params.append(user_id)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM attendance_logs WHERE {where}", tuple(params))
            total = int((fetchone(cur) or {"n": 0})["n"])
            cur.execute(
                f"""
                SELECT log_id, event_id, user_id, marked_by, action, previous_status,
                       new_status, reason, created_at
                FROM attendance_logs
                WHERE {where}
                ORDER BY created_at DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [limit, (page - 1) * limit]),
            )
            return [_row_to_log(r) for r in fetchall(cur)], total

    def create_qr_code(self, qr: EventQRCode) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO event_qr_codes ({_QR_COLUMNS}) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)",
                (
                    qr.qr_id,
                    qr.event_id,
                    qr.qr_code_data,
                    qr.valid_from,
                    qr.valid_until,
                    qr.max_scans,
                    qr.current_scans,
                    1 if qr.is_active else 0,
                    qr.created_by,
                    qr.created_at,
                ),
            )

    def get_qr_code(self, qr_code_data: str) -> Optional[EventQRCode]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_QR_COLUMNS} FROM event_qr_codes WHERE qr_code_data=%s", (qr_code_data,))
            row = fetchone(cur)
            return _row_to_qr(row) if row else None

    def reserve_qr_scan(self, qr_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE event_qr_codes
                SET current_scans = current_scans + 1
                WHERE qr_id=%s AND (max_scans IS NULL OR current_scans < max_scans)
                """,
                (qr_id,),
            )
            return cur.rowcount > 0

    def release_qr_scan(self, qr_id: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE event_qr_codes SET current_scans = current_scans - 1 WHERE qr_id=%s AND current_scans > 0",
                (qr_id,),
            )
