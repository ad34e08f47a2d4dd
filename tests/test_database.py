from __future__ import annotations

import mysql.connector
import pytest

from src.clubhub.clubhub.core.enums import Role
from src.clubhub.clubhub.core.exceptions import ErrorKind, InternalError
from src.clubhub.clubhub.database.connection import DatabaseConnection, DBConfig
from src.clubhub.clubhub.database.mysql_base import db_cursor

DB_CONFIG = {"host": "db.invalid", "user": "clubhub", "password": "pw", "database": "clubhub"}


@pytest.fixture
def mysql_down(monkeypatch):
    def refuse(**kwargs):
        raise mysql.connector.Error("Can't connect to MySQL server")

    monkeypatch.setattr(mysql.connector, "connect", refuse)


def test_unreachable_database_raises_internal_error(mysql_down):
    conn = DatabaseConnection(DBConfig.from_dict(DB_CONFIG))

    with pytest.raises(InternalError) as exc:
        conn.connect()

    assert exc.value.kind == ErrorKind.INTERNAL
    assert exc.value.context["host"] == "db.invalid"
    assert isinstance(exc.value.__cause__, mysql.connector.Error)


def test_repository_calls_surface_the_same_error(mysql_down):
    conn = DatabaseConnection(DBConfig.from_dict(DB_CONFIG))

    with pytest.raises(InternalError, match="Database is unavailable"):
        with db_cursor(conn):
            pass


def test_internal_error_is_a_generic_500(client, world, auth_header, monkeypatch):
    admin = world.add_user(role=Role.CLUB_ADMIN)
    event = world.add_event(created_by=admin.user_id)

    def unavailable(event_id):
        raise InternalError("Database is unavailable", context={"host": "db.invalid"})

    monkeypatch.setattr(world.attendance_service, "get_attendance_statistics", unavailable)
    res = client.get(f"/events/{event.event_id}/attendance/stats", headers=auth_header(admin))

    assert res.status_code == 500
    assert res.get_json() == {"success": False, "message": "Internal server error", "data": None}


def test_bulk_marking_hides_internal_error_details(world, monkeypatch):
    admin = world.add_user(role=Role.CLUB_ADMIN)
    student = world.add_user()
    event = world.add_event(created_by=admin.user_id)
    world.register(event, student)

    def unavailable():
        raise InternalError("Database is unavailable")

    monkeypatch.setattr(world.attendance, "transaction", unavailable)
    result = world.attendance_service.mark_bulk_attendance(
        event.event_id, [student.user_id], attended=True, marked_by=admin.user_id
    )

    assert result.success == []
    assert result.failed == [{"user_id": student.user_id, "reason": "Internal error"}]
