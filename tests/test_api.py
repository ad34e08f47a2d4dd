from __future__ import annotations

import uuid

import pytest

from src.clubhub.clubhub.core.enums import Role


@pytest.fixture
def scene(world):
    admin = world.add_user(role=Role.CLUB_ADMIN, email="admin@college.edu", password="secret")
    student = world.add_user(email="student@college.edu")
    event = world.add_event(created_by=admin.user_id)
    world.register(event, student)
    return admin, student, event


def test_health_and_login(client, scene):
    assert client.get("/health").get_json()["data"] == {"status": "ok"}

    res = client.post("/auth/login", json={"email": "admin@college.edu", "password": "secret"})

    body = res.get_json()
    assert res.status_code == 200
    assert body["success"] is True
    assert body["data"]["token_type"] == "bearer"
    assert body["data"]["user"]["role"] == "club_admin"


def test_bad_login_is_401_envelope(client, scene):
    res = client.post("/auth/login", json={"email": "admin@college.edu", "password": "nope"})

    assert res.status_code == 401
    assert res.get_json() == {"success": False, "message": "Invalid email or password", "data": None}


def test_missing_token_is_401(client, scene):
    _, _, event = scene

    res = client.get(f"/events/{event.event_id}/attendance/stats")

    assert res.status_code == 401


def test_organizer_marks_attendance(client, scene, auth_header, world):
    admin, student, event = scene

    res = client.post(
        f"/events/{event.event_id}/attendance",
        json={"userId": student.user_id, "attended": True, "notes": "front row"},
        headers=auth_header(admin),
    )

    assert res.status_code == 200
    data = res.get_json()["data"]
    assert data["attended"] is True
    assert data["points_awarded"] == 10
    assert world.users.get_by_id(student.user_id).total_points == 10


def test_student_cannot_mark_attendance(client, scene, auth_header, world):
    _, student, event = scene

    res = client.post(
        f"/events/{event.event_id}/attendance",
        json={"user_id": student.user_id, "attended": True},
        headers=auth_header(student),
    )

    assert res.status_code == 403
    assert res.get_json()["success"] is False
    assert world.db.logs == []


def test_missing_event_is_404_before_permission(client, scene, auth_header):
    _, student, _ = scene

    res = client.get(f"/events/{uuid.uuid4()}/attendance/stats", headers=auth_header(student))

    assert res.status_code == 404


def test_invalid_body_is_400_with_field_errors(client, scene, auth_header):
    admin, _, event = scene

    res = client.post(
        f"/events/{event.event_id}/attendance",
        json={"user_id": "not-a-uuid"},
        headers=auth_header(admin),
    )

    body = res.get_json()
    assert res.status_code == 400
    fields = {e["field"] for e in body["errors"]}
    assert {"user_id", "attended"} <= fields or {"userId", "attended"} <= fields


def test_not_registered_is_400_domain_rule(client, scene, auth_header, world):
    admin, _, event = scene
    stranger = world.add_user()

    res = client.post(
        f"/events/{event.event_id}/attendance",
        json={"user_id": stranger.user_id, "attended": True},
        headers=auth_header(admin),
    )

    assert res.status_code == 400
    assert res.get_json()["message"] == "User is not registered for this event"


def test_bulk_endpoint_reports_success_and_failure(client, scene, auth_header, world):
    admin, student, event = scene
    stranger = world.add_user()

    res = client.post(
        f"/events/{event.event_id}/attendance/bulk",
        json={"userIds": [student.user_id, stranger.user_id], "attended": True},
        headers=auth_header(admin),
    )

    data = res.get_json()["data"]
    assert res.status_code == 200
    assert data["success"] == [student.user_id]
    assert data["failed"] == [{"user_id": stranger.user_id, "reason": "User is not registered for this event"}]


def test_list_and_logs_are_paginated(client, scene, auth_header):
    admin, student, event = scene
    client.post(
        f"/events/{event.event_id}/attendance/checkin",
        json={"user_id": student.user_id},
        headers=auth_header(admin),
    )

    listing = client.get(f"/events/{event.event_id}/attendance?limit=5", headers=auth_header(admin)).get_json()
    logs = client.get(
        f"/events/{event.event_id}/attendance/logs?user_id={student.user_id}", headers=auth_header(admin)
    ).get_json()

    assert listing["data"]["pagination"] == {"page": 1, "limit": 5, "total": 1, "total_pages": 1}
    assert listing["data"]["items"][0]["user"]["email"] == "student@college.edu"
    assert logs["data"]["items"][0]["action"] == "marked_present"


def test_checkout_before_checkin_is_400(client, scene, auth_header):
    admin, student, event = scene

    res = client.post(
        f"/events/{event.event_id}/attendance/checkout",
        json={"user_id": student.user_id},
        headers=auth_header(admin),
    )

    assert res.status_code == 400
    assert res.get_json()["message"] == "User must check in before check out"


def test_csv_report_is_an_attachment(client, scene, auth_header):
    admin, _, event = scene

    res = client.get(f"/events/{event.event_id}/attendance/report?format=csv", headers=auth_header(admin))

    assert res.status_code == 200
    assert res.mimetype == "text/csv"
    assert res.headers["Content-Disposition"].startswith("attachment; filename=attendance_")


def test_unknown_report_format_is_400(client, scene, auth_header):
    admin, _, event = scene

    res = client.get(f"/events/{event.event_id}/attendance/report?format=xlsx", headers=auth_header(admin))

    assert res.status_code == 400


def test_qr_flow_over_http(client, scene, auth_header, world):
    admin, student, event = scene

    created = client.post(
        f"/events/{event.event_id}/attendance/qr",
        json={"validMinutes": 15, "maxScans": 10},
        headers=auth_header(admin),
    )
    assert created.status_code == 201
    qr = created.get_json()["data"]
    assert qr["qr_code_image"].startswith("data:image/png;base64,")

    check = client.post("/attendance/qr/validate", json={"qrCodeData": qr["qr_code_data"]}, headers=auth_header(student))
    assert check.get_json()["data"]["is_valid"] is True

    scan = client.post("/attendance/qr", json={"qrCodeData": qr["qr_code_data"]}, headers=auth_header(student))
    assert scan.status_code == 200
    assert scan.get_json()["data"]["attendance_method"] == "qr_code"


def test_register_and_unregister_endpoints(client, scene, auth_header, world):
    admin, _, event = scene
    newcomer = world.add_user()

    res = client.post(f"/events/{event.event_id}/register", headers=auth_header(newcomer))
    assert res.status_code == 201
    assert res.get_json()["data"]["status"] == "registered"

    res = client.delete(f"/events/{event.event_id}/register", headers=auth_header(newcomer))
    assert res.status_code == 200
    assert world.events.get_registration(event_id=event.event_id, user_id=newcomer.user_id) is None


def test_full_event_registration_is_400(client, scene, auth_header, world):
    admin, _, _ = scene
    event = world.add_event(created_by=admin.user_id, max_participants=1)
    client.post(f"/events/{event.event_id}/register", headers=auth_header(world.add_user()))

    res = client.post(f"/events/{event.event_id}/register", headers=auth_header(world.add_user()))

    assert res.status_code == 400
    assert res.get_json() == {"success": False, "message": "Event is full", "data": None}


def test_points_endpoints(client, scene, auth_header, world):
    admin, student, _ = scene
    root = world.add_user(role=Role.SUPER_ADMIN)

    denied = client.post(
        f"/admin/users/{student.user_id}/points",
        json={"points": 5, "reason": "Bonus"},
        headers=auth_header(admin),
    )
    assert denied.status_code == 403

    granted = client.post(
        f"/admin/users/{student.user_id}/points",
        json={"points": 5, "volunteerHours": 1.5, "reason": "Bonus"},
        headers=auth_header(root),
    )
    assert granted.status_code == 201

    history = client.get(f"/users/{student.user_id}/points/history", headers=auth_header(student)).get_json()
    assert history["data"]["items"][0]["points_earned"] == 5
    assert client.get(f"/users/{student.user_id}/points/history", headers=auth_header(admin)).status_code == 403


def test_unknown_route_uses_envelope(client):
    res = client.get("/nope")

    assert res.status_code == 404
    assert res.get_json()["success"] is False
