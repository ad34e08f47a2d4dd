from __future__ import annotations

import csv
import io

from src.clubhub.clubhub.attendance.reports import render_csv, render_pdf
from src.clubhub.clubhub.core.enums import Role


def _report(world):
    admin = world.add_user(role=Role.CLUB_ADMIN)
    event = world.add_event(created_by=admin.user_id, title="Food Drive")
    present = world.add_user(first_name="Ada", last_name="Lovelace", student_id="S100")
    absent = world.add_user(first_name="Alan", last_name="Turing")
    world.register(event, present)
    world.register(event, absent)
    world.attendance_service.check_in(event.event_id, present.user_id, marked_by=admin.user_id)
    return world.attendance_service.build_report(event.event_id)


def test_json_report_has_event_statistics_and_rows(world):
    data = _report(world).to_dict()

    assert data["event"]["title"] == "Food Drive"
    assert data["statistics"]["total_registered"] == 2
    assert data["statistics"]["attendance_rate"] == 50.0
    assert len(data["registrations"]) == 2


def test_csv_report_is_utf8_with_bom(world):
    body = render_csv(_report(world))

    assert body.startswith(b"\xef\xbb\xbf")
    rows = list(csv.DictReader(io.StringIO(body.decode("utf-8-sig"))))
    ada = next(r for r in rows if r["full_name"] == "Ada Lovelace")
    assert ada["attended"] == "yes"
    assert ada["student_id"] == "S100"
    assert ada["points_awarded"] == "10"


def test_pdf_report_renders(world):
    report = _report(world)

    assert render_pdf(report).startswith(b"%PDF")
    assert report.filename("pdf").startswith("attendance_Food_Drive_")
