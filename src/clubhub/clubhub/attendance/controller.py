from __future__ import annotations

import base64

from flask import Flask, request

from ..auth.decorators import build_auth_decorators, current_user
from ..common.http import ok, paginated, parse_body
from ..common.validators import parse_page, require_uuid
from ..container import Container
from ..core.enums import ReportFormat
from ..core.exceptions import ValidationError
from .reports import render_csv, render_pdf
from .schemas import BulkAttendanceBody, CheckBody, CreateQRBody, MarkAttendanceBody, QRScanBody


def register(app: Flask, container: Container) -> None:
    bearer_required, _ = build_auth_decorators(container.auth_service)
    service = container.attendance_service

    def _gate(event_id: str) -> str:
        """Validate the path id, then 404 before 403."""
        event_id = require_uuid(event_id, "event_id")
        service.require_can_mark(current_user(), event_id)
        return event_id

    def _attachment(body: bytes, *, mimetype: str, filename: str):
        return app.response_class(
            body,
            mimetype=mimetype,
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/events/<event_id>/attendance", methods=["POST"], endpoint="attendance_mark")
    @bearer_required
    def attendance_mark(event_id: str):
        event_id = _gate(event_id)
        body = parse_body(MarkAttendanceBody)
        registration = service.mark_attendance(
            event_id,
            body.user_id,
            attended=body.attended,
            marked_by=current_user().user_id,
            method=body.method,
            check_in_time=body.check_in_time,
            check_out_time=body.check_out_time,
            notes=body.notes,
            reason=body.reason,
        )
        return ok(registration.to_dict(), "Attendance marked")

    @app.route("/events/<event_id>/attendance/bulk", methods=["POST"], endpoint="attendance_bulk")
    @bearer_required
    def attendance_bulk(event_id: str):
        event_id = _gate(event_id)
        body = parse_body(BulkAttendanceBody)
        outcome = service.mark_bulk_attendance(
            event_id,
            body.user_ids,
            attended=body.attended,
            marked_by=current_user().user_id,
            method=body.method,
            notes=body.notes,
            reason=body.reason,
        )
        return ok(
            outcome.to_dict(),
            f"Bulk attendance processed: {len(outcome.success)} succeeded, {len(outcome.failed)} failed",
        )

    @app.route("/events/<event_id>/attendance", methods=["GET"], endpoint="attendance_list")
    @bearer_required
    def attendance_list(event_id: str):
        event_id = _gate(event_id)
        page, limit = parse_page(request.args.get("page"), request.args.get("limit"))
        rows, total = service.list_attendance(
            event_id,
            page=page,
            limit=limit,
            search=request.args.get("search"),
            status=request.args.get("status"),
            sort_by=request.args.get("sort_by") or request.args.get("sortBy") or "registration_date",
            sort_order=request.args.get("sort_order") or request.args.get("sortOrder") or "desc",
        )
        return paginated([r.to_dict() for r in rows], page=page, limit=limit, total=total)

    @app.route("/events/<event_id>/attendance/stats", methods=["GET"], endpoint="attendance_stats")
    @bearer_required
    def attendance_stats(event_id: str):
        event_id = _gate(event_id)
        return ok(service.get_attendance_statistics(event_id).to_dict())

    @app.route("/events/<event_id>/attendance/logs", methods=["GET"], endpoint="attendance_logs")
    @bearer_required
    def attendance_logs(event_id: str):
        event_id = _gate(event_id)
        page, limit = parse_page(request.args.get("page"), request.args.get("limit"))
        user_id = request.args.get("user_id") or request.args.get("userId")
        if user_id:
            user_id = require_uuid(user_id, "user_id")
        logs, total = service.get_attendance_logs(event_id, page=page, limit=limit, user_id=user_id)
        return paginated([log.to_dict() for log in logs], page=page, limit=limit, total=total)

    @app.route("/events/<event_id>/attendance/checkin", methods=["POST"], endpoint="attendance_checkin")
    @bearer_required
    def attendance_checkin(event_id: str):
        event_id = _gate(event_id)
        body = parse_body(CheckBody)
        registration = service.check_in(event_id, body.user_id, marked_by=current_user().user_id, notes=body.notes)
        return ok(registration.to_dict(), "Checked in")

    @app.route("/events/<event_id>/attendance/checkout", methods=["POST"], endpoint="attendance_checkout")
    @bearer_required
    def attendance_checkout(event_id: str):
        event_id = _gate(event_id)
        body = parse_body(CheckBody)
        registration = service.check_out(event_id, body.user_id, marked_by=current_user().user_id, notes=body.notes)
        return ok(registration.to_dict(), "Checked out")

    @app.route("/events/<event_id>/attendance/report", methods=["GET"], endpoint="attendance_report")
    @bearer_required
    def attendance_report(event_id: str):
        event_id = _gate(event_id)
        try:
            fmt = ReportFormat((request.args.get("format") or "json").lower())
        except ValueError:
            raise ValidationError("format must be one of json, csv, pdf", context={"field": "format"})

        report = service.build_report(event_id)
        if fmt == ReportFormat.CSV:
            return _attachment(render_csv(report), mimetype="text/csv", filename=report.filename("csv"))
        if fmt == ReportFormat.PDF:
            return _attachment(render_pdf(report), mimetype="application/pdf", filename=report.filename("pdf"))
        return ok(report.to_dict())

    @app.route("/events/<event_id>/attendance/qr", methods=["POST"], endpoint="attendance_qr_create")
    @bearer_required
    def attendance_qr_create(event_id: str):
        event_id = _gate(event_id)
        body = parse_body(CreateQRBody)
        qr, png = service.create_event_qr_code(
            event_id,
            created_by=current_user().user_id,
            valid_minutes=body.valid_minutes,
            max_scans=body.max_scans,
        )
        data = qr.to_dict()
        data["qr_code_image"] = "data:image/png;base64," + base64.b64encode(png).decode("ascii")
        return ok(data, "QR code created", 201)

    @app.route("/attendance/qr", methods=["POST"], endpoint="attendance_qr_scan")
    @bearer_required
    def attendance_qr_scan():
        body = parse_body(QRScanBody)
        registration = service.mark_attendance_by_qr(body.qr_code_data, current_user().user_id)
        return ok(registration.to_dict(), "Attendance marked via QR code")

    @app.route("/attendance/qr/validate", methods=["POST"], endpoint="attendance_qr_validate")
    @bearer_required
    def attendance_qr_validate():
        body = parse_body(QRScanBody)
        return ok(service.validate_qr_code(body.qr_code_data).to_dict())
