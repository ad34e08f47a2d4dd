from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from typing import Sequence

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..common.datetime_utils import isoformat
from ..events.model import Event
from .model import AttendeeRow
from .statistics import AttendanceStatistics

CSV_FIELDS = [
    "user_id",
    "student_id",
    "full_name",
    "email",
    "status",
    "attended",
    "attendance_method",
    "check_in_time",
    "check_out_time",
    "points_awarded",
    "volunteer_hours_awarded",
    "notes",
]


@dataclass(frozen=True)
class AttendanceReport:
    event: Event
    statistics: AttendanceStatistics
    attendees: Sequence[AttendeeRow]

    def to_dict(self) -> dict:
        return {
            "event": self.event.to_dict(),
            "statistics": self.statistics.to_dict(),
            "registrations": [a.to_dict() for a in self.attendees],
        }

    def filename(self, extension: str) -> str:
        slug = "".join(ch if ch.isalnum() else "_" for ch in self.event.title).strip("_") or "event"
        return f"attendance_{slug}_{self.event.start_date.strftime('%Y%m%d')}.{extension}"


def _csv_row(a: AttendeeRow) -> dict:
    r = a.registration
    return {
        "user_id": r.user_id,
        "student_id": a.student_id or "",
        "full_name": a.full_name,
        "email": a.email,
        "status": r.status.value,
        "attended": "yes" if r.attended else "no",
        "attendance_method": r.attendance_method.value if r.attendance_method else "",
        "check_in_time": isoformat(r.check_in_time) or "",
        "check_out_time": isoformat(r.check_out_time) or "",
        "points_awarded": r.points_awarded,
        "volunteer_hours_awarded": r.volunteer_hours_awarded,
        "notes": r.notes or "",
    }


def render_csv(report: AttendanceReport) -> bytes:
    """UTF-8 with BOM so spreadsheet apps pick the right encoding."""
    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=CSV_FIELDS)
    writer.writeheader()
    for a in report.attendees:
        writer.writerow(_csv_row(a))
    return out.getvalue().encode("utf-8-sig")


def render_pdf(report: AttendanceReport) -> bytes:
    output = io.BytesIO()
    doc = SimpleDocTemplate(output, pagesize=landscape(A4), topMargin=30, bottomMargin=30)
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle("ReportTitle", parent=styles["Heading1"], fontSize=16, alignment=1, spaceAfter=20)

    stats = report.statistics
    elements = [
        Paragraph("Attendance Report", title_style),
        Paragraph(f"<b>{report.event.title}</b>", styles["Heading2"]),
        Spacer(1, 10),
        Paragraph(f"Date: {report.event.start_date.strftime('%B %d, %Y')}", styles["Normal"]),
        Paragraph(
            f"Registered: {stats.total_registered} | Attended: {stats.total_attended} | "
            f"Absent: {stats.total_absent} | Rate: {stats.attendance_rate:.2f}%",
            styles["Normal"],
        ),
        Spacer(1, 20),
    ]

    data = [["#", "Name", "Student ID", "Email", "Status", "Check-in", "Points"]]
    for idx, a in enumerate(report.attendees, 1):
        r = a.registration
        data.append(
            [
                str(idx),
                a.full_name,
                a.student_id or "-",
                a.email,
                r.status.value,
                r.check_in_time.strftime("%H:%M") if r.check_in_time else "-",
                str(r.points_awarded),
            ]
        )

    table = Table(data, colWidths=[30, 150, 80, 190, 80, 70, 50], repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#4F46E5")),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("ALIGN", (0, 0), (-1, -1), "CENTER"),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#F3F4F6")]),
            ]
        )
    )
    elements.append(table)

    doc.build(elements)
    return output.getvalue()
