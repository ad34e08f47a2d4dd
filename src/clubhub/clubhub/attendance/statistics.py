from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable

from ..core.enums import RegistrationStatus
from ..events.model import EventRegistration


@dataclass(frozen=True)
class AttendanceStatistics:
    total_registered: int
    total_attended: int
    total_absent: int
    attendance_rate: float
    total_points_awarded: int
    total_volunteer_hours_awarded: float

    def to_dict(self) -> dict:
        return asdict(self)


def compute_statistics(registrations: Iterable[EventRegistration]) -> AttendanceStatistics:
    """Aggregate an event's registrations. Cancelled rows are not counted."""
    counted = [r for r in registrations if r.status != RegistrationStatus.CANCELLED]

    total = len(counted)
    attended = sum(1 for r in counted if r.attended)
    rate = round(attended / total * 100, 2) if total else 0.0

    return AttendanceStatistics(
        total_registered=total,
        total_attended=attended,
        total_absent=total - attended,
        attendance_rate=rate,
        total_points_awarded=sum(r.points_awarded for r in counted),
        total_volunteer_hours_awarded=round(sum(r.volunteer_hours_awarded for r in counted), 2),
    )
