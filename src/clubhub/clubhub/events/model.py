from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import isoformat
from ..core.enums import AttendanceMethod, RegistrationStatus


@dataclass(frozen=True)
class Event:
    """Domain entity: Event (belongs to exactly one club)."""

    event_id: str
    club_id: str
    title: str
    created_by: str
    start_date: datetime
    end_date: datetime
    points_reward: int = 0
    volunteer_hours: float = 0.0
    max_participants: Optional[int] = None
    registration_deadline: Optional[datetime] = None
    is_published: bool = True

    def to_dict(self) -> dict:
        return {
            "id": self.event_id,
            "club_id": self.club_id,
            "title": self.title,
            "start_date": isoformat(self.start_date),
            "end_date": isoformat(self.end_date),
            "points_reward": self.points_reward,
            "volunteer_hours": self.volunteer_hours,
            "max_participants": self.max_participants,
            "registration_deadline": isoformat(self.registration_deadline),
        }


@dataclass(frozen=True)
class EventRegistration:
    """Join entity between User and Event, unique per (user_id, event_id)."""

    registration_id: str
    user_id: str
    event_id: str
    registration_date: datetime
    status: RegistrationStatus = RegistrationStatus.REGISTERED
    attended: bool = False
    attendance_marked_by: Optional[str] = None
    attendance_marked_at: Optional[datetime] = None
    attendance_method: Optional[AttendanceMethod] = None
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    points_awarded: int = 0
    volunteer_hours_awarded: float = 0.0
    notes: Optional[str] = None

    @property
    def is_marked(self) -> bool:
        return self.attendance_marked_at is not None

    def to_dict(self) -> dict:
        return {
            "id": self.registration_id,
            "user_id": self.user_id,
            "event_id": self.event_id,
            "registration_date": isoformat(self.registration_date),
            "status": self.status.value,
            "attended": self.attended,
            "attendance_marked_by": self.attendance_marked_by,
            "attendance_marked_at": isoformat(self.attendance_marked_at),
            "attendance_method": self.attendance_method.value if self.attendance_method else None,
            "check_in_time": isoformat(self.check_in_time),
            "check_out_time": isoformat(self.check_out_time),
            "points_awarded": self.points_awarded,
            "volunteer_hours_awarded": self.volunteer_hours_awarded,
            "notes": self.notes,
        }
