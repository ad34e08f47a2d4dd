from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import isoformat
from ..common.results import Partition
from ..core.enums import AttendanceAction
from ..events.model import EventRegistration

# {success: [user_id], failed: [{user_id, reason}]}
BulkAttendanceResult = Partition


@dataclass(frozen=True)
class AttendanceLog:
    """Append-only audit row: one per attendance change."""

    log_id: str
    event_id: str
    user_id: str
    marked_by: str
    action: AttendanceAction
    previous_status: bool
    new_status: bool
    created_at: datetime
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.log_id,
            "event_id": self.event_id,
            "user_id": self.user_id,
            "marked_by": self.marked_by,
            "action": self.action.value,
            "previous_status": self.previous_status,
            "new_status": self.new_status,
            "reason": self.reason,
            "created_at": isoformat(self.created_at),
        }


@dataclass(frozen=True)
class AttendeeRow:
    """Read-model: a registration joined with the registered user's profile."""

    registration: EventRegistration
    first_name: str
    last_name: str
    email: str
    student_id: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> dict:
        data = self.registration.to_dict()
        data["user"] = {
            "id": self.registration.user_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "student_id": self.student_id,
        }
        return data


@dataclass(frozen=True)
class EventQRCode:
    qr_id: str
    event_id: str
    qr_code_data: str
    valid_from: datetime
    valid_until: datetime
    created_by: str
    created_at: datetime
    max_scans: Optional[int] = None
    current_scans: int = 0
    is_active: bool = True

    def is_open_at(self, now: datetime) -> bool:
        return self.is_active and self.valid_from <= now <= self.valid_until

    @property
    def exhausted(self) -> bool:
        return self.max_scans is not None and self.current_scans >= self.max_scans

    def to_dict(self) -> dict:
        return {
            "id": self.qr_id,
            "event_id": self.event_id,
            "qr_code_data": self.qr_code_data,
            "valid_from": isoformat(self.valid_from),
            "valid_until": isoformat(self.valid_until),
            "max_scans": self.max_scans,
            "current_scans": self.current_scans,
            "is_active": self.is_active,
        }
