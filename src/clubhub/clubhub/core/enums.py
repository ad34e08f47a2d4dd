from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Platform role used for authorization, ordered from least to most privileged."""

    STUDENT = "student"
    CLUB_ADMIN = "club_admin"
    SUPER_ADMIN = "super_admin"

    @property
    def rank(self) -> int:
        return _ROLE_ORDER.index(self)

    def at_least(self, required: "Role") -> bool:
        return self.rank >= Role(required).rank


_ROLE_ORDER = (Role.STUDENT, Role.CLUB_ADMIN, Role.SUPER_ADMIN)


class ClubRole(str, Enum):
    """Membership role inside a single club."""

    MEMBER = "member"
    CORE_MEMBER = "core_member"
    SECRETARY = "secretary"
    TREASURER = "treasurer"
    VICE_PRESIDENT = "vice_president"
    PRESIDENT = "president"

    @property
    def is_officer(self) -> bool:
        return self in (ClubRole.PRESIDENT, ClubRole.VICE_PRESIDENT)


class RegistrationStatus(str, Enum):
    REGISTERED = "registered"
    WAITLISTED = "waitlisted"
    CANCELLED = "cancelled"
    ATTENDED = "attended"
    NO_SHOW = "no_show"


class AttendanceMethod(str, Enum):
    MANUAL = "manual"
    QR_CODE = "qr_code"
    GEOFENCE = "geofence"
    BIOMETRIC = "biometric"


class AttendanceAction(str, Enum):
    MARKED_PRESENT = "marked_present"
    MARKED_ABSENT = "marked_absent"
    UNMARKED = "unmarked"
    UPDATED_STATUS = "updated_status"


class NotificationType(str, Enum):
    REGISTRATION = "registration"
    CANCELLATION = "cancellation"
    ATTENDANCE_MARKED = "attendance_marked"
    POINTS_AWARDED = "points_awarded"


class ReportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"
    PDF = "pdf"
