from __future__ import annotations

from typing import ContextManager, Optional, Protocol, Sequence

from ..events.model import EventRegistration
from ..points.model import PointsEntry
from .model import AttendanceLog, AttendeeRow, EventQRCode


class AttendanceTransaction(Protocol):
    """Writes that make up one attendance mark; all or nothing."""

    def lock_registration(self, *, event_id: str, user_id: str) -> Optional[EventRegistration]:
        """Read the registration and hold a row lock until the transaction ends."""

        raise NotImplementedError

    def update_registration(self, registration: EventRegistration) -> None:
        raise NotImplementedError

    def adjust_user_totals(self, *, user_id: str, points: int, volunteer_hours: float) -> None:
        raise NotImplementedError

    def append_points_history(self, entry: PointsEntry) -> None:
        raise NotImplementedError

    def append_log(self, log: AttendanceLog) -> None:
        raise NotImplementedError


class AttendanceRepository(Protocol):
    def transaction(self) -> ContextManager[AttendanceTransaction]:
        raise NotImplementedError

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
        raise NotImplementedError

    def all_attendees(self, event_id: str) -> Sequence[AttendeeRow]:
        raise NotImplementedError

    def list_logs(
        self,
        *,
        event_id: str,
        page: int,
        limit: int,
        user_id: Optional[str] = None,
    ) -> tuple[list[AttendanceLog], int]:
        """Newest first."""

        raise NotImplementedError

    def create_qr_code(self, qr: EventQRCode) -> None:
        raise NotImplementedError

    def get_qr_code(self, qr_code_data: str) -> Optional[EventQRCode]:
        raise NotImplementedError

    def reserve_qr_scan(self, qr_id: str) -> bool:
        """Increment ``current_scans`` unless the limit is reached; False when it is."""

        raise NotImplementedError

    def release_qr_scan(self, qr_id: str) -> None:
        """Give back a scan taken by ``reserve_qr_scan`` whose mark did not commit."""

        raise NotImplementedError
