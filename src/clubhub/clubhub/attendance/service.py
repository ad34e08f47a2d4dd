from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional

from ..common.datetime_utils import now_utc, to_naive_utc
from ..common.results import capture, partition_results
from ..core.constants import (
    CHECKOUT_BEFORE_CHECKIN_MESSAGE,
    DEFAULT_QR_SESSION_MINUTES,
    NOT_REGISTERED_MESSAGE,
)
from ..core.enums import AttendanceAction, AttendanceMethod, RegistrationStatus
from ..core.exceptions import (
    AuthorizationError,
    ClubHubError,
    DomainRuleError,
    ErrorKind,
    NotFoundError,
    ValidationError,
)
from ..events.model import Event, EventRegistration
from ..events.repository import EventRepository
from ..notifications.service import NotificationService
from ..points.model import PointsEntry
from ..users.model import User
from .model import AttendanceLog, AttendeeRow, BulkAttendanceResult, EventQRCode
from .permissions import AttendancePermission
from .qr import QRCodeSigner, QRValidation, render_png
from .reports import AttendanceReport
from .repository import AttendanceRepository
from .statistics import AttendanceStatistics, compute_statistics

logger = logging.getLogger(__name__)

QR_INVALID_MESSAGE = "QR code is invalid or expired"
QR_LIMIT_MESSAGE = "QR code scan limit reached"
BULK_INTERNAL_ERROR = "Internal error"


class AttendanceService:
    """Use case: mark, audit and report event attendance.

    Every attendance change goes through ``mark_attendance``; check-in,
    check-out, QR scans and bulk marking are thin wrappers around it.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        events: EventRepository,
        permission: AttendancePermission,
        notifications: NotificationService,
        qr_signer: QRCodeSigner,
        *,
        clock: Optional[Callable] = None,
    ):
        self._attendance = attendance
        self._events = events
        self._permission = permission
        self._notifications = notifications
        self._qr = qr_signer
        self._clock = clock or now_utc

    def get_event(self, event_id: str) -> Event:
        event = self._events.get_by_id(event_id)
        if not event:
            raise NotFoundError("Event not found", context={"event_id": event_id})
        return event

    def can_mark(self, user_id: str, event_id: str) -> bool:
        return self._permission.can_mark(user_id, event_id)

    def require_can_mark(self, user: User, event_id: str) -> Event:
        """404 for a missing event first, then 403 for a user who may not mark it."""
        event = self.get_event(event_id)
        if not self._permission.can_mark(user.user_id, event_id):
            raise AuthorizationError("You do not have permission to manage attendance for this event")
        return event

    def mark_attendance(
        self,
        event_id: str,
        user_id: str,
        *,
        attended: bool,
        marked_by: str,
        method: AttendanceMethod = AttendanceMethod.MANUAL,
        check_in_time: Optional[datetime] = None,
        check_out_time: Optional[datetime] = None,
        notes: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> EventRegistration:
        event = self.get_event(event_id)
        method = AttendanceMethod(method)
        now = self._clock()

        with self._attendance.transaction() as tx:
            current = tx.lock_registration(event_id=event_id, user_id=user_id)
            if not current:
                raise DomainRuleError(NOT_REGISTERED_MESSAGE, context={"event_id": event_id, "user_id": user_id})

            previous = current.attended
            updated = replace(
                current,
                attended=attended,
                attendance_marked_by=marked_by,
                attendance_marked_at=now,
                attendance_method=method,
                check_in_time=to_naive_utc(check_in_time) or current.check_in_time,
                check_out_time=to_naive_utc(check_out_time) or current.check_out_time,
                notes=notes if notes is not None else current.notes,
                status=RegistrationStatus.ATTENDED if attended else RegistrationStatus.NO_SHOW,
                points_awarded=event.points_reward if attended else 0,
                volunteer_hours_awarded=event.volunteer_hours if attended else 0.0,
            )
            tx.update_registration(updated)

            flipped = previous != attended
            if flipped:
                sign = 1 if attended else -1
                points = sign * event.points_reward
                hours = sign * event.volunteer_hours
                tx.adjust_user_totals(user_id=user_id, points=points, volunteer_hours=hours)
                if points or hours:
                    tx.append_points_history(
                        PointsEntry(
                            entry_id=str(uuid.uuid4()),
                            user_id=user_id,
                            event_id=event_id,
                            points_earned=points,
                            volunteer_hours_earned=hours,
                            reason=f"{'Attended' if attended else 'Attendance revoked'}: {event.title}",
                            created_by=marked_by,
                            created_at=now,
                        )
                    )

            tx.append_log(
                AttendanceLog(
                    log_id=str(uuid.uuid4()),
                    event_id=event_id,
                    user_id=user_id,
                    marked_by=marked_by,
                    action=AttendanceAction.MARKED_PRESENT if attended else AttendanceAction.MARKED_ABSENT,
                    previous_status=previous,
                    new_status=attended,
                    reason=reason or notes,
                    created_at=now,
                )
            )

        logger.info(
            "Attendance for user %s on event %s marked %s by %s (method=%s, flipped=%s)",
            user_id,
            event_id,
            "present" if attended else "absent",
            marked_by,
            method.value,
            flipped,
        )
        self._notify_marked(event, updated, awarded=flipped and attended)
        return updated

    def _notify_marked(self, event: Event, registration: EventRegistration, *, awarded: bool) -> None:
        if awarded and (event.points_reward or event.volunteer_hours):
            self._notifications.notify_points_awarded(
                user_id=registration.user_id,
                points=event.points_reward,
                volunteer_hours=event.volunteer_hours,
                reason=f"Attended {event.title}",
            )
        else:
            self._notifications.notify_attendance_marked(
                user_id=registration.user_id,
                event_title=event.title,
                attended=registration.attended,
            )

    def mark_bulk_attendance(
        self,
        event_id: str,
        user_ids: Iterable[str],
        *,
        attended: bool,
        marked_by: str,
        method: AttendanceMethod = AttendanceMethod.MANUAL,
        notes: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> BulkAttendanceResult:
        """Mark each user independently; one failure never stops the rest."""

        def describe(e: Exception) -> str:
            if isinstance(e, ClubHubError) and e.kind != ErrorKind.INTERNAL:
                return e.message
            logger.exception("Unexpected error in bulk attendance for event %s", event_id)
            return BULK_INTERNAL_ERROR

        results = [
            capture(
                uid,
                lambda uid=uid: self.mark_attendance(
                    event_id,
                    uid,
                    attended=attended,
                    marked_by=marked_by,
                    method=method,
                    notes=notes,
                    reason=reason,
                ),
                describe=describe,
            )
            for uid in user_ids
        ]
        outcome = partition_results(results)
        logger.info(
            "Bulk attendance on event %s: %d succeeded, %d failed",
            event_id,
            len(outcome.success),
            len(outcome.failed),
        )
        return outcome

    def check_in(
        self,
        event_id: str,
        user_id: str,
        *,
        marked_by: str,
        notes: Optional[str] = None,
        method: AttendanceMethod = AttendanceMethod.MANUAL,
    ) -> EventRegistration:
        return self.mark_attendance(
            event_id,
            user_id,
            attended=True,
            marked_by=marked_by,
            method=method,
            check_in_time=self._clock(),
            notes=notes,
        )

    def check_out(
        self,
        event_id: str,
        user_id: str,
        *,
        marked_by: str,
        notes: Optional[str] = None,
    ) -> EventRegistration:
        self.get_event(event_id)
        current = self._events.get_registration(event_id=event_id, user_id=user_id)
        if not current:
            raise DomainRuleError(NOT_REGISTERED_MESSAGE, context={"event_id": event_id, "user_id": user_id})
        if not current.attended or current.check_in_time is None:
            raise DomainRuleError(CHECKOUT_BEFORE_CHECKIN_MESSAGE, context={"event_id": event_id, "user_id": user_id})

        return self.mark_attendance(
            event_id,
            user_id,
            attended=True,
            marked_by=marked_by,
            method=current.attendance_method or AttendanceMethod.MANUAL,
            check_out_time=self._clock(),
            notes=notes,
        )

    def create_event_qr_code(
        self,
        event_id: str,
        *,
        created_by: str,
        valid_minutes: int = DEFAULT_QR_SESSION_MINUTES,
        max_scans: Optional[int] = None,
    ) -> tuple[EventQRCode, bytes]:
        self.get_event(event_id)
        if valid_minutes <= 0:
            raise ValidationError("valid_minutes must be positive", context={"field": "valid_minutes"})
        if max_scans is not None and max_scans <= 0:
            raise ValidationError("max_scans must be positive", context={"field": "max_scans"})

        now = self._clock()
        qr = EventQRCode(
            qr_id=str(uuid.uuid4()),
            event_id=event_id,
            qr_code_data=self._qr.generate(event_id),
            valid_from=now,
            valid_until=now + timedelta(minutes=int(valid_minutes)),
            max_scans=max_scans,
            created_by=created_by,
            created_at=now,
        )
        self._attendance.create_qr_code(qr)
        logger.info("QR code %s created for event %s by %s", qr.qr_id, event_id, created_by)
        return qr, render_png(qr.qr_code_data)

    def validate_qr_code(self, qr_code_data: str) -> QRValidation:
        result = self._qr.validate(qr_code_data)
        if not result.is_valid:
            return result

        stored = self._attendance.get_qr_code(qr_code_data)
        if not stored or stored.event_id != result.event_id or not stored.is_open_at(self._clock()):
            return QRValidation(is_valid=False, event_id=result.event_id, error="QR code is not active")
        if stored.exhausted:
            return QRValidation(is_valid=False, event_id=result.event_id, error=QR_LIMIT_MESSAGE)
        return result

    def mark_attendance_by_qr(self, qr_code_data: str, user_id: str) -> EventRegistration:
        signed = self._qr.validate(qr_code_data)
        if not signed.is_valid:
            raise DomainRuleError(QR_INVALID_MESSAGE, context={"error": signed.error})

        stored = self._attendance.get_qr_code(qr_code_data)
        if not stored or stored.event_id != signed.event_id or not stored.is_open_at(self._clock()):
            raise DomainRuleError(QR_INVALID_MESSAGE)
        if stored.exhausted:
            raise DomainRuleError(QR_LIMIT_MESSAGE)

        event_id = stored.event_id
        self.get_event(event_id)
        if not self._events.get_registration(event_id=event_id, user_id=user_id):
            raise DomainRuleError(NOT_REGISTERED_MESSAGE, context={"event_id": event_id, "user_id": user_id})

        # conditional increment: loses the race cleanly when the last scan is taken
        if not self._attendance.reserve_qr_scan(stored.qr_id):
            raise DomainRuleError(QR_LIMIT_MESSAGE)

        logger.info("QR scan %s by user %s for event %s", stored.qr_id, user_id, event_id)
        try:
            return self.mark_attendance(
                event_id,
                user_id,
                attended=True,
                marked_by=user_id,
                method=AttendanceMethod.QR_CODE,
                check_in_time=self._clock(),
            )
        except Exception:
            # a scan only counts once the mark has committed
            self._attendance.release_qr_scan(stored.qr_id)
            logger.warning("Released QR scan %s after failed mark for user %s", stored.qr_id, user_id)
            raise

    def list_attendance(
        self,
        event_id: str,
        *,
        page: int,
        limit: int,
        search: Optional[str] = None,
        status: Optional[str] = None,
        sort_by: str = "registration_date",
        sort_order: str = "desc",
    ) -> tuple[list[AttendeeRow], int]:
        if status:
            try:
                status = RegistrationStatus(status).value
            except ValueError:
                raise ValidationError(f"Unknown status: {status}", context={"field": "status"})
        return self._attendance.list_attendees(
            event_id=event_id,
            page=page,
            limit=limit,
            search=search.strip() if search else None,
            status=status,
            sort_by=sort_by,
            sort_order=sort_order,
        )

    def get_attendance_statistics(self, event_id: str) -> AttendanceStatistics:
        self.get_event(event_id)
        return compute_statistics(a.registration for a in self._attendance.all_attendees(event_id))

    def get_attendance_logs(
        self,
        event_id: str,
        *,
        page: int,
        limit: int,
        user_id: Optional[str] = None,
    ) -> tuple[list[AttendanceLog], int]:
        self.get_event(event_id)
        return self._attendance.list_logs(event_id=event_id, page=page, limit=limit, user_id=user_id)

    def build_report(self, event_id: str) -> AttendanceReport:
        event = self.get_event(event_id)
        attendees = list(self._attendance.all_attendees(event_id))
        return AttendanceReport(
            event=event,
            statistics=compute_statistics(a.registration for a in attendees),
            attendees=attendees,
        )
