from __future__ import annotations

import logging
import uuid
from typing import Callable, Optional

from ..common.datetime_utils import now_utc
from ..core.enums import NotificationType
from .model import Notification
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationService:
    """In-app notifications.

    Every ``notify_*`` method is fire-and-forget: a failure to store the
    notification is logged and never reaches the caller.
    """

    def __init__(self, repo: NotificationRepository, *, clock: Optional[Callable] = None):
        self._repo = repo
        self._clock = clock or now_utc

    def notify_registration(self, *, user_id: str, event_title: str) -> None:
        self._send(
            user_id,
            NotificationType.REGISTRATION,
            "Event registration",
            f"You are registered for {event_title}.",
        )

    def notify_cancellation(self, *, user_id: str, event_title: str) -> None:
        self._send(
            user_id,
            NotificationType.CANCELLATION,
            "Registration cancelled",
            f"Your registration for {event_title} has been cancelled.",
        )

    def notify_attendance_marked(self, *, user_id: str, event_title: str, attended: bool) -> None:
        status = "present" if attended else "absent"
        self._send(
            user_id,
            NotificationType.ATTENDANCE_MARKED,
            "Attendance recorded",
            f"You were marked {status} for {event_title}.",
        )

    def notify_points_awarded(self, *, user_id: str, points: int, volunteer_hours: float, reason: str) -> None:
        message = f"You earned {points} points"
        if volunteer_hours:
            message += f" and {volunteer_hours:g} volunteer hours"
        self._send(user_id, NotificationType.POINTS_AWARDED, "Points awarded", f"{message}: {reason}.")

    def _send(self, user_id: str, kind: NotificationType, title: str, message: str) -> None:
        try:
            self._repo.add(
                Notification(
                    notification_id=str(uuid.uuid4()),
                    user_id=user_id,
                    title=title,
                    message=message,
                    type=kind,
                    created_at=self._clock(),
                )
            )
        except Exception:
            logger.exception("Failed to store %s notification for user %s", kind.value, user_id)
