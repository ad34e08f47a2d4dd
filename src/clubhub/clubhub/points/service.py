from __future__ import annotations

import logging
import uuid
from typing import Callable, Optional

from ..common.datetime_utils import now_utc
from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..notifications.service import NotificationService
from ..users.model import User
from ..users.repository import UserRepository
from .model import PointsEntry
from .repository import PointsRepository

logger = logging.getLogger(__name__)


class PointsService:
    def __init__(
        self,
        points: PointsRepository,
        users: UserRepository,
        notifications: NotificationService,
        *,
        clock: Optional[Callable] = None,
    ):
        self._points = points
        self._users = users
        self._notifications = notifications
        self._clock = clock or now_utc

    def _require_user(self, user_id: str) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found", context={"user_id": user_id})
        return user

    def adjust_points(
        self,
        *,
        user_id: str,
        points: int,
        volunteer_hours: float = 0.0,
        reason: str,
        adjusted_by: str,
        actor_role: Role,
    ) -> PointsEntry:
        """Manual correction of a user's totals by a super admin."""
        if not Role(actor_role).at_least(Role.SUPER_ADMIN):
            raise AuthorizationError("Only super admins can adjust points")
        reason = require_non_empty(reason, "reason")
        if not points and not volunteer_hours:
            raise ValidationError("Adjustment must change points or volunteer hours")

        self._require_user(user_id)

        entry = PointsEntry(
            entry_id=str(uuid.uuid4()),
            user_id=user_id,
            points_earned=int(points),
            volunteer_hours_earned=float(volunteer_hours or 0.0),
            reason=reason,
            created_by=adjusted_by,
            created_at=self._clock(),
        )
        self._points.apply_adjustment(entry)
        logger.info(
            "Points adjusted for user %s by %s: points=%+d hours=%+.2f (%s)",
            user_id,
            adjusted_by,
            entry.points_earned,
            entry.volunteer_hours_earned,
            reason,
        )

        if entry.points_earned > 0:
            self._notifications.notify_points_awarded(
                user_id=user_id,
                points=entry.points_earned,
                volunteer_hours=entry.volunteer_hours_earned,
                reason=reason,
            )
        return entry

    def get_history(
        self,
        user_id: str,
        *,
        page: int,
        limit: int,
        requester: User,
    ) -> tuple[list[PointsEntry], int]:
        if requester.user_id != user_id and not requester.role.at_least(Role.SUPER_ADMIN):
            raise AuthorizationError("You can only view your own points history")
        self._require_user(user_id)
        return self._points.list_for_user(user_id, page=page, limit=limit)
