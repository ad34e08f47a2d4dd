from __future__ import annotations

import logging

from ..clubs.repository import ClubRepository
from ..core.enums import Role
from ..events.repository import EventRepository
from ..users.repository import UserRepository

logger = logging.getLogger(__name__)


class AttendancePermission:
    """Who may mark attendance for an event.

    Allowed: the event's creator, an active president or vice president of
    the owning club, or a super admin. Read-only; never raises.
    """

    def __init__(self, events: EventRepository, clubs: ClubRepository, users: UserRepository):
        self._events = events
        self._clubs = clubs
        self._users = users

    def can_mark(self, user_id: str, event_id: str) -> bool:
        try:
            event = self._events.get_by_id(event_id)
            if not event:
                return False
            if event.created_by == user_id:
                return True

            membership = self._clubs.get_membership(user_id=user_id, club_id=event.club_id)
            if membership and membership.is_active_officer:
                return True

            user = self._users.get_by_id(user_id)
            return bool(user and user.is_active and user.role.at_least(Role.SUPER_ADMIN))
        except Exception:
            logger.exception("Permission check failed for user %s on event %s", user_id, event_id)
            return False
