from __future__ import annotations

import logging
from typing import Callable, Optional

from ..common.datetime_utils import now_utc
from ..core.constants import EVENT_FULL_MESSAGE
from ..core.exceptions import DomainRuleError, NotFoundError
from ..notifications.service import NotificationService
from .model import Event, EventRegistration
from .repository import EventRepository

logger = logging.getLogger(__name__)


class RegistrationService:
    """Use case: students register for and withdraw from events."""

    def __init__(
        self,
        events: EventRepository,
        notifications: NotificationService,
        *,
        clock: Optional[Callable] = None,
    ):
        self._events = events
        self._notifications = notifications
        self._clock = clock or now_utc

    def get_event(self, event_id: str) -> Event:
        event = self._events.get_by_id(event_id)
        if not event:
            raise NotFoundError("Event not found", context={"event_id": event_id})
        return event

    def register(self, event_id: str, user_id: str) -> EventRegistration:
        event = self.get_event(event_id)
        now = self._clock()

        if not event.is_published:
            raise DomainRuleError("Event is not open for registration")
        if event.registration_deadline and now > event.registration_deadline:
            raise DomainRuleError("Registration deadline has passed")
        if now >= event.start_date:
            raise DomainRuleError("Event has already started")
        if self._events.get_registration(event_id=event_id, user_id=user_id):
            raise DomainRuleError("User is already registered for this event")

        registration = self._events.create_registration(
            event_id=event_id, user_id=user_id, capacity=event.max_participants
        )
        if registration is None:
            raise DomainRuleError(
                EVENT_FULL_MESSAGE,
                context={"event_id": event_id, "max_participants": event.max_participants},
            )
        logger.info("User %s registered for event %s", user_id, event_id)

        self._notifications.notify_registration(user_id=user_id, event_title=event.title)
        return registration

    def unregister(self, event_id: str, user_id: str) -> None:
        event = self.get_event(event_id)
        registration = self._events.get_registration(event_id=event_id, user_id=user_id)
        if not registration:
            raise DomainRuleError("User is not registered for this event")
        if self._clock() >= event.start_date:
            raise DomainRuleError("Cannot unregister after the event has started")
        if registration.is_marked:
            raise DomainRuleError("Cannot unregister after attendance has been marked")

        # marked concurrently between the read and the delete
        if not self._events.delete_registration(event_id=event_id, user_id=user_id):
            raise DomainRuleError("Cannot unregister after attendance has been marked")

        logger.info("User %s unregistered from event %s", user_id, event_id)
        self._notifications.notify_cancellation(user_id=user_id, event_title=event.title)
