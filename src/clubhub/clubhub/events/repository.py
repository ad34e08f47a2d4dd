from __future__ import annotations

from typing import Optional, Protocol

from .model import Event, EventRegistration


class EventRepository(Protocol):
    def get_by_id(self, event_id: str) -> Optional[Event]:
        raise NotImplementedError

    def get_registration(self, *, event_id: str, user_id: str) -> Optional[EventRegistration]:
        raise NotImplementedError

    def create_registration(
        self, *, event_id: str, user_id: str, capacity: Optional[int] = None
    ) -> Optional[EventRegistration]:
        """Insert a ``registered`` row; returns None when ``capacity`` is already taken.

        The count and the insert must be atomic with respect to other
        registrations for the same event.
        """

        raise NotImplementedError

    def delete_registration(self, *, event_id: str, user_id: str) -> bool:
        """Delete an unmarked registration; returns False if nothing was removed."""

        raise NotImplementedError
