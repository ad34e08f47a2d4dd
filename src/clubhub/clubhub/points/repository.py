from __future__ import annotations

from typing import Protocol

from .model import PointsEntry


class PointsRepository(Protocol):
    def apply_adjustment(self, entry: PointsEntry) -> None:
        """Add the entry's amounts to the user's totals and append the entry, atomically."""

        raise NotImplementedError

    def list_for_user(self, user_id: str, *, page: int, limit: int) -> tuple[list[PointsEntry], int]:
        raise NotImplementedError
