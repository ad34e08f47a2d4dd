from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import isoformat


@dataclass(frozen=True)
class PointsEntry:
    """One row of the append-only points ledger; amounts may be negative."""

    entry_id: str
    user_id: str
    points_earned: int
    volunteer_hours_earned: float
    reason: str
    created_at: datetime
    event_id: Optional[str] = None
    created_by: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.entry_id,
            "user_id": self.user_id,
            "event_id": self.event_id,
            "points_earned": self.points_earned,
            "volunteer_hours_earned": self.volunteer_hours_earned,
            "reason": self.reason,
            "created_by": self.created_by,
            "created_at": isoformat(self.created_at),
        }
