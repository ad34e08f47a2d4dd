from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Note: plain data object, no DB access. ``total_points`` and
    ``total_volunteer_hours`` are running totals maintained by the
    attendance marker and admin point adjustments.
    """

    user_id: str
    email: str
    password_hash: str
    first_name: str
    last_name: str
    role: Role
    student_id: Optional[str] = None
    is_active: bool = True
    total_points: int = 0
    total_volunteer_hours: float = 0.0

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_public_dict(self) -> dict:
        return {
            "id": self.user_id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "student_id": self.student_id,
            "role": self.role.value,
            "total_points": self.total_points,
            "total_volunteer_hours": self.total_volunteer_hours,
        }
