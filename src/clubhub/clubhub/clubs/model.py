from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import ClubRole


@dataclass(frozen=True)
class ClubMembership:
    user_id: str
    club_id: str
    role: ClubRole
    is_active: bool = True

    @property
    def is_active_officer(self) -> bool:
        return self.is_active and self.role.is_officer
