from __future__ import annotations

from typing import Optional, Protocol

from .model import ClubMembership


class ClubRepository(Protocol):
    def get_membership(self, *, user_id: str, club_id: str) -> Optional[ClubMembership]:
        raise NotImplementedError
