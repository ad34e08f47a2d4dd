from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..core.enums import NotificationType


@dataclass(frozen=True)
class Notification:
    notification_id: str
    user_id: str
    title: str
    message: str
    type: NotificationType
    created_at: datetime
    is_read: bool = False
