from __future__ import annotations

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .model import Notification
from .repository import NotificationRepository


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, notification: Notification) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications
                    (notification_id, user_id, title, message, type, is_read, created_at)
                VALUES (%s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    notification.notification_id,
                    notification.user_id,
                    notification.title,
                    notification.message,
                    notification.type.value,
                    1 if notification.is_read else 0,
                    notification.created_at,
                ),
            )
