from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.permissions import AttendancePermission
from .attendance.qr import QRCodeSigner
from .attendance.service import AttendanceService
from .auth.tokens import TokenIssuer
from .clubs.mysql_club_repository import MySQLClubRepository
from .core.constants import DEFAULT_JWT_EXPIRES_MINUTES, DEFAULT_QR_VALIDITY_HOURS
from .database.connection import DBConfig, DatabaseConnection
from .events.mysql_event_repository import MySQLEventRepository
from .events.service import RegistrationService
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.service import NotificationService
from .points.mysql_points_repository import MySQLPointsRepository
from .points.service import PointsService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    """Application services wired to their repositories.

    Controllers only ever talk to the services; tests build one by hand
    around in-memory repositories and leave ``conn`` as None.
    """

    auth_service: AuthService
    attendance_service: AttendanceService
    registration_service: RegistrationService
    points_service: PointsService
    notification_service: NotificationService
    conn: Optional[DatabaseConnection] = None

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()


def build_container(
    *,
    db_config: dict,
    jwt_secret: str,
    qr_secret: str,
    jwt_expires_minutes: int = DEFAULT_JWT_EXPIRES_MINUTES,
    qr_validity_hours: int = DEFAULT_QR_VALIDITY_HOURS,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    users_repo = MySQLUserRepository(conn)
    clubs_repo = MySQLClubRepository(conn)
    events_repo = MySQLEventRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    points_repo = MySQLPointsRepository(conn)
    notifications_repo = MySQLNotificationRepository(conn)

    notification_service = NotificationService(notifications_repo)
    auth_service = AuthService(users_repo, TokenIssuer(jwt_secret, expires_minutes=jwt_expires_minutes))
    attendance_service = AttendanceService(
        attendance_repo,
        events_repo,
        AttendancePermission(events_repo, clubs_repo, users_repo),
        notification_service,
        QRCodeSigner(qr_secret, validity_hours=qr_validity_hours),
    )
    registration_service = RegistrationService(events_repo, notification_service)
    points_service = PointsService(points_repo, users_repo, notification_service)

    return Container(
        auth_service=auth_service,
        attendance_service=attendance_service,
        registration_service=registration_service,
        points_service=points_service,
        notification_service=notification_service,
        conn=conn,
    )
