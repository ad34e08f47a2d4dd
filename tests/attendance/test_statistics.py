from __future__ import annotations

from datetime import datetime

from src.clubhub.clubhub.attendance.statistics import compute_statistics
from src.clubhub.clubhub.core.enums import RegistrationStatus, Role
from src.clubhub.clubhub.events.model import EventRegistration


def _reg(i: int, *, attended: bool, status=RegistrationStatus.REGISTERED) -> EventRegistration:
    return EventRegistration(
        registration_id=f"r{i}",
        user_id=f"u{i}",
        event_id="e1",
        registration_date=datetime(2026, 3, 1),
        status=status,
        attended=attended,
        points_awarded=10 if attended else 0,
        volunteer_hours_awarded=1.5 if attended else 0.0,
    )


def test_seven_of_ten_is_seventy_percent():
    regs = [_reg(i, attended=i < 7) for i in range(10)]

    stats = compute_statistics(regs)

    assert stats.total_registered == 10
    assert stats.total_attended == 7
    assert stats.total_absent == 3
    assert stats.attendance_rate == 70.0
    assert stats.total_points_awarded == 70
    assert stats.total_volunteer_hours_awarded == 10.5


def test_no_registrations_gives_zero_rate():
    stats = compute_statistics([])

    assert stats.total_registered == 0
    assert stats.attendance_rate == 0.0


def test_cancelled_registrations_are_not_counted():
    regs = [_reg(0, attended=True), _reg(1, attended=False), _reg(2, attended=False, status=RegistrationStatus.CANCELLED)]

    stats = compute_statistics(regs)

    assert stats.total_registered == 2
    assert stats.attendance_rate == 50.0


def test_rate_is_rounded_to_two_decimals():
    regs = [_reg(0, attended=True), _reg(1, attended=False), _reg(2, attended=False)]

    assert compute_statistics(regs).attendance_rate == 33.33


def test_service_statistics_reads_event_registrations(world):
    admin = world.add_user(role=Role.CLUB_ADMIN)
    event = world.add_event(created_by=admin.user_id)
    for i in range(4):
        user = world.add_user()
        world.register(event, user)
        if i == 0:
            world.attendance_service.mark_attendance(
                event.event_id, user.user_id, attended=True, marked_by=admin.user_id
            )

    stats = world.attendance_service.get_attendance_statistics(event.event_id)

    assert stats.to_dict()["attendance_rate"] == 25.0
    assert stats.total_points_awarded == 10
