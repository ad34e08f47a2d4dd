from __future__ import annotations

import pytest

from src.clubhub.clubhub.core.enums import Role
from src.clubhub.clubhub.core.exceptions import AuthorizationError, NotFoundError, ValidationError


def test_super_admin_adjustment_updates_totals_and_ledger(world):
    root = world.add_user(role=Role.SUPER_ADMIN)
    student = world.add_user()

    entry = world.points_service.adjust_points(
        user_id=student.user_id,
        points=-5,
        volunteer_hours=1.0,
        reason="Duplicate award",
        adjusted_by=root.user_id,
        actor_role=root.role,
    )

    user = world.users.get_by_id(student.user_id)
    assert user.total_points == -5
    assert user.total_volunteer_hours == 1.0
    assert world.db.points_history == [entry]
    assert entry.created_by == root.user_id


def test_only_super_admin_can_adjust(world):
    admin = world.add_user(role=Role.CLUB_ADMIN)
    student = world.add_user()

    with pytest.raises(AuthorizationError):
        world.points_service.adjust_points(
            user_id=student.user_id, points=5, reason="x", adjusted_by=admin.user_id, actor_role=admin.role
        )


@pytest.mark.parametrize("points,hours,reason", [(0, 0.0, "nothing"), (5, 0.0, "   ")])
def test_adjustment_needs_amount_and_reason(world, points, hours, reason):
    root = world.add_user(role=Role.SUPER_ADMIN)
    student = world.add_user()

    with pytest.raises(ValidationError):
        world.points_service.adjust_points(
            user_id=student.user_id,
            points=points,
            volunteer_hours=hours,
            reason=reason,
            adjusted_by=root.user_id,
            actor_role=root.role,
        )
    assert world.db.points_history == []


def test_adjusting_unknown_user(world):
    root = world.add_user(role=Role.SUPER_ADMIN)

    with pytest.raises(NotFoundError):
        world.points_service.adjust_points(
            user_id="missing", points=5, reason="x", adjusted_by=root.user_id, actor_role=root.role
        )


def test_history_is_private_except_for_super_admin(world):
    root = world.add_user(role=Role.SUPER_ADMIN)
    student, other = world.add_user(), world.add_user()
    world.points_service.adjust_points(
        user_id=student.user_id, points=3, reason="Bonus", adjusted_by=root.user_id, actor_role=root.role
    )

    own, total = world.points_service.get_history(student.user_id, page=1, limit=20, requester=student)
    assert total == 1 and own[0].points_earned == 3
    assert world.points_service.get_history(student.user_id, page=1, limit=20, requester=root)[1] == 1

    with pytest.raises(AuthorizationError):
        world.points_service.get_history(student.user_id, page=1, limit=20, requester=other)


def test_marking_attendance_reconciles_with_ledger(world):
    admin = world.add_user(role=Role.CLUB_ADMIN)
    root = world.add_user(role=Role.SUPER_ADMIN)
    student = world.add_user()
    event = world.add_event(created_by=admin.user_id, points_reward=15)
    world.register(event, student)

    world.attendance_service.mark_attendance(event.event_id, student.user_id, attended=True, marked_by=admin.user_id)
    world.points_service.adjust_points(
        user_id=student.user_id, points=5, reason="Helped set up", adjusted_by=root.user_id, actor_role=root.role
    )

    ledger = sum(e.points_earned for e in world.db.points_history if e.user_id == student.user_id)
    assert world.users.get_by_id(student.user_id).total_points == ledger == 20
