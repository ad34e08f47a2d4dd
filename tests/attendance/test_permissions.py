from __future__ import annotations

import uuid

from src.clubhub.clubhub.core.enums import ClubRole, Role


def test_event_creator_can_mark(world):
    creator = world.add_user(role=Role.CLUB_ADMIN)
    event = world.add_event(created_by=creator.user_id)

    assert world.permission.can_mark(creator.user_id, event.event_id)


def test_active_officer_of_owning_club_can_mark(world):
    creator = world.add_user(role=Role.CLUB_ADMIN)
    president = world.add_user()
    event = world.add_event(created_by=creator.user_id)
    world.add_membership(user_id=president.user_id, club_id=event.club_id, role=ClubRole.PRESIDENT)

    assert world.permission.can_mark(president.user_id, event.event_id)


def test_plain_member_and_inactive_officer_cannot_mark(world):
    creator = world.add_user(role=Role.CLUB_ADMIN)
    member = world.add_user()
    former = world.add_user()
    event = world.add_event(created_by=creator.user_id)
    world.add_membership(user_id=member.user_id, club_id=event.club_id, role=ClubRole.SECRETARY)
    world.add_membership(user_id=former.user_id, club_id=event.club_id, role=ClubRole.VICE_PRESIDENT, is_active=False)

    assert not world.permission.can_mark(member.user_id, event.event_id)
    assert not world.permission.can_mark(former.user_id, event.event_id)


def test_officer_of_other_club_cannot_mark(world):
    creator = world.add_user(role=Role.CLUB_ADMIN)
    officer = world.add_user()
    event = world.add_event(created_by=creator.user_id)
    world.add_membership(user_id=officer.user_id, club_id=str(uuid.uuid4()), role=ClubRole.PRESIDENT)

    assert not world.permission.can_mark(officer.user_id, event.event_id)


def test_super_admin_can_mark_any_event(world):
    creator = world.add_user(role=Role.CLUB_ADMIN)
    root = world.add_user(role=Role.SUPER_ADMIN)
    event = world.add_event(created_by=creator.user_id)

    assert world.permission.can_mark(root.user_id, event.event_id)


def test_missing_event_or_user_is_denied(world):
    creator = world.add_user(role=Role.CLUB_ADMIN)
    event = world.add_event(created_by=creator.user_id)

    assert not world.permission.can_mark(creator.user_id, str(uuid.uuid4()))
    assert not world.permission.can_mark(str(uuid.uuid4()), event.event_id)


def test_repository_error_is_denied_not_raised(world, caplog):
    creator = world.add_user(role=Role.CLUB_ADMIN)
    event = world.add_event(created_by=creator.user_id)

    def broken(*, user_id, club_id):
        raise RuntimeError("connection lost")

    world.clubs.get_membership = broken

    assert world.permission.can_mark(world.add_user().user_id, event.event_id) is False
    assert "Permission check failed" in caplog.text
