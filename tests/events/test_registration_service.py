from __future__ import annotations

import threading
from datetime import timedelta

import pytest

from src.clubhub.clubhub.core.enums import NotificationType, RegistrationStatus, Role
from src.clubhub.clubhub.core.exceptions import DomainRuleError, NotFoundError


@pytest.fixture
def organizer(world):
    return world.add_user(role=Role.CLUB_ADMIN)


def test_register_creates_unmarked_registration(world, organizer):
    event = world.add_event(created_by=organizer.user_id)
    student = world.add_user()

    reg = world.registration_service.register(event.event_id, student.user_id)

    assert reg.status == RegistrationStatus.REGISTERED
    assert reg.attended is False
    assert world.db.notifications[-1].type == NotificationType.REGISTRATION


def test_register_twice_is_rejected(world, organizer):
    event = world.add_event(created_by=organizer.user_id)
    student = world.add_user()
    world.registration_service.register(event.event_id, student.user_id)

    with pytest.raises(DomainRuleError, match="already registered"):
        world.registration_service.register(event.event_id, student.user_id)


def test_full_event_rejects_new_registration(world, organizer):
    event = world.add_event(created_by=organizer.user_id, max_participants=1)
    first, second = world.add_user(), world.add_user()
    world.registration_service.register(event.event_id, first.user_id)

    with pytest.raises(DomainRuleError, match="Event is full"):
        world.registration_service.register(event.event_id, second.user_id)

    assert world.events.get_registration(event_id=event.event_id, user_id=second.user_id) is None
    assert len(world.db.notifications) == 1


def test_concurrent_registrations_cannot_overbook(world, organizer):
    event = world.add_event(created_by=organizer.user_id, max_participants=1)
    students = [world.add_user() for _ in range(4)]
    barrier = threading.Barrier(len(students))
    outcomes = []

    def register(student):
        barrier.wait()
        try:
            world.registration_service.register(event.event_id, student.user_id)
            outcomes.append("ok")
        except DomainRuleError as e:
            outcomes.append(e.message)

    threads = [threading.Thread(target=register, args=(s,)) for s in students]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(outcomes) == ["Event is full"] * 3 + ["ok"]
    assert sum(1 for r in world.db.registrations.values() if r.event_id == event.event_id) == 1


def test_cancelled_registrations_do_not_take_a_seat(world, organizer):
    event = world.add_event(created_by=organizer.user_id, max_participants=1)
    world.register(event, world.add_user(), status=RegistrationStatus.CANCELLED)

    reg = world.registration_service.register(event.event_id, world.add_user().user_id)

    assert reg.status == RegistrationStatus.REGISTERED


def test_registration_closes_at_deadline(world, organizer, fixed_now):
    event = world.add_event(created_by=organizer.user_id, registration_deadline=fixed_now - timedelta(minutes=1))

    with pytest.raises(DomainRuleError, match="deadline"):
        world.registration_service.register(event.event_id, world.add_user().user_id)


def test_cannot_register_for_started_or_unpublished_event(world, organizer, fixed_now):
    started = world.add_event(created_by=organizer.user_id, start_date=fixed_now - timedelta(hours=1))
    draft = world.add_event(created_by=organizer.user_id, is_published=False)
    student = world.add_user()

    with pytest.raises(DomainRuleError, match="already started"):
        world.registration_service.register(started.event_id, student.user_id)
    with pytest.raises(DomainRuleError, match="not open"):
        world.registration_service.register(draft.event_id, student.user_id)


def test_register_for_missing_event(world):
    with pytest.raises(NotFoundError):
        world.registration_service.register("00000000-0000-0000-0000-000000000000", world.add_user().user_id)


def test_unregister_deletes_row_before_start(world, organizer):
    event = world.add_event(created_by=organizer.user_id)
    student = world.add_user()
    world.registration_service.register(event.event_id, student.user_id)

    world.registration_service.unregister(event.event_id, student.user_id)

    assert world.events.get_registration(event_id=event.event_id, user_id=student.user_id) is None
    assert world.db.notifications[-1].type == NotificationType.CANCELLATION


def test_marked_registration_cannot_be_removed(world, organizer):
    event = world.add_event(created_by=organizer.user_id)
    student = world.add_user()
    world.register(event, student)
    world.attendance_service.mark_attendance(
        event.event_id, student.user_id, attended=False, marked_by=organizer.user_id
    )

    with pytest.raises(DomainRuleError, match="attendance has been marked"):
        world.registration_service.unregister(event.event_id, student.user_id)

    assert world.events.get_registration(event_id=event.event_id, user_id=student.user_id) is not None


def test_unregister_after_start_is_rejected(world, organizer):
    event = world.add_event(created_by=organizer.user_id)
    student = world.add_user()
    world.register(event, student)
    world.now = event.start_date

    with pytest.raises(DomainRuleError, match="started"):
        world.registration_service.unregister(event.event_id, student.user_id)
