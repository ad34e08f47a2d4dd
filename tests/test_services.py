from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

import pytest

from src.clubhub.clubhub.auth.tokens import TokenIssuer
from src.clubhub.clubhub.common.datetime_utils import now_utc
from src.clubhub.clubhub.core.enums import Role
from src.clubhub.clubhub.core.exceptions import AuthenticationError


def test_auth_wrong_password_raises(world):
    world.add_user(email="a@college.edu", password="right")

    with pytest.raises(AuthenticationError):
        world.auth_service.authenticate("a@college.edu", "wrong")


def test_auth_login_returns_token_for_user(world):
    user = world.add_user(email="a@college.edu", password="right", role=Role.CLUB_ADMIN)

    result = world.auth_service.authenticate("A@college.edu", "right")

    assert result.user.user_id == user.user_id
    assert world.auth_service.resolve_token(result.access_token).user_id == user.user_id


def test_inactive_user_cannot_log_in(world):
    world.add_user(email="gone@college.edu", password="pw", is_active=False)

    with pytest.raises(AuthenticationError):
        world.auth_service.authenticate("gone@college.edu", "pw")


def test_token_for_deactivated_user_is_rejected(world):
    user = world.add_user()
    token = world.token_for(user)
    world.db.users[user.user_id] = replace(user, is_active=False)

    with pytest.raises(AuthenticationError, match="not active"):
        world.auth_service.resolve_token(token)


def test_expired_token_is_rejected():
    issued_at = now_utc() - timedelta(hours=2)
    issuer = TokenIssuer("secret", expires_minutes=30, clock=lambda: issued_at)
    token = issuer.issue(user_id="u-1", role=Role.STUDENT)

    with pytest.raises(AuthenticationError, match="expired"):
        TokenIssuer("secret").verify(token)


def test_token_signed_with_other_secret_is_rejected():
    token = TokenIssuer("one").issue(user_id="u-1", role=Role.STUDENT)

    with pytest.raises(AuthenticationError, match="Invalid"):
        TokenIssuer("two").verify(token)


def test_role_ordering():
    assert Role.SUPER_ADMIN.at_least(Role.CLUB_ADMIN)
    assert Role.CLUB_ADMIN.at_least(Role.CLUB_ADMIN)
    assert not Role.STUDENT.at_least(Role.CLUB_ADMIN)
