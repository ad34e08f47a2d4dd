from __future__ import annotations

from dataclasses import dataclass

from werkzeug.security import check_password_hash

from ..auth.tokens import TokenIssuer
from ..common.validators import require_non_empty
from ..core.exceptions import AuthenticationError
from .model import User
from .repository import UserRepository


@dataclass(frozen=True)
class LoginResult:
    access_token: str
    user: User


class AuthService:
    """Use case: authenticate a user and resolve bearer tokens back to users."""

    def __init__(self, users: UserRepository, tokens: TokenIssuer):
        self._users = users
        self._tokens = tokens

    def authenticate(self, email: str, password: str) -> LoginResult:
        email = require_non_empty(email, "email").lower()
        user = self._users.get_by_email(email)
        if not user or not user.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        token = self._tokens.issue(user_id=user.user_id, role=user.role)
        return LoginResult(access_token=token, user=user)

    def resolve_token(self, token: str) -> User:
        claims = self._tokens.verify(token)
        user = self._users.get_by_id(claims.user_id)
        if not user or not user.is_active:
            raise AuthenticationError("User account is not active")
        return user
