from __future__ import annotations

from functools import wraps

from flask import g, request

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError
from ..users.model import User
from ..users.service import AuthService


def current_user() -> User:
    return g.current_user


def _bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Access token is required")
    return token.strip()


def build_auth_decorators(auth_service: AuthService):
    """Return ``(bearer_required, role_required)`` bound to ``auth_service``."""

    def bearer_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            g.current_user = auth_service.resolve_token(_bearer_token())
            return view(*args, **kwargs)

        return wrapper

    def role_required(required: Role):
        def decorator(view):
            @wraps(view)
            @bearer_required
            def wrapper(*args, **kwargs):
                if not current_user().role.at_least(required):
                    raise AuthorizationError("You do not have permission to perform this action")
                return view(*args, **kwargs)

            return wrapper

        return decorator

    return bearer_required, role_required
