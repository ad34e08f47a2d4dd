from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    DOMAIN_RULE = "domain_rule"
    INTERNAL = "internal"


class ClubHubError(Exception):
    """Base exception for everything the service layer raises on purpose.

    Subclasses pin ``kind``; the HTTP layer maps kinds to status codes.
    """

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, *, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = dict(context or {})


class ValidationError(ClubHubError):
    """Raised when input data is malformed or out of range."""

    kind = ErrorKind.VALIDATION


class AuthenticationError(ClubHubError):
    """Raised when credentials or bearer tokens are missing or invalid."""

    kind = ErrorKind.AUTHENTICATION


class AuthorizationError(ClubHubError):
    """Raised when a user lacks permission for an action."""

    kind = ErrorKind.FORBIDDEN


class NotFoundError(ClubHubError):
    kind = ErrorKind.NOT_FOUND


class DomainRuleError(ClubHubError):
    """Raised when a request is well-formed but breaks a business rule."""

    kind = ErrorKind.DOMAIN_RULE


class InternalError(ClubHubError):
    kind = ErrorKind.INTERNAL
