from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from ..common.datetime_utils import now_utc
from ..core.constants import DEFAULT_JWT_EXPIRES_MINUTES
from ..core.enums import Role
from ..core.exceptions import AuthenticationError

JWT_ALG = "HS256"


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    role: Role


class TokenIssuer:
    """Issue and verify HS256 bearer tokens."""

    def __init__(
        self,
        secret: str,
        *,
        expires_minutes: int = DEFAULT_JWT_EXPIRES_MINUTES,
        clock: Optional[Callable] = None,
    ):
        self._secret = secret
        self._expires = timedelta(minutes=int(expires_minutes))
        self._clock = clock or now_utc

    def issue(self, *, user_id: str, role: Role) -> str:
        now = self._clock()
        payload = {
            "sub": str(user_id),
            "role": Role(role).value,
            "iat": now,
            "exp": now + self._expires,
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALG)

    def verify(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[JWT_ALG])
        except ExpiredSignatureError:
            raise AuthenticationError("Access token has expired")
        except JWTError:
            raise AuthenticationError("Invalid access token")

        try:
            return TokenClaims(user_id=str(payload["sub"]), role=Role(payload["role"]))
        except (KeyError, ValueError):
            raise AuthenticationError("Invalid access token")
