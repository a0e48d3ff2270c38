from dataclasses import dataclass, field
from typing import Any

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..models.account import AccountRole
from .error_handlers import ForbiddenError, UnauthorizedError, get_error_message
from .jwt import PURPOSE_SESSION, TokenError, decode_token

_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    id: int
    role: AccountRole
    profile: dict[str, Any] = field(default_factory=dict)

    @property
    def email(self) -> str | None:
        return self.profile.get("email")


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> CurrentUser:
    """
    Bearer-token gate. Missing token -> 401; bad signature, expiry or
    malformed claims -> 403.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError(get_error_message("missing_token"))

    try:
        claims = decode_token(credentials.credentials, purpose=PURPOSE_SESSION)
        return CurrentUser(
            id=int(claims["sub"]),
            role=AccountRole(claims["role"]),
            profile=dict(claims.get("profile") or {}),
        )
    except (TokenError, KeyError, TypeError, ValueError):
        raise ForbiddenError(get_error_message("invalid_token")) from None
