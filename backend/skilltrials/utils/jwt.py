from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from ..config import ACCESS_TOKEN_EXPIRE_MINUTES, RESET_TOKEN_EXPIRE_MINUTES, SECRET_KEY

ALGORITHM = "HS256"

PURPOSE_SESSION = "session"
PURPOSE_RESET = "reset"


class TokenError(Exception):
    """Token failed signature, expiry or purpose checks."""


def _encode(claims: dict[str, Any], minutes: int) -> str:
    to_encode = claims.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def create_access_token(*, subject: int, role: str, profile: dict[str, Any]) -> str:
    """Session token carrying the sanitized (password-free) profile."""
    return _encode(
        {"sub": str(subject), "role": role, "purpose": PURPOSE_SESSION, "profile": profile},
        ACCESS_TOKEN_EXPIRE_MINUTES,
    )


def create_reset_token(*, email: str, role: str) -> str:
    return _encode(
        {"email": email, "role": role, "purpose": PURPOSE_RESET},
        RESET_TOKEN_EXPIRE_MINUTES,
    )


def decode_token(token: str, *, purpose: str) -> dict[str, Any]:
    try:
        claims = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError as e:
        raise TokenError("Token has expired") from e
    except JWTError as e:
        raise TokenError("Token is invalid") from e
    if claims.get("purpose") != purpose:
        raise TokenError("Token cannot be used here")
    return claims
