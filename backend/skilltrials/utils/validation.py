"""
Validation utilities for request input.
"""
import re
from typing import Any
from fastapi import HTTPException


_EMAIL_RE = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


def validate_email(email: str) -> str:
    """Validate email format and normalise to lower case."""
    if not email or not isinstance(email, str):
        raise HTTPException(status_code=400, detail="Email is required")

    email = email.strip().lower()
    if len(email) > 255:
        raise HTTPException(status_code=400, detail="Email too long (max 255 characters)")

    if not _EMAIL_RE.match(email):
        raise HTTPException(status_code=400, detail=f"Invalid email format: {email}")

    return email


def validate_password(password: str) -> None:
    """Validate password strength."""
    if not password or not isinstance(password, str):
        raise HTTPException(status_code=400, detail="Password is required")

    if len(password) < 6:
        raise HTTPException(status_code=400, detail="Password must be at least 6 characters")

    if len(password) > 128:
        raise HTTPException(status_code=400, detail="Password too long (max 128 characters)")


def validate_string_field(
    value: Any,
    field_name: str,
    min_length: int = 1,
    max_length: int = 1000,
    required: bool = True,
) -> str | None:
    """Validate a string field with common rules."""
    if value is None:
        if required:
            raise HTTPException(status_code=400, detail=f"{field_name} is required")
        return None

    if not isinstance(value, str):
        raise HTTPException(status_code=400, detail=f"{field_name} must be a string")

    value = value.strip()

    if required and not value:
        raise HTTPException(status_code=400, detail=f"{field_name} cannot be empty")

    if value and len(value) < min_length:
        raise HTTPException(
            status_code=400,
            detail=f"{field_name} must be at least {min_length} characters"
        )

    if len(value) > max_length:
        raise HTTPException(
            status_code=400,
            detail=f"{field_name} must not exceed {max_length} characters"
        )

    return value


def validate_choices(values: list[str] | None, field_name: str, *, required: bool = True) -> list[str]:
    """Clean an ordered list of choice strings; order is significant and kept."""
    if not values:
        if required:
            raise HTTPException(status_code=400, detail=f"{field_name} cannot be empty")
        return []
    cleaned = [str(v).strip() for v in values]
    if any(not v for v in cleaned):
        raise HTTPException(status_code=400, detail=f"{field_name} cannot contain blank entries")
    return cleaned


def validate_id_list(ids: list[int] | None, field_name: str = "ids") -> list[int]:
    """Validate a non-empty list of positive ids; duplicates are dropped, order kept."""
    if not ids:
        raise HTTPException(status_code=400, detail=f"{field_name} cannot be empty")
    seen: list[int] = []
    for raw in ids:
        if isinstance(raw, bool) or not isinstance(raw, int) or raw < 1:
            raise HTTPException(status_code=400, detail=f"{field_name} must contain positive integers")
        if raw not in seen:
            seen.append(raw)
    return seen
