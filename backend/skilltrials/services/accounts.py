"""
Company / candidate accounts: signup, login, and the password reset flow.

Both account kinds share the same lifecycle; `AccountRole.model` picks the
table so no query is ever built from a role string.
"""
import logging
from datetime import datetime
from typing import Any

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.account import AccountRole
from ..models.assessment import Test
from ..utils.error_handlers import (
    ConflictError,
    DatabaseError,
    ForbiddenError,
    UnauthorizedError,
    ValidationError,
    get_error_message,
)
from ..utils.jwt import PURPOSE_RESET, TokenError, create_access_token, create_reset_token, decode_token
from ..utils.security import hash_password, verify_password

logger = logging.getLogger(__name__)

_PRIVATE_FIELDS = {"password", "reset_token"}

PROFILE_FIELDS = {
    AccountRole.COMPANY: ("name", "website", "phone", "company_name"),
    AccountRole.CANDIDATE: ("name", "phone", "skills", "experience", "location"),
}


def public_profile(account) -> dict[str, Any]:
    """Column values minus password and reset token, JSON-safe."""
    profile: dict[str, Any] = {}
    for column in account.__table__.columns:
        if column.name in _PRIVATE_FIELDS:
            continue
        value = getattr(account, column.name)
        profile[column.name] = value.isoformat() if isinstance(value, datetime) else value
    return profile


def signup(db: Session, role: AccountRole, *, email: str, password: str, profile: dict[str, Any]):
    model = role.model
    if db.query(model.id).filter(model.email == email).first():
        raise ConflictError(get_error_message("email_exists"))

    try:
        hashed = hash_password(password)
    except ValueError:
        raise ValidationError(get_error_message("weak_password")) from None

    fields = {k: v for k, v in profile.items() if k in PROFILE_FIELDS[role]}
    account = model(email=email, password=hashed, **fields)
    try:
        db.add(account)
        db.flush()
        if role is AccountRole.CANDIDATE:
            # Tests assigned to this email before the account existed now resolve to it.
            resolved = db.execute(
                update(Test)
                .where(Test.candidate_email == email, Test.candidate_id.is_(None))
                .values(candidate_id=account.id)
            ).rowcount
            if resolved:
                logger.info("Resolved %s pending test(s) for candidate %s", resolved, account.id)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(get_error_message("email_exists")) from None
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Database error creating %s account: %s", role.value, e)
        raise DatabaseError() from e

    db.refresh(account)
    logger.info("Created %s account id=%s", role.value, account.id)
    return account


def login(db: Session, role: AccountRole, *, email: str, password: str) -> tuple[str, dict[str, Any]]:
    model = role.model
    account = db.query(model).filter(model.email == email).first()
    # Unknown email and wrong password look the same to the caller.
    if not account or not verify_password(password, account.password):
        raise UnauthorizedError(get_error_message("invalid_credentials"))

    profile = public_profile(account)
    token = create_access_token(subject=account.id, role=role.value, profile=profile)
    return token, profile


def request_password_reset(db: Session, role: AccountRole, *, email: str) -> str | None:
    """
    Persist a fresh reset token on the account. Returns the token, or None when
    no account has this email (the caller still reports success).
    """
    model = role.model
    token = create_reset_token(email=email, role=role.value)
    try:
        updated = db.execute(
            update(model).where(model.email == email).values(reset_token=token)
        ).rowcount
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Database error storing reset token: %s", e)
        raise DatabaseError() from e

    if not updated:
        logger.info("Password reset requested for unknown %s email", role.value)
        return None
    return token


def reset_password(db: Session, *, token: str, new_password: str) -> AccountRole:
    try:
        claims = decode_token(token, purpose=PURPOSE_RESET)
        role = AccountRole(claims["role"])
        email = claims["email"]
    except (TokenError, KeyError, ValueError):
        raise ForbiddenError(get_error_message("reset_token_invalid")) from None

    try:
        hashed = hash_password(new_password)
    except ValueError:
        raise ValidationError(get_error_message("weak_password")) from None

    model = role.model
    try:
        # Scoped to the stored token so a used or superseded token matches nothing.
        updated = db.execute(
            update(model)
            .where(model.email == email, model.reset_token == token)
            .values(password=hashed, reset_token=None)
        ).rowcount
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Database error resetting password: %s", e)
        raise DatabaseError() from e

    if not updated:
        raise ForbiddenError(get_error_message("reset_token_invalid"))
    logger.info("Password reset completed for a %s account", role.value)
    return role
