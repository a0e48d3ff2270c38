from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session
import logging

from ..database import get_db
from ..models.account import AccountRole
from ..services import accounts
from ..services.emailer import deliver_password_reset_email
from ..utils.error_handlers import get_error_message
from ..utils.validation import validate_email, validate_password, validate_string_field

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


class CompanySignupRequest(BaseModel):
    email: str
    password: str
    name: str | None = Field(default=None, max_length=255)
    website: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    company_name: str | None = Field(default=None, max_length=255)


class CandidateSignupRequest(BaseModel):
    email: str
    password: str
    name: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    skills: str | None = Field(default=None, max_length=5000)
    experience: str | None = Field(default=None, max_length=255)
    location: str | None = Field(default=None, max_length=255)


class LoginRequest(BaseModel):
    email: str
    password: str


class ForgotPasswordRequest(BaseModel):
    email: str
    role: AccountRole


class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1)
    password: str


def _signup(db: Session, role: AccountRole, payload: BaseModel) -> dict:
    email = validate_email(payload.email)
    validate_password(payload.password)

    profile = payload.model_dump(exclude={"email", "password"})
    for key, value in profile.items():
        profile[key] = validate_string_field(value, key.replace("_", " ").capitalize(), required=False) or None

    account = accounts.signup(db, role, email=email, password=payload.password, profile=profile)
    return {
        "success": True,
        "message": "Account created successfully",
        "user": accounts.public_profile(account),
    }


def _login(db: Session, role: AccountRole, payload: LoginRequest) -> dict:
    email = validate_email(payload.email)
    if not payload.password:
        raise HTTPException(status_code=400, detail="Password is required")

    token, profile = accounts.login(db, role, email=email, password=payload.password)
    return {
        "success": True,
        "token": token,
        "token_type": "bearer",
        "user": profile,
    }


@router.post("/auth/company/signup")
def company_signup(payload: CompanySignupRequest, db: Session = Depends(get_db)):
    return _signup(db, AccountRole.COMPANY, payload)


@router.post("/auth/company/login")
def company_login(payload: LoginRequest, db: Session = Depends(get_db)):
    return _login(db, AccountRole.COMPANY, payload)


@router.post("/auth/candidate/signup")
def candidate_signup(payload: CandidateSignupRequest, db: Session = Depends(get_db)):
    return _signup(db, AccountRole.CANDIDATE, payload)


@router.post("/auth/candidate/login")
def candidate_login(payload: LoginRequest, db: Session = Depends(get_db)):
    return _login(db, AccountRole.CANDIDATE, payload)


@router.post("/auth/logout")
def logout():
    # Tokens are stateless; the client discards its copy.
    return {"success": True, "message": "Logged out successfully"}


@router.post("/forgotpassword")
def forgot_password(
    payload: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    email = validate_email(payload.email)
    token = accounts.request_password_reset(db, payload.role, email=email)
    if token:
        background_tasks.add_task(deliver_password_reset_email, email, token)

    # Same answer whether or not the account exists.
    return {"success": True, "message": get_error_message("reset_requested")}


@router.post("/resetpassword")
def reset_password(payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    validate_password(payload.password)
    accounts.reset_password(db, token=payload.token, new_password=payload.password)
    return {"success": True, "message": "Password has been reset. Please login with your new password."}
