"""
Centralized error handling and user-friendly error messages.
"""
import logging

from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error."""
    def __init__(self, message: str, status_code: int = 500, details: dict | None = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppError):
    """Validation error."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=400, details=details)


class NotFoundError(AppError):
    """Resource not found error."""
    def __init__(self, message: str = "Resource not found", details: dict | None = None):
        super().__init__(message, status_code=404, details=details)


class UnauthorizedError(AppError):
    """Missing credentials, or credentials that do not match an account."""
    def __init__(self, message: str = "Unauthorized access", details: dict | None = None):
        super().__init__(message, status_code=401, details=details)


class ForbiddenError(AppError):
    """Invalid/expired token, or a token for someone else's resource."""
    def __init__(self, message: str = "Access forbidden", details: dict | None = None):
        super().__init__(message, status_code=403, details=details)


class ConflictError(AppError):
    """State conflict (duplicate email, already-submitted test)."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=409, details=details)


class AIServiceError(AppError):
    """AI service error."""
    def __init__(self, message: str = "AI service temporarily unavailable", status_code: int = 503, details: dict | None = None):
        super().__init__(message, status_code=status_code, details=details)


class DatabaseError(AppError):
    """A multi-statement operation failed and was rolled back."""
    def __init__(self, message: str = "Database operation failed", details: dict | None = None):
        super().__init__(message, status_code=500, details=details)


# User-friendly error messages
ERROR_MESSAGES = {
    # Authentication
    "invalid_credentials": "Invalid email or password. Please try again.",
    "email_exists": "An account with this email already exists. Please login instead.",
    "weak_password": "Password must be at least 6 characters long.",
    "missing_token": "Please login to access this feature.",
    "invalid_token": "Invalid or expired token.",
    "reset_token_invalid": "This reset link is invalid, expired or has already been used.",
    "reset_requested": "If an account exists for this email, a reset link has been sent.",

    # Jobs & questions
    "job_not_found": "Job posting not found or has been removed.",
    "question_not_found": "Question not found or does not belong to this job.",

    # Tests
    "test_not_found": "Test not found or has been removed.",
    "test_already_submitted": "This test has already been submitted.",

    # AI services
    "ai_unavailable": "AI question generation is not configured.",
    "ai_failed": "AI question generation failed. Please try again.",

    # General
    "forbidden": "You don't have permission to access this resource.",
    "server_error": "Something went wrong on our end. Please try again later.",
    "database_error": "Database connection issue. Please try again later.",
    "validation_error": "Please check your input and try again.",
}


def get_error_message(error_key: str, default: str | None = None) -> str:
    """Get a user-friendly error message."""
    return ERROR_MESSAGES.get(error_key, default or ERROR_MESSAGES["server_error"])


def create_error_response(
    status_code: int,
    message: str,
    details: dict | None = None
) -> JSONResponse:
    """Create a standardized error response."""
    content = {
        "success": False,
        "error": message,
    }

    if details:
        content["details"] = details

    return JSONResponse(
        status_code=status_code,
        content=content
    )
