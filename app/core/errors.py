"""
Error taxonomy.

Every error is an HTTPException so routes can raise it directly; the
detail body always has the shape {"error": <code>, "message": <text>, ...}.
Anything coming out of SQLAlchemy is turned into a DataAccessError by the
handler registered in app.main.
"""

from typing import Optional
from fastapi import HTTPException, status


class InternMatchError(HTTPException):
    code = "error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, headers: Optional[dict] = None, **extra):
        self.message = message
        detail = {"error": self.code, "message": message}
        detail.update(extra)
        super().__init__(status_code=self.status_code, detail=detail, headers=headers)


class ValidationError(InternMatchError):
    """Form validation failure; nothing was written."""
    code = "validation_error"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, field=field)


class AuthError(InternMatchError):
    code = "auth_error"
    status_code = status.HTTP_401_UNAUTHORIZED


class EmailNotConfirmedError(AuthError):
    code = "email_not_confirmed"
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Email not confirmed. Please check your inbox for the verification email."):
        super().__init__(message, resend_available=True)


class PermissionDenied(InternMatchError):
    code = "permission_denied"
    status_code = status.HTTP_403_FORBIDDEN


class MissingResumeError(InternMatchError):
    code = "missing_resume"

    def __init__(self, message: str = "Please upload a resume on your profile before applying"):
        super().__init__(message, action_url="/profile")


class NotFoundError(InternMatchError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(InternMatchError):
    code = "conflict"
    status_code = status.HTTP_409_CONFLICT


class DataAccessError(InternMatchError):
    code = "data_access_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def require_confirmation(confirm: bool, what: str) -> None:
    """Destructive actions need an explicit confirm=true from the caller."""
    if not confirm:
        raise ValidationError(f"Deleting {what} requires confirm=true", field="confirm")
