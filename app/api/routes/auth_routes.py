"""
Authentication Routes

POST /auth/register - Register new account (student or company)
POST /auth/login - Login and get JWT token
POST /auth/verify-email - Confirm email with verification token
POST /auth/resend-verification - Issue a new verification token
POST /auth/logout - End the session, closing realtime channels
GET /auth/me - Get current profile
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text

from app.core.config import get_settings
from app.core.errors import AuthError, EmailNotConfirmedError, ValidationError
from app.db.postgres import get_db_session
from app.core.auth import (
    CurrentUser, hash_password, verify_password, create_access_token, create_verification_token,
    decode_token, get_current_user, new_id, utcnow, VERIFY_EMAIL_PURPOSE
)
from app.services.realtime import get_notification_hub
from app.schemas.schemas import (
    RegisterRequest, RegisterResponse, LoginRequest, TokenResponse, VerifyEmailRequest,
    ResendVerificationRequest, MessageResponse, Profile
)

router = APIRouter(prefix="/auth", tags=["Authentication"])
settings = get_settings()
logger = logging.getLogger(__name__)


def validate_registration(request: RegisterRequest) -> None:
    """Form checks done before any write."""
    if request.role.value == "admin":
        raise ValidationError("Admin accounts cannot be self-registered", field="role")
    if len(request.password) < settings.min_password_length:
        raise ValidationError(
            f"Password must be at least {settings.min_password_length} characters", field="password"
        )
    if request.password != request.confirm_password:
        raise ValidationError("Passwords do not match", field="confirm_password")
    if request.role.value == "company" and not (request.company_name or "").strip():
        raise ValidationError("Company name is required", field="company_name")


def send_verification(user_id: str, email: str) -> str:
    """Email delivery is handled outside this service; the link is logged for it to pick up."""
    token = create_verification_token(user_id)
    logger.info("Verification link for %s: %s/auth/verify?token=%s", email, settings.app_base_url, token)
    return token


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(request: RegisterRequest):
    """
    Register a new account and its profile.

    If email verification is required the account cannot sign in until the
    emailed link is followed.
    """
    validate_registration(request)

    user_id = new_id()
    now = utcnow()
    confirmed = not settings.require_email_verification
    with get_db_session() as db:
        result = db.execute(
            text("SELECT id FROM users WHERE email = :email"),
            {"email": request.email}
        )
        if result.fetchone():
            raise AuthError("Email already registered")

        db.execute(
            text("""
                INSERT INTO users (id, email, password_hash, role, email_confirmed, is_active, created_at)
                VALUES (:id, :email, :password_hash, :role, :confirmed, :active, :now)
            """),
            {
                "id": user_id, "email": request.email, "password_hash": hash_password(request.password),
                "role": request.role.value, "confirmed": confirmed, "active": True, "now": now
            }
        )
        db.execute(
            text("""
                INSERT INTO profiles (id, email, role, full_name, company_name, university, created_at, updated_at)
                VALUES (:id, :email, :role, :full_name, :company_name, :university, :now, :now)
            """),
            {
                "id": user_id, "email": request.email, "role": request.role.value,
                "full_name": request.full_name,
                "company_name": request.company_name if request.role.value == "company" else None,
                "university": request.university if request.role.value == "student" else None,
                "now": now
            }
        )

    if not confirmed:
        send_verification(user_id, request.email)
        message = ("We sent you a confirmation email. Please check your inbox "
                   "and confirm your email to sign in.")
    else:
        message = f"Registered successfully as {request.role.value}. Please login."

    return RegisterResponse(
        user_id=user_id, role=request.role.value, pending_confirmation=not confirmed, message=message
    )


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    with get_db_session() as db:
        result = db.execute(
            text("SELECT id, password_hash, role, is_active, email_confirmed FROM users WHERE email = :email"),
            {"email": request.email}
        )
        user = result.fetchone()

    if not user:
        raise AuthError("Invalid email or password")

    user_id, password_hash, role, is_active, email_confirmed = user

    if not verify_password(request.password, password_hash):
        raise AuthError("Invalid email or password")

    if not is_active:
        raise AuthError("Account deactivated")

    if not email_confirmed:
        raise EmailNotConfirmedError()

    token = create_access_token(data={"sub": user_id, "role": role})

    return TokenResponse(access_token=token, user_id=user_id, role=role)


@router.post("/verify-email", response_model=MessageResponse)
async def verify_email(request: VerifyEmailRequest):
    payload = decode_token(request.token, purpose=VERIFY_EMAIL_PURPOSE)
    if not payload:
        raise AuthError("Verification link is invalid or has expired")

    with get_db_session() as db:
        result = db.execute(
            text("UPDATE users SET email_confirmed = :true WHERE id = :id"),
            {"true": True, "id": payload["sub"]}
        )
        if result.rowcount == 0:
            raise AuthError("Verification link is invalid or has expired")

    return MessageResponse(message="Email confirmed. You can now sign in.")


@router.post("/resend-verification", response_model=MessageResponse)
async def resend_verification(request: ResendVerificationRequest):
    with get_db_session() as db:
        result = db.execute(
            text("SELECT id, email_confirmed FROM users WHERE email = :email"),
            {"email": request.email}
        )
        user = result.fetchone()

    # Same answer whether or not the address is registered
    if user and not user[1]:
        send_verification(user[0], request.email)
    return MessageResponse(message="If that account is awaiting confirmation, a new verification email is on its way.")


@router.post("/logout", response_model=MessageResponse)
async def logout(user: CurrentUser = Depends(get_current_user)):
    closed = get_notification_hub().close_user(user.id)
    logger.info("User %s signed out, %d realtime channel(s) closed", user.id, closed)
    return MessageResponse(message="Signed out")


@router.get("/me", response_model=Profile)
async def get_me(user: CurrentUser = Depends(get_current_user)):
    """Get current authenticated user's profile."""
    return user.profile
