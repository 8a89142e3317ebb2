"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification (access + email verification tokens)
- The per-request CurrentUser session object
- FastAPI dependencies for protected routes
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import text

from app.core.config import get_settings
from app.core.errors import AuthError, PermissionDenied
from app.db.postgres import get_db_session
from app.schemas.schemas import (
    StudentProfile, CompanyProfile, AdminProfile, profile_from_row
)

settings = get_settings()
logger = logging.getLogger(__name__)

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor
bearer_scheme = HTTPBearer(auto_error=False)

ACCESS_PURPOSE = "access"
VERIFY_EMAIL_PURPOSE = "verify_email"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    to_encode.setdefault("purpose", ACCESS_PURPOSE)
    expire = utcnow() + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_verification_token(user_id: str) -> str:
    return create_access_token(
        {"sub": user_id, "purpose": VERIFY_EMAIL_PURPOSE},
        expires_delta=timedelta(minutes=settings.verification_expire_minutes)
    )


def decode_token(token: str, purpose: str = ACCESS_PURPOSE) -> Optional[dict]:
    """Decode and verify JWT token. Returns None if invalid, expired or minted for another purpose."""
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    if payload.get("purpose", ACCESS_PURPOSE) != purpose:
        return None
    return payload


AnyProfile = Union[StudentProfile, CompanyProfile, AdminProfile]


@dataclass
class CurrentUser:
    """Session object handed to every protected route."""
    profile: AnyProfile

    @property
    def id(self) -> str:
        return self.profile.id

    @property
    def role(self) -> str:
        return self.profile.role

    @property
    def is_admin(self) -> bool:
        return self.profile.role == "admin"


def _ensure_profile(db, user_row) -> dict:
    """
    Load the profile for an authenticated identity, creating it from the
    signup role if the identity has none yet.
    """
    result = db.execute(text("SELECT * FROM profiles WHERE id = :id"), {"id": user_row["id"]})
    profile = result.mappings().fetchone()
    if profile:
        return dict(profile)

    logger.warning("No profile for user %s, creating one with role %s", user_row["id"], user_row["role"])
    now = utcnow()
    db.execute(
        text("""
            INSERT INTO profiles (id, email, role, created_at, updated_at)
            VALUES (:id, :email, :role, :now, :now)
        """),
        {"id": user_row["id"], "email": user_row["email"], "role": user_row["role"] or "student", "now": now}
    )
    result = db.execute(text("SELECT * FROM profiles WHERE id = :id"), {"id": user_row["id"]})
    return dict(result.mappings().fetchone())


def load_current_user(token: str) -> CurrentUser:
    """Resolve a bearer token to a CurrentUser or raise AuthError."""
    payload = decode_token(token)
    if not payload or not payload.get("sub"):
        raise AuthError("Invalid or expired token", headers={"WWW-Authenticate": "Bearer"})

    with get_db_session() as db:
        result = db.execute(
            text("SELECT id, email, role, is_active FROM users WHERE id = :id"),
            {"id": payload["sub"]}
        )
        user = result.mappings().fetchone()
        if not user:
            raise AuthError("Invalid or expired token", headers={"WWW-Authenticate": "Bearer"})
        if not user["is_active"]:
            raise AuthError("Account deactivated")
        profile_row = _ensure_profile(db, user)

    return CurrentUser(profile=profile_from_row(profile_row))


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> CurrentUser:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.get("/protected")
        async def route(user: CurrentUser = Depends(get_current_user)):
            return user.profile
    """
    if credentials is None:
        raise AuthError("Please sign in to continue", headers={"WWW-Authenticate": "Bearer"})
    return load_current_user(credentials.credentials)


async def get_current_student(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Dependency - Require student role."""
    if user.role != "student":
        raise PermissionDenied("Students only")
    return user


async def get_current_company(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Dependency - Require company role."""
    if user.role != "company":
        raise PermissionDenied("Companies only")
    return user


async def get_current_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not user.is_admin:
        raise PermissionDenied("Admin access required")
    return user


async def get_company_or_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if user.role not in ("company", "admin"):
        raise PermissionDenied("Companies and admins only")
    return user
