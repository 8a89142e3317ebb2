"""
Profile Routes

GET /profiles/me - Get own profile
PUT /profiles/me - Update own profile (role-specific fields only)
GET /profiles/{profile_id} - View another profile
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text

from app.db.postgres import get_db_session, fetch_one
from app.core.auth import CurrentUser, get_current_user, utcnow
from app.core.errors import NotFoundError, ValidationError
from app.services.permissions import can_view_profile
from app.schemas.schemas import Profile, ProfileUpdate, profile_from_row

router = APIRouter(prefix="/profiles", tags=["Profiles"])


@router.get("/me", response_model=Profile)
async def get_my_profile(user: CurrentUser = Depends(get_current_user)):
    return user.profile


@router.put("/me", response_model=Profile)
async def update_my_profile(data: ProfileUpdate, user: CurrentUser = Depends(get_current_user)):
    """Update own profile. Only provided fields that belong to the caller's role are accepted."""
    provided = data.model_dump(exclude_unset=True)
    foreign = sorted(set(provided) - set(user.profile.editable_fields))
    if foreign:
        raise ValidationError(
            f"Fields not available for a {user.role} profile: {', '.join(foreign)}", field=foreign[0]
        )
    if not provided:
        raise ValidationError("No fields to update")

    updates = [f"{field} = :{field}" for field in provided]
    params = dict(provided, id=user.id, now=utcnow())

    with get_db_session() as db:
        db.execute(
            text(f"UPDATE profiles SET {', '.join(updates)}, updated_at = :now WHERE id = :id"),
            params
        )
        row = db.execute(text("SELECT * FROM profiles WHERE id = :id"), {"id": user.id}).mappings().fetchone()

    return profile_from_row(dict(row))


@router.get("/{profile_id}", response_model=Profile)
async def get_profile(profile_id: str, user: CurrentUser = Depends(get_current_user)):
    row = fetch_one("SELECT * FROM profiles WHERE id = :id", {"id": profile_id})
    if not row:
        raise NotFoundError("Profile not found")
    target = profile_from_row(row)
    if not can_view_profile(user.profile, target):
        raise NotFoundError("Profile not found")
    return target
