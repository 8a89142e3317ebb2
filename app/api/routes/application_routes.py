"""
Application Routes

POST /applications - Apply to an internship (student only)
GET /applications - Own (student), received (company) or all (admin)
GET /applications/{application_id} - Get one application
PATCH /applications/{application_id}/status - Move through the lifecycle (company owner or admin)
DELETE /applications/{application_id} - Delete an application (admin only)
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.core.auth import CurrentUser, get_current_user, get_current_student, get_company_or_admin, get_current_admin
from app.core.errors import require_confirmation
from app.services import application_service
from app.schemas.schemas import (
    ApplicationCreate, ApplicationResponse, ApplicationStatus, ApplicationStatusUpdate, MessageResponse
)

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.post("", response_model=ApplicationResponse, status_code=201)
async def apply(data: ApplicationCreate, student: CurrentUser = Depends(get_current_student)):
    """
    Apply to an internship.

    Requires a resume on the student's profile; the resume URL is copied
    onto the application. One application per internship.
    """
    return application_service.submit_application(student, data.internship_id, data.cover_letter)


@router.get("", response_model=List[ApplicationResponse])
async def list_applications(
    internship_id: Optional[str] = Query(None),
    status: Optional[ApplicationStatus] = Query(None),
    user: CurrentUser = Depends(get_current_user)
):
    return application_service.list_applications(
        user, internship_id=internship_id, status=status.value if status else None
    )


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(application_id: str, user: CurrentUser = Depends(get_current_user)):
    return application_service.get_application(user, application_id)


@router.patch("/{application_id}/status", response_model=ApplicationResponse)
async def update_application_status(
    application_id: str,
    update: ApplicationStatusUpdate,
    user: CurrentUser = Depends(get_company_or_admin)
):
    """Update status of an application. Pass expected_version to guard against concurrent edits."""
    return application_service.change_status(
        user, application_id, update.status.value, expected_version=update.expected_version
    )


@router.delete("/{application_id}", response_model=MessageResponse)
async def delete_application(
    application_id: str,
    confirm: bool = Query(False),
    admin: CurrentUser = Depends(get_current_admin)
):
    require_confirmation(confirm, "an application")
    application_service.delete_application(admin, application_id)
    return MessageResponse(message="Application deleted successfully")
