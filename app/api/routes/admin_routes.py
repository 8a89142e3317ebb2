"""
Admin Routes (admin only)

GET /admin/stats - Dashboard counts
GET /admin/analytics - Application breakdowns
GET /admin/students - Student profiles
GET /admin/companies - Company profiles
DELETE /admin/profiles/{profile_id} - Delete a profile and everything it owns
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.core.auth import CurrentUser, get_current_admin
from app.core.errors import require_confirmation
from app.services import admin_service
from app.schemas.schemas import (
    DashboardStats, ApplicationAnalytics, StudentProfile, CompanyProfile, DeleteProfileResponse
)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/stats", response_model=DashboardStats)
async def get_stats(admin: CurrentUser = Depends(get_current_admin)):
    return admin_service.dashboard_stats()


@router.get("/analytics", response_model=ApplicationAnalytics)
async def get_analytics(admin: CurrentUser = Depends(get_current_admin)):
    return admin_service.application_analytics()


@router.get("/students", response_model=List[StudentProfile])
async def list_students(
    search: Optional[str] = Query(None),
    admin: CurrentUser = Depends(get_current_admin)
):
    return admin_service.list_profiles("student", search)


@router.get("/companies", response_model=List[CompanyProfile])
async def list_companies(
    search: Optional[str] = Query(None),
    admin: CurrentUser = Depends(get_current_admin)
):
    return admin_service.list_profiles("company", search)


@router.delete("/profiles/{profile_id}", response_model=DeleteProfileResponse)
async def delete_profile(
    profile_id: str,
    confirm: bool = Query(False),
    admin: CurrentUser = Depends(get_current_admin)
):
    """
    Delete a student or company account.

    Deleting a company removes its internships and every application,
    interview and bookmark attached to them. Requires confirm=true.
    """
    require_confirmation(confirm, "a profile")
    return admin_service.delete_profile(profile_id, admin.id)
