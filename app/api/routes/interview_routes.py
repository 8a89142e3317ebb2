"""
Interview Routes

POST /interviews - Schedule an interview for an application (company only)
GET /interviews - Own (student/company) or all (admin)
PATCH /interviews/{interview_id}/status - Complete or cancel (company owner or admin)
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import text

from app.db.postgres import get_db_session, execute_raw_sql, fetch_one
from app.core.auth import CurrentUser, get_current_user, get_current_company, get_company_or_admin
from app.core.errors import NotFoundError
from app.services import application_service
from app.schemas.schemas import InterviewCreate, InterviewResponse, InterviewStatus, InterviewStatusUpdate

router = APIRouter(prefix="/interviews", tags=["Interviews"])


@router.post("", response_model=InterviewResponse, status_code=201)
async def schedule_interview(data: InterviewCreate, company: CurrentUser = Depends(get_current_company)):
    """Schedule an interview. The student is notified and a pending application moves to reviewing."""
    return application_service.schedule_interview(
        company,
        data.application_id,
        start_time=data.start_time,
        end_time=data.end_time,
        meeting_type=data.meeting_type.value,
        meeting_link=data.meeting_link,
        description=data.description,
        title=data.title
    )


@router.get("", response_model=List[InterviewResponse])
async def list_interviews(
    status: Optional[InterviewStatus] = Query(None),
    user: CurrentUser = Depends(get_current_user)
):
    sql = "SELECT * FROM interviews WHERE 1 = 1"
    params = {}
    if user.role == "student":
        sql += " AND student_id = :uid"
        params["uid"] = user.id
    elif user.role == "company":
        sql += " AND company_id = :uid"
        params["uid"] = user.id
    if status:
        sql += " AND status = :status"
        params["status"] = status.value
    sql += " ORDER BY start_time ASC"
    return execute_raw_sql(sql, params)


@router.patch("/{interview_id}/status", response_model=InterviewResponse)
async def update_interview_status(
    interview_id: str,
    update: InterviewStatusUpdate,
    user: CurrentUser = Depends(get_company_or_admin)
):
    row = fetch_one("SELECT company_id FROM interviews WHERE id = :id", {"id": interview_id})
    if not row or not (user.is_admin or row["company_id"] == user.id):
        raise NotFoundError("Interview not found")

    with get_db_session() as db:
        db.execute(
            text("UPDATE interviews SET status = :status WHERE id = :id"),
            {"status": update.status.value, "id": interview_id}
        )

    return fetch_one("SELECT * FROM interviews WHERE id = :id", {"id": interview_id})
