"""
Internship Routes

POST /internships - Create internship posting (company only)
GET /internships - List open internships with filters
GET /internships/mine - Company's own postings, any status
GET /internships/{internship_id} - Get internship details
PUT /internships/{internship_id} - Update internship (owning company or admin)
DELETE /internships/{internship_id} - Delete internship (owning company or admin)
"""

import json
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import text

from app.db.postgres import get_db_session, execute_raw_sql, fetch_one
from app.core.auth import CurrentUser, get_current_user, get_current_company, get_company_or_admin, new_id, utcnow
from app.core.errors import NotFoundError, require_confirmation
from app.schemas.schemas import (
    InternshipCreate, InternshipUpdate, InternshipResponse, InternshipType, MessageResponse
)

router = APIRouter(prefix="/internships", tags=["Internships"])
logger = logging.getLogger(__name__)

INTERNSHIP_SELECT = """
    SELECT i.id, i.company_id, c.company_name, i.title, i.description, i.requirements, i.location,
           i.is_remote, i.type, i.duration, i.stipend, i.deadline, i.skills, i.status,
           i.created_at, i.updated_at
    FROM internships i JOIN profiles c ON i.company_id = c.id
"""


def internship_from_row(r: dict) -> InternshipResponse:
    skills = r["skills"]
    if isinstance(skills, str):
        skills = json.loads(skills or "[]")
    return InternshipResponse(**dict(r, skills=skills if isinstance(skills, list) else []))


def _owned_or_404(internship_id: str, user: CurrentUser) -> dict:
    row = fetch_one("SELECT id, company_id, title FROM internships WHERE id = :id", {"id": internship_id})
    if not row or not (user.is_admin or row["company_id"] == user.id):
        raise NotFoundError("Internship not found or access denied")
    return row


@router.post("", response_model=InternshipResponse, status_code=201)
async def create_internship(data: InternshipCreate, company: CurrentUser = Depends(get_current_company)):
    """Create a new internship posting. Only companies can create postings."""
    internship_id = new_id()
    now = utcnow()
    with get_db_session() as db:
        db.execute(
            text("""
                INSERT INTO internships (id, company_id, title, description, requirements, location,
                    is_remote, type, duration, stipend, deadline, skills, status, created_at, updated_at)
                VALUES (:id, :company_id, :title, :description, :requirements, :location,
                    :is_remote, :type, :duration, :stipend, :deadline, :skills, :status, :now, :now)
            """),
            {
                "id": internship_id, "company_id": company.id, "title": data.title,
                "description": data.description, "requirements": data.requirements,
                "location": data.location, "is_remote": data.is_remote, "type": data.type.value,
                "duration": data.duration, "stipend": data.stipend, "deadline": data.deadline,
                "skills": json.dumps(data.skills), "status": data.status.value, "now": now
            }
        )

    logger.info("Company %s created internship %s", company.id, internship_id)
    return internship_from_row(fetch_one(INTERNSHIP_SELECT + " WHERE i.id = :id", {"id": internship_id}))


@router.get("", response_model=List[InternshipResponse])
async def list_internships(
    search: Optional[str] = Query(None, description="Search in title and description"),
    location: Optional[str] = Query(None),
    type: Optional[InternshipType] = Query(None),
    remote_only: bool = Query(False),
    skill: Optional[str] = Query(None, description="Filter by required skill"),
    company_id: Optional[str] = Query(None)
):
    """List open internships, newest first."""
    sql = INTERNSHIP_SELECT + " WHERE i.status = 'open'"
    params = {}

    if search:
        sql += " AND (LOWER(i.title) LIKE :search OR LOWER(i.description) LIKE :search)"
        params["search"] = f"%{search.lower()}%"
    if location:
        sql += " AND LOWER(i.location) LIKE :location"
        params["location"] = f"%{location.lower()}%"
    if type:
        sql += " AND i.type = :type"
        params["type"] = type.value
    if remote_only:
        sql += " AND i.is_remote = :true"
        params["true"] = True
    if company_id:
        sql += " AND i.company_id = :cid"
        params["cid"] = company_id

    sql += " ORDER BY i.created_at DESC"
    internships = [internship_from_row(r) for r in execute_raw_sql(sql, params)]

    if skill:
        wanted = skill.lower()
        internships = [i for i in internships if wanted in (s.lower() for s in i.skills)]
    return internships


@router.get("/mine", response_model=List[InternshipResponse])
async def list_my_internships(
    status: Optional[str] = Query(None),
    company: CurrentUser = Depends(get_current_company)
):
    """Get all internships posted by this company."""
    sql = INTERNSHIP_SELECT + " WHERE i.company_id = :cid"
    params = {"cid": company.id}
    if status:
        sql += " AND i.status = :status"
        params["status"] = status
    sql += " ORDER BY i.created_at DESC"
    return [internship_from_row(r) for r in execute_raw_sql(sql, params)]


@router.get("/{internship_id}", response_model=InternshipResponse)
async def get_internship(internship_id: str, user: CurrentUser = Depends(get_current_user)):
    """Get details of an internship. Non-open postings are visible to their owner and admins only."""
    r = fetch_one(INTERNSHIP_SELECT + " WHERE i.id = :id", {"id": internship_id})
    if not r:
        raise NotFoundError("Internship not found")
    if r["status"] != "open" and not (user.is_admin or r["company_id"] == user.id):
        raise NotFoundError("Internship not found")
    return internship_from_row(r)


@router.put("/{internship_id}", response_model=InternshipResponse)
async def update_internship(
    internship_id: str,
    update: InternshipUpdate,
    user: CurrentUser = Depends(get_company_or_admin)
):
    """Update an internship posting."""
    _owned_or_404(internship_id, user)

    updates = []
    params = {"id": internship_id, "now": utcnow()}
    for field, value in update.model_dump(exclude_unset=True).items():
        if value is None and field not in ("stipend", "deadline"):
            continue
        if field == "skills":
            value = json.dumps(value)
        elif field in ("type", "status"):
            value = value.value if hasattr(value, "value") else value
        updates.append(f"{field} = :{field}")
        params[field] = value

    if updates:
        with get_db_session() as db:
            db.execute(
                text(f"UPDATE internships SET {', '.join(updates)}, updated_at = :now WHERE id = :id"),
                params
            )

    return internship_from_row(fetch_one(INTERNSHIP_SELECT + " WHERE i.id = :id", {"id": internship_id}))


@router.delete("/{internship_id}", response_model=MessageResponse)
async def delete_internship(
    internship_id: str,
    confirm: bool = Query(False),
    user: CurrentUser = Depends(get_company_or_admin)
):
    """Delete an internship posting with its applications, interviews and bookmarks."""
    require_confirmation(confirm, "an internship")
    _owned_or_404(internship_id, user)

    params = {"id": internship_id}
    with get_db_session() as db:
        db.execute(text("""
            DELETE FROM interviews WHERE application_id IN
                (SELECT id FROM applications WHERE internship_id = :id)
        """), params)
        db.execute(text("DELETE FROM applications WHERE internship_id = :id"), params)
        db.execute(text("DELETE FROM bookmarks WHERE internship_id = :id"), params)
        db.execute(text("DELETE FROM internships WHERE id = :id"), params)

    logger.info("Internship %s deleted by %s", internship_id, user.id)
    return MessageResponse(message="Internship deleted successfully")
