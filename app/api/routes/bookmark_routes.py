"""
Bookmark Routes (students only)

POST /bookmarks/toggle - Bookmark or un-bookmark an internship
GET /bookmarks - Saved internships
DELETE /bookmarks/{internship_id} - Remove a bookmark
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import text

from app.db.postgres import get_db_session, execute_raw_sql
from app.core.auth import CurrentUser, get_current_student, new_id, utcnow
from app.core.errors import NotFoundError
from app.api.routes.internship_routes import INTERNSHIP_SELECT, internship_from_row
from app.schemas.schemas import BookmarkToggle, BookmarkToggleResponse, BookmarkResponse, MessageResponse

router = APIRouter(prefix="/bookmarks", tags=["Bookmarks"])


@router.post("/toggle", response_model=BookmarkToggleResponse)
async def toggle_bookmark(data: BookmarkToggle, student: CurrentUser = Depends(get_current_student)):
    """Flip the bookmark state for (student, internship) and return the new state."""
    params = {"sid": student.id, "iid": data.internship_id}
    with get_db_session() as db:
        result = db.execute(
            text("DELETE FROM bookmarks WHERE student_id = :sid AND internship_id = :iid"), params
        )
        if result.rowcount > 0:
            return BookmarkToggleResponse(internship_id=data.internship_id, bookmarked=False)

        # Students can only save open postings
        if not db.execute(
            text("SELECT id FROM internships WHERE id = :iid AND status = 'open'"), params
        ).fetchone():
            raise NotFoundError("Internship not found")

        db.execute(
            text("""
                INSERT INTO bookmarks (id, student_id, internship_id, created_at)
                VALUES (:id, :sid, :iid, :now)
            """),
            dict(params, id=new_id(), now=utcnow())
        )

    return BookmarkToggleResponse(internship_id=data.internship_id, bookmarked=True)


@router.get("", response_model=List[BookmarkResponse])
async def list_bookmarks(student: CurrentUser = Depends(get_current_student)):
    bookmarks = execute_raw_sql("""
        SELECT id, student_id, internship_id, created_at FROM bookmarks
        WHERE student_id = :sid ORDER BY created_at DESC
    """, {"sid": student.id})

    response = []
    for b in bookmarks:
        internship = execute_raw_sql(
            INTERNSHIP_SELECT + " WHERE i.id = :id AND i.status = 'open'", {"id": b["internship_id"]}
        )
        response.append(BookmarkResponse(
            **b, internship=internship_from_row(internship[0]) if internship else None
        ))
    return response


@router.delete("/{internship_id}", response_model=MessageResponse)
async def remove_bookmark(internship_id: str, student: CurrentUser = Depends(get_current_student)):
    with get_db_session() as db:
        result = db.execute(
            text("DELETE FROM bookmarks WHERE student_id = :sid AND internship_id = :iid"),
            {"sid": student.id, "iid": internship_id}
        )
        if result.rowcount == 0:
            raise NotFoundError("Bookmark not found")

    return MessageResponse(message="Bookmark removed")
