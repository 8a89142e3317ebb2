"""
Application Lifecycle Service

States: pending -> reviewing -> accepted | rejected

    (none)    -> pending     student applies (resume copied from profile)
    pending   -> reviewing   company owner / admin
    reviewing -> accepted    company owner / admin, notifies the student
    reviewing -> rejected    company owner / admin, notifies the student

Scheduling an interview moves a pending application to reviewing and
notifies the student. accepted and rejected are terminal.

Status writes are compare-and-swap on the `version` column, so two
reviewers updating the same application cannot silently overwrite each
other.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from app.core.auth import CurrentUser, new_id, utcnow
from app.core.errors import (
    ConflictError, MissingResumeError, NotFoundError, PermissionDenied, ValidationError
)
from app.db.postgres import get_db_session
from app.services.notification_service import emit_notification

logger = logging.getLogger(__name__)

INITIAL_STATUS = "pending"

TRANSITIONS: Dict[str, Set[str]] = {
    "pending": {"reviewing"},
    "reviewing": {"accepted", "rejected"},
    "accepted": set(),
    "rejected": set(),
}

STATUS_NOTIFICATIONS = {
    "accepted": (
        "Application accepted",
        "Congratulations! Your application for {title} at {company} has been accepted."
    ),
    "rejected": (
        "Application update",
        "Your application for {title} at {company} was not selected this time."
    ),
}

APPLICATION_SELECT = """
    SELECT a.id, a.internship_id, i.title AS internship_title, i.company_id,
           c.company_name, a.student_id, s.full_name AS student_name,
           a.cover_letter, a.resume_url, a.status, a.version, a.created_at, a.updated_at
    FROM applications a
    JOIN internships i ON a.internship_id = i.id
    JOIN profiles c ON i.company_id = c.id
    JOIN profiles s ON a.student_id = s.id
"""


def can_transition(current: str, new: str) -> bool:
    return new in TRANSITIONS.get(current, set())


def _fetch_application(db, application_id: str) -> Optional[dict]:
    result = db.execute(text(APPLICATION_SELECT + " WHERE a.id = :id"), {"id": application_id})
    row = result.mappings().fetchone()
    return dict(row) if row else None


def _visible_to(user: CurrentUser, application: dict) -> bool:
    if user.is_admin:
        return True
    if user.role == "company":
        return application["company_id"] == user.id
    return application["student_id"] == user.id


def get_application(user: CurrentUser, application_id: str) -> dict:
    with get_db_session() as db:
        application = _fetch_application(db, application_id)
    if not application or not _visible_to(user, application):
        raise NotFoundError("Application not found")
    return application


def list_applications(
    user: CurrentUser,
    internship_id: Optional[str] = None,
    status: Optional[str] = None
) -> List[dict]:
    """Students see their own, companies see those to their internships, admins see all."""
    sql = APPLICATION_SELECT + " WHERE 1 = 1"
    params = {}
    if user.role == "student":
        sql += " AND a.student_id = :uid"
        params["uid"] = user.id
    elif user.role == "company":
        sql += " AND i.company_id = :uid"
        params["uid"] = user.id
    if internship_id:
        sql += " AND a.internship_id = :iid"
        params["iid"] = internship_id
    if status:
        sql += " AND a.status = :status"
        params["status"] = status
    sql += " ORDER BY a.created_at DESC"

    with get_db_session() as db:
        result = db.execute(text(sql), params)
        return [dict(r) for r in result.mappings().fetchall()]


def submit_application(student: CurrentUser, internship_id: str, cover_letter: Optional[str]) -> dict:
    """
    Create a pending application.

    Nothing is written unless the internship is open, the student's profile
    has a resume and the student has not applied to this internship yet.
    """
    with get_db_session() as db:
        internship = db.execute(
            text("""
                SELECT i.id, i.title, i.status, i.company_id, c.company_name
                FROM internships i JOIN profiles c ON i.company_id = c.id
                WHERE i.id = :id
            """),
            {"id": internship_id}
        ).mappings().fetchone()
        if not internship:
            raise NotFoundError("Internship not found")
        if internship["status"] != "open":
            raise ValidationError("This internship is not accepting applications", field="internship_id")

        resume_url = db.execute(
            text("SELECT resume_url FROM profiles WHERE id = :id"), {"id": student.id}
        ).scalar()
        if not resume_url:
            raise MissingResumeError()

        existing = db.execute(
            text("SELECT id FROM applications WHERE student_id = :sid AND internship_id = :iid"),
            {"sid": student.id, "iid": internship_id}
        ).fetchone()
        if existing:
            raise ConflictError("You have already applied to this internship", application_id=existing[0])

        application_id = new_id()
        now = utcnow()
        try:
            db.execute(
                text("""
                    INSERT INTO applications (id, internship_id, student_id, cover_letter, resume_url,
                        status, version, created_at, updated_at)
                    VALUES (:id, :iid, :sid, :cover, :resume, :status, 1, :now, :now)
                """),
                {
                    "id": application_id, "iid": internship_id, "sid": student.id,
                    "cover": cover_letter, "resume": resume_url, "status": INITIAL_STATUS, "now": now
                }
            )
            db.flush()
        except IntegrityError:
            # Lost a race against a concurrent submission for the same pair
            raise ConflictError("You have already applied to this internship")

        student_name = student.profile.full_name or student.profile.email
        emit_notification(
            db,
            user_id=internship["company_id"],
            type="application",
            title="New application",
            content=f"{student_name} applied for {internship['title']}",
            related_id=application_id
        )
        application = _fetch_application(db, application_id)

    logger.info("Student %s applied to internship %s", student.id, internship_id)
    return application


def change_status(
    actor: CurrentUser,
    application_id: str,
    new_status: str,
    expected_version: Optional[int] = None
) -> dict:
    """Apply one transition from the table above; returns the row as re-read after the write."""
    with get_db_session() as db:
        application = _fetch_application(db, application_id)
        if not application or not (actor.is_admin or application["company_id"] == actor.id):
            raise NotFoundError("Application not found")

        current = application["status"]
        if not can_transition(current, new_status):
            raise ConflictError(
                f"Cannot change application status from '{current}' to '{new_status}'",
                current_status=current
            )

        version = application["version"] if expected_version is None else expected_version
        result = db.execute(
            text("""
                UPDATE applications
                SET status = :status, version = version + 1, updated_at = :now
                WHERE id = :id AND version = :version
            """),
            {"status": new_status, "now": utcnow(), "id": application_id, "version": version}
        )
        if result.rowcount == 0:
            raise ConflictError(
                "Application was modified by someone else. Reload and try again.",
                current_version=application["version"]
            )

        if new_status in STATUS_NOTIFICATIONS:
            title, template = STATUS_NOTIFICATIONS[new_status]
            emit_notification(
                db,
                user_id=application["student_id"],
                type="status_change",
                title=title,
                content=template.format(
                    title=application["internship_title"],
                    company=application["company_name"] or "the company"
                ),
                related_id=application_id
            )
        updated = _fetch_application(db, application_id)

    logger.info("Application %s: %s -> %s by %s", application_id, current, new_status, actor.id)
    return updated


def delete_application(admin: CurrentUser, application_id: str) -> None:
    """Admin-only hard delete; the student is told their application was removed."""
    if not admin.is_admin:
        raise PermissionDenied("Admin access required")
    with get_db_session() as db:
        application = _fetch_application(db, application_id)
        if not application:
            raise NotFoundError("Application not found")
        db.execute(text("DELETE FROM interviews WHERE application_id = :id"), {"id": application_id})
        db.execute(text("DELETE FROM applications WHERE id = :id"), {"id": application_id})
        emit_notification(
            db,
            user_id=application["student_id"],
            type="status_change",
            title="Application removed",
            content=f"Your application for {application['internship_title']} was removed by an administrator.",
            related_id=application["internship_id"]
        )
    logger.info("Application %s deleted by admin %s", application_id, admin.id)


def _as_utc(value: datetime) -> datetime:
    """Timestamps without an offset are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def schedule_interview(
    company: CurrentUser,
    application_id: str,
    start_time,
    end_time,
    meeting_type: str,
    meeting_link: Optional[str] = None,
    description: Optional[str] = None,
    title: Optional[str] = None
) -> dict:
    """
    Create an interview for an application of one of the company's internships.

    A pending application moves to reviewing; an application already past
    pending keeps its status.
    """
    start_time, end_time = _as_utc(start_time), _as_utc(end_time)
    if end_time <= start_time:
        raise ValidationError("Interview must end after it starts", field="end_time")

    with get_db_session() as db:
        application = _fetch_application(db, application_id)
        if not application or application["company_id"] != company.id:
            raise NotFoundError("Application not found")

        interview_id = new_id()
        db.execute(
            text("""
                INSERT INTO interviews (id, application_id, student_id, company_id, title, start_time,
                    end_time, meeting_type, meeting_link, description, status, created_at)
                VALUES (:id, :aid, :sid, :cid, :title, :start, :end, :mtype, :link, :descr, 'scheduled', :now)
            """),
            {
                "id": interview_id, "aid": application_id, "sid": application["student_id"],
                "cid": company.id,
                "title": title or f"Interview with {application['student_name'] or 'applicant'}",
                "start": start_time, "end": end_time, "mtype": meeting_type,
                "link": meeting_link, "descr": description, "now": utcnow()
            }
        )

        if application["status"] == "pending":
            db.execute(
                text("""
                    UPDATE applications SET status = 'reviewing', version = version + 1, updated_at = :now
                    WHERE id = :id
                """),
                {"id": application_id, "now": utcnow()}
            )

        company_name = getattr(company.profile, "company_name", None) or "A company"
        emit_notification(
            db,
            user_id=application["student_id"],
            type="interview_scheduled",
            title="Interview scheduled",
            content=f"{company_name} has scheduled an interview with you for {application['internship_title']}.",
            related_id=interview_id
        )
        interview = db.execute(
            text("SELECT * FROM interviews WHERE id = :id"), {"id": interview_id}
        ).mappings().fetchone()

    logger.info("Interview %s scheduled for application %s", interview_id, application_id)
    return dict(interview)
