"""
Admin back-office: dashboard counts, application analytics, profile
deletion with its cascade and creation of admin accounts.
"""

import logging
from collections import Counter
from datetime import datetime

from sqlalchemy import text

from app.core.auth import hash_password, new_id, utcnow
from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.db.postgres import get_db_session, execute_raw_sql, fetch_one

logger = logging.getLogger(__name__)


def _count(sql: str, params: dict = None) -> int:
    return int(fetch_one(sql, params)["n"])


def dashboard_stats() -> dict:
    return {
        "total_students": _count("SELECT COUNT(*) AS n FROM profiles WHERE role = 'student'"),
        "total_companies": _count("SELECT COUNT(*) AS n FROM profiles WHERE role = 'company'"),
        "total_internships": _count("SELECT COUNT(*) AS n FROM internships"),
        "active_applications": _count("SELECT COUNT(*) AS n FROM applications WHERE status = 'pending'"),
    }


def _day(value) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    # SQLite hands timestamps back as text
    return str(value)[:10]


def application_analytics() -> dict:
    rows = execute_raw_sql("""
        SELECT a.status, a.created_at, i.title, c.company_name
        FROM applications a
        JOIN internships i ON a.internship_id = i.id
        JOIN profiles c ON i.company_id = c.id
    """)
    by_status = {s: 0 for s in ("pending", "reviewing", "accepted", "rejected")}
    by_status.update(Counter(r["status"] for r in rows))
    return {
        "total_applications": len(rows),
        "by_status": by_status,
        "by_date": dict(Counter(_day(r["created_at"]) for r in rows)),
        "by_internship": dict(Counter(r["title"] or "Untitled Internship" for r in rows)),
        "by_company": dict(Counter(r["company_name"] or "Unnamed Company" for r in rows)),
    }


def list_profiles(role: str, search: str = None) -> list:
    sql = "SELECT * FROM profiles WHERE role = :role"
    params = {"role": role}
    if search:
        sql += " AND (LOWER(full_name) LIKE :q OR LOWER(email) LIKE :q OR LOWER(company_name) LIKE :q)"
        params["q"] = f"%{search.lower()}%"
    sql += " ORDER BY created_at DESC"
    return execute_raw_sql(sql, params)


def delete_profile(profile_id: str, acting_admin_id: str) -> dict:
    """
    Delete a profile and everything hanging off it.

    For a company that is its internships and, through them, their
    applications, interviews and bookmarks. Runs as one transaction.
    """
    if profile_id == acting_admin_id:
        raise ValidationError("You cannot delete your own account", field="profile_id")

    with get_db_session() as db:
        profile = db.execute(
            text("SELECT id, role FROM profiles WHERE id = :id"), {"id": profile_id}
        ).mappings().fetchone()
        if not profile:
            raise NotFoundError("Profile not found")

        internship_ids = [r[0] for r in db.execute(
            text("SELECT id FROM internships WHERE company_id = :id"), {"id": profile_id}
        ).fetchall()]

        applications_deleted = 0
        for internship_id in internship_ids:
            params = {"iid": internship_id}
            db.execute(text("""
                DELETE FROM interviews WHERE application_id IN
                    (SELECT id FROM applications WHERE internship_id = :iid)
            """), params)
            applications_deleted += db.execute(
                text("DELETE FROM applications WHERE internship_id = :iid"), params
            ).rowcount
            db.execute(text("DELETE FROM bookmarks WHERE internship_id = :iid"), params)

        internships_deleted = db.execute(
            text("DELETE FROM internships WHERE company_id = :id"), {"id": profile_id}
        ).rowcount

        params = {"id": profile_id}
        db.execute(text("DELETE FROM interviews WHERE student_id = :id OR company_id = :id"), params)
        applications_deleted += db.execute(
            text("DELETE FROM applications WHERE student_id = :id"), params
        ).rowcount
        db.execute(text("DELETE FROM bookmarks WHERE student_id = :id"), params)
        db.execute(text("DELETE FROM messages WHERE sender_id = :id OR recipient_id = :id"), params)
        db.execute(text("DELETE FROM notifications WHERE user_id = :id"), params)
        db.execute(text("DELETE FROM profiles WHERE id = :id"), params)
        db.execute(text("DELETE FROM users WHERE id = :id"), params)

    logger.info(
        "Admin %s deleted %s profile %s (%d internships, %d applications)",
        acting_admin_id, profile["role"], profile_id, internships_deleted, applications_deleted
    )
    return {
        "profile_id": profile_id,
        "internships_deleted": internships_deleted,
        "applications_deleted": applications_deleted,
    }


def create_admin_account(email: str, password: str, full_name: str = None) -> str:
    """Create a confirmed admin identity and its profile. Returns the new id."""
    user_id = new_id()
    now = utcnow()
    with get_db_session() as db:
        if db.execute(text("SELECT id FROM users WHERE email = :email"), {"email": email}).fetchone():
            raise ConflictError("Email already registered")
        db.execute(
            text("""
                INSERT INTO users (id, email, password_hash, role, email_confirmed, is_active, created_at)
                VALUES (:id, :email, :password_hash, 'admin', :true, :true, :now)
            """),
            {"id": user_id, "email": email, "password_hash": hash_password(password), "true": True, "now": now}
        )
        db.execute(
            text("""
                INSERT INTO profiles (id, email, role, full_name, created_at, updated_at)
                VALUES (:id, :email, 'admin', :full_name, :now, :now)
            """),
            {"id": user_id, "email": email, "full_name": full_name, "now": now}
        )
    logger.info("Admin account %s created for %s", user_id, email)
    return user_id
