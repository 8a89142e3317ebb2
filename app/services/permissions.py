"""
Authorization rules keyed off role and the has-applied-to relationship.

can_message() evaluates, first match wins:
1. sender is an admin                 -> allow
2. recipient is an admin              -> allow
3. company -> student, student applied to one of the company's internships -> allow
4. student -> company, student applied to one of the company's internships -> allow
5. otherwise                          -> deny

can_message() never compares role strings: each profile variant declares
its own capabilities (messages_anyone, reachable_by_anyone,
messaging_counterpart, messaging_denial).

check_can_message() also refuses a student or company writing to itself;
an admin keeps rule 1 for every recipient, itself included.
"""

import logging
from typing import List, Optional, Tuple

from app.core.auth import AnyProfile
from app.core.errors import PermissionDenied
from app.db.postgres import execute_raw_sql, fetch_one

logger = logging.getLogger(__name__)


def has_applied(student_id: str, company_id: str, internship_id: Optional[str] = None) -> bool:
    """True if the student has at least one application to an internship of the company."""
    sql = """
        SELECT a.id FROM applications a
        JOIN internships i ON a.internship_id = i.id
        WHERE a.student_id = :sid AND i.company_id = :cid
    """
    params = {"sid": student_id, "cid": company_id}
    if internship_id:
        sql += " AND a.internship_id = :iid"
        params["iid"] = internship_id
    return fetch_one(sql + " LIMIT 1", params) is not None


def can_message(sender: AnyProfile, recipient: AnyProfile, applied: bool) -> bool:
    """Pure rule evaluation; `applied` is the has-applied-to relationship between the two."""
    if sender.messages_anyone:
        return True
    if recipient.reachable_by_anyone:
        return True
    if sender.messaging_counterpart is None or recipient.role != sender.messaging_counterpart:
        return False
    return applied


def _relationship(sender: AnyProfile, recipient: AnyProfile, internship_id: Optional[str]) -> bool:
    # Only a student/company pair has a relationship worth looking up
    if sender.messaging_counterpart is None or recipient.role != sender.messaging_counterpart:
        return False
    if sender.role == "student":
        return has_applied(sender.id, recipient.id, internship_id)
    return has_applied(recipient.id, sender.id, internship_id)


def check_can_message(
    sender: AnyProfile, recipient: AnyProfile, internship_id: Optional[str] = None
) -> Tuple[bool, Optional[str]]:
    """Returns (allowed, role-specific reason when denied)."""
    if sender.id == recipient.id and not sender.messages_anyone:
        return False, "You cannot message yourself"
    needs_lookup = not (sender.messages_anyone or recipient.reachable_by_anyone)
    applied = _relationship(sender, recipient, internship_id) if needs_lookup else False
    if can_message(sender, recipient, applied):
        return True, None
    return False, sender.messaging_denial


def ensure_can_message(sender: AnyProfile, recipient: AnyProfile, internship_id: Optional[str] = None) -> None:
    allowed, reason = check_can_message(sender, recipient, internship_id)
    if not allowed:
        logger.info("Denied message from %s (%s) to %s (%s)", sender.id, sender.role, recipient.id, recipient.role)
        raise PermissionDenied(reason)


def can_view_profile(viewer: AnyProfile, target: AnyProfile) -> bool:
    """
    Admins see everyone, anyone sees companies and admins, a company sees
    the students who applied to it, a student sees only itself.
    """
    if viewer.id == target.id or viewer.role == "admin":
        return True
    if target.role in ("company", "admin"):
        return True
    if viewer.role == "company":
        return has_applied(target.id, viewer.id)
    return False


def allowed_recipients(sender: AnyProfile) -> List[dict]:
    """Profiles the sender may start a conversation with."""
    columns = "p.id, p.email, p.full_name, p.role, p.company_name"
    if sender.messages_anyone:
        return execute_raw_sql(
            f"SELECT {columns} FROM profiles p WHERE p.id <> :id ORDER BY p.role, p.full_name",
            {"id": sender.id}
        )

    admins = execute_raw_sql(
        f"SELECT {columns} FROM profiles p WHERE p.role = 'admin' AND p.id <> :id ORDER BY p.full_name",
        {"id": sender.id}
    )
    if sender.role == "company":
        related = execute_raw_sql(f"""
            SELECT DISTINCT {columns} FROM profiles p
            JOIN applications a ON a.student_id = p.id
            JOIN internships i ON a.internship_id = i.id
            WHERE i.company_id = :id
            ORDER BY p.full_name
        """, {"id": sender.id})
    elif sender.role == "student":
        related = execute_raw_sql(f"""
            SELECT DISTINCT {columns} FROM profiles p
            JOIN internships i ON i.company_id = p.id
            JOIN applications a ON a.internship_id = i.id
            WHERE a.student_id = :id
            ORDER BY p.full_name
        """, {"id": sender.id})
    else:
        related = []
    return admins + related
