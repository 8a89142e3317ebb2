"""
Message Service - directed notes between two profiles.

send_message() re-checks the messaging rules at write time; the
GET /messages/can-message gate is only a convenience for clients.
"""

import logging
from typing import List, Optional

from sqlalchemy import text

from app.core.auth import CurrentUser, new_id, utcnow
from app.core.errors import NotFoundError
from app.db.postgres import get_db_session, execute_raw_sql, fetch_one
from app.schemas.schemas import profile_from_row
from app.services.notification_service import emit_notification
from app.services.permissions import ensure_can_message

logger = logging.getLogger(__name__)

MESSAGE_SELECT = """
    SELECT m.id, m.sender_id, m.recipient_id, s.full_name AS sender_name, r.full_name AS recipient_name,
           m.subject, m.message_text, m.related_to, m.related_id, m.is_read, m.created_at, m.updated_at
    FROM messages m
    JOIN profiles s ON m.sender_id = s.id
    JOIN profiles r ON m.recipient_id = r.id
"""


def _normalize(row: dict) -> dict:
    row["is_read"] = bool(row["is_read"])
    return row


def load_profile(profile_id: str):
    row = fetch_one("SELECT * FROM profiles WHERE id = :id", {"id": profile_id})
    if not row:
        raise NotFoundError("Recipient not found")
    return profile_from_row(row)


def send_message(
    sender: CurrentUser,
    recipient_id: str,
    message_text: str,
    subject: Optional[str] = None,
    related_to: str = "general",
    related_id: Optional[str] = None
) -> dict:
    recipient = load_profile(recipient_id)
    internship_id = related_id if related_to == "internship" else None
    ensure_can_message(sender.profile, recipient, internship_id)

    message_id = new_id()
    now = utcnow()
    with get_db_session() as db:
        db.execute(
            text("""
                INSERT INTO messages (id, sender_id, recipient_id, subject, message_text, related_to,
                    related_id, is_read, created_at, updated_at)
                VALUES (:id, :sender, :recipient, :subject, :body, :related_to, :related_id, :false, :now, :now)
            """),
            {
                "id": message_id, "sender": sender.id, "recipient": recipient.id, "subject": subject,
                "body": message_text, "related_to": related_to, "related_id": related_id,
                "false": False, "now": now
            }
        )
        sender_name = sender.profile.full_name or sender.profile.email
        emit_notification(
            db,
            user_id=recipient.id,
            type="message",
            title=f"New message from {sender_name}",
            content=subject or message_text[:120],
            related_id=message_id
        )
        row = db.execute(text(MESSAGE_SELECT + " WHERE m.id = :id"), {"id": message_id}).mappings().fetchone()

    logger.info("Message %s sent from %s to %s", message_id, sender.id, recipient.id)
    return _normalize(dict(row))


def list_messages(user: CurrentUser, box: str = "inbox", unread_only: bool = False) -> List[dict]:
    column = "m.recipient_id" if box == "inbox" else "m.sender_id"
    sql = MESSAGE_SELECT + f" WHERE {column} = :uid"
    params = {"uid": user.id}
    if unread_only:
        sql += " AND m.is_read = :false"
        params["false"] = False
    sql += " ORDER BY m.created_at DESC"
    return [_normalize(r) for r in execute_raw_sql(sql, params)]


def conversation(user: CurrentUser, other_id: str) -> List[dict]:
    """Both directions between the user and one other profile, oldest first."""
    rows = execute_raw_sql(MESSAGE_SELECT + """
        WHERE (m.sender_id = :uid AND m.recipient_id = :other)
           OR (m.sender_id = :other AND m.recipient_id = :uid)
        ORDER BY m.created_at ASC
    """, {"uid": user.id, "other": other_id})
    return [_normalize(r) for r in rows]


def mark_message_as_read(message_id: str, user_id: str) -> bool:
    """Recipient-only, idempotent. True if a row changed."""
    with get_db_session() as db:
        result = db.execute(
            text("""
                UPDATE messages SET is_read = :true, updated_at = :now
                WHERE id = :id AND recipient_id = :uid AND is_read = :false
            """),
            {"id": message_id, "uid": user_id, "true": True, "false": False, "now": utcnow()}
        )
        return result.rowcount > 0
