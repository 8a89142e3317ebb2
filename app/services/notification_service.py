"""
Notification Service - the per-user feed table.

Notifications are written by the system as a side effect of another
actor's action (new application, message, status change, interview).
emit_notification() takes the caller's open session so the feed entry
commits (or rolls back) together with the write that caused it; the
realtime push happens after commit (see app.services.realtime).
"""

import logging
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.auth import new_id, utcnow
from app.db.postgres import get_db_session, execute_raw_sql, fetch_one

logger = logging.getLogger(__name__)

PENDING_PUSH_KEY = "pending_notification_push"

NOTIFICATION_COLUMNS = "id, user_id, type, related_id, title, content, is_read, created_at"


def _normalize(row: Optional[dict]) -> Optional[dict]:
    if row is None:
        return None
    row["is_read"] = bool(row["is_read"])
    return row


def emit_notification(
    db: Session,
    user_id: str,
    type: str,
    title: str,
    content: str,
    related_id: Optional[str] = None
) -> str:
    """Insert a notification inside the caller's transaction. Returns its id."""
    notification_id = new_id()
    db.execute(
        text("""
            INSERT INTO notifications (id, user_id, type, related_id, title, content, is_read, created_at)
            VALUES (:id, :user_id, :type, :related_id, :title, :content, :is_read, :created_at)
        """),
        {
            "id": notification_id, "user_id": user_id, "type": type, "related_id": related_id,
            "title": title, "content": content, "is_read": False, "created_at": utcnow()
        }
    )
    db.info.setdefault(PENDING_PUSH_KEY, []).append((user_id, notification_id))
    logger.info("Notification %s (%s) queued for user %s", notification_id, type, user_id)
    return notification_id


def list_notifications(user_id: str, limit: int = 10, unread_only: bool = False) -> List[dict]:
    """Newest first."""
    sql = f"SELECT {NOTIFICATION_COLUMNS} FROM notifications WHERE user_id = :uid"
    if unread_only:
        sql += " AND is_read = :false"
    sql += " ORDER BY created_at DESC LIMIT :limit"
    rows = execute_raw_sql(sql, {"uid": user_id, "false": False, "limit": limit})
    return [_normalize(r) for r in rows]


def get_notification(notification_id: str, user_id: str) -> Optional[dict]:
    """Fetch one notification, scoped to its owner."""
    return _normalize(fetch_one(
        f"SELECT {NOTIFICATION_COLUMNS} FROM notifications WHERE id = :id AND user_id = :uid",
        {"id": notification_id, "uid": user_id}
    ))


def unread_count(user_id: str) -> int:
    row = fetch_one(
        "SELECT COUNT(*) AS n FROM notifications WHERE user_id = :uid AND is_read = :false",
        {"uid": user_id, "false": False}
    )
    return int(row["n"])


def mark_notification_as_read(notification_id: str, user_id: str) -> bool:
    """
    Idempotent read-state update scoped to the caller.

    Returns True only when a row actually changed: False if it was already
    read, does not exist, or belongs to someone else.
    """
    with get_db_session() as db:
        result = db.execute(
            text("""
                UPDATE notifications SET is_read = :true
                WHERE id = :id AND user_id = :uid AND is_read = :false
            """),
            {"id": notification_id, "uid": user_id, "true": True, "false": False}
        )
        return result.rowcount > 0


def mark_all_as_read(user_id: str) -> int:
    """Mark every unread notification of a user as read. Returns the number changed."""
    with get_db_session() as db:
        result = db.execute(
            text("UPDATE notifications SET is_read = :true WHERE user_id = :uid AND is_read = :false"),
            {"uid": user_id, "true": True, "false": False}
        )
        return result.rowcount
