"""
Realtime notification delivery.

NotificationHub is the in-process push channel: every committed insert
into `notifications` is published to the subscriptions of its user_id.
Events only carry the row id; consumers fetch the full row themselves.

NotificationFeed is the per-connection state of a notifications dropdown:
the newest notifications (capped), an unread counter and the read-state
actions, reconciled from what the database reports.
"""

import asyncio
import logging
import threading
from contextlib import asynccontextmanager
from typing import Dict, List, Optional, Set

from sqlalchemy import event

from app.core.config import get_settings
from app.db.postgres import SessionLocal
from app.services import notification_service

logger = logging.getLogger(__name__)

# Marks a subscription closed from the server side (sign-out)
CLOSED = None

ALERT_CATEGORIES = {
    "message": "message",
    "application": "application",
}


class Subscription:
    """One open push channel for one user."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        self.closed = False
        self._queue: asyncio.Queue = asyncio.Queue()
        self._loop = asyncio.get_running_loop()

    def push(self, event: Optional[dict]) -> None:
        # publish() may run on another thread or event loop
        self._loop.call_soon_threadsafe(self._queue.put_nowait, event)

    async def get(self) -> Optional[dict]:
        """Next event, or None once the subscription was closed."""
        if self.closed and self._queue.empty():
            return CLOSED
        return await self._queue.get()

    def close(self) -> None:
        """Mark closed and wake any waiter in get()."""
        if self.closed:
            return
        self.closed = True
        try:
            self.push(CLOSED)
        except RuntimeError:
            # Owning event loop is gone, nobody is waiting
            pass


class NotificationHub:
    def __init__(self):
        self._subscriptions: Dict[str, Set[Subscription]] = {}
        self._lock = threading.Lock()

    @asynccontextmanager
    async def subscribe(self, user_id: str):
        """
        Open a push channel filtered to one user.

        Usage:
            async with hub.subscribe(user_id) as subscription:
                event = await subscription.get()

        The channel is released on every exit path.
        """
        subscription = Subscription(user_id)
        with self._lock:
            self._subscriptions.setdefault(user_id, set()).add(subscription)
        logger.info("Realtime channel opened for user %s", user_id)
        try:
            yield subscription
        finally:
            self._release(subscription)

    def _release(self, subscription: Subscription) -> None:
        with self._lock:
            subs = self._subscriptions.get(subscription.user_id)
            if subs is not None:
                subs.discard(subscription)
                if not subs:
                    del self._subscriptions[subscription.user_id]
        subscription.close()
        logger.info("Realtime channel released for user %s", subscription.user_id)

    def publish(self, user_id: str, event: dict) -> int:
        """Deliver an event to every open channel of a user. Returns how many received it."""
        with self._lock:
            targets = list(self._subscriptions.get(user_id, ()))
        delivered = 0
        for subscription in targets:
            try:
                subscription.push(event)
                delivered += 1
            except RuntimeError:
                # Owning event loop is gone
                logger.warning("Dropping dead realtime channel for user %s", user_id)
                self._release(subscription)
        return delivered

    def close_user(self, user_id: str) -> int:
        """Close all channels of a user (sign-out)."""
        with self._lock:
            targets = list(self._subscriptions.get(user_id, ()))
        for subscription in targets:
            subscription.close()
        return len(targets)

    def subscriber_count(self, user_id: str) -> int:
        with self._lock:
            return len(self._subscriptions.get(user_id, ()))


notification_hub = NotificationHub()


def get_notification_hub() -> NotificationHub:
    return notification_hub


@event.listens_for(SessionLocal, "after_commit")
def _publish_committed_notifications(session):
    """Push notification inserts only once their transaction is committed."""
    for user_id, notification_id in session.info.pop(notification_service.PENDING_PUSH_KEY, []):
        notification_hub.publish(
            user_id, {"event": "INSERT", "table": "notifications", "id": notification_id}
        )


@event.listens_for(SessionLocal, "after_rollback")
def _discard_rolled_back_notifications(session):
    session.info.pop(notification_service.PENDING_PUSH_KEY, None)


def alert_for(notification: dict) -> dict:
    """Transient user-facing alert for a pushed notification, categorised by type."""
    return {
        "title": notification["title"],
        "category": ALERT_CATEGORIES.get(notification["type"], "general"),
    }


class NotificationFeed:
    """
    Dropdown state for one signed-in user.

    The list is kept newest first and capped; pushed inserts are prepended,
    which assumes the channel delivers in creation order.
    """

    def __init__(self, user_id: str, limit: Optional[int] = None):
        self.user_id = user_id
        self.limit = limit or get_settings().notification_feed_limit
        self.notifications: List[dict] = []
        self.unread_count = 0

    def load(self) -> List[dict]:
        self.notifications = notification_service.list_notifications(self.user_id, limit=self.limit)
        self.unread_count = sum(1 for n in self.notifications if not n["is_read"])
        return self.notifications

    def handle_insert(self, notification_id: str) -> Optional[dict]:
        """Fetch a pushed notification by id and put it on top of the list."""
        row = notification_service.get_notification(notification_id, self.user_id)
        if row is None:
            return None
        already_listed = any(n["id"] == row["id"] for n in self.notifications)
        self.notifications = [row] + [n for n in self.notifications if n["id"] != row["id"]]
        self.notifications = self.notifications[:self.limit]
        if not row["is_read"] and not already_listed:
            self.unread_count += 1
        return row

    def mark_as_read(self, notification_id: str) -> bool:
        updated = notification_service.mark_notification_as_read(notification_id, self.user_id)
        if not updated:
            # Already read elsewhere or not ours: take the database's word for it
            row = notification_service.get_notification(notification_id, self.user_id)
            if row is None or not row["is_read"]:
                return False
        for n in self.notifications:
            if n["id"] == notification_id and not n["is_read"]:
                n["is_read"] = True
                self.unread_count = max(0, self.unread_count - 1)
        return updated

    def mark_all_as_read(self) -> int:
        """Mark each unread loaded notification; rows are independent, so this is not atomic."""
        unread_ids = [n["id"] for n in self.notifications if not n["is_read"]]
        updated = 0
        for notification_id in unread_ids:
            if self.mark_as_read(notification_id):
                updated += 1
        return updated

    def snapshot(self) -> dict:
        return {"notifications": self.notifications, "unread_count": self.unread_count}
