"""
Notification Routes

GET /notifications - Latest notifications, newest first
GET /notifications/unread-count - Number of unread notifications
POST /notifications/read-all - Mark every unread notification as read
POST /notifications/{notification_id}/read - Mark one notification as read
WS  /notifications/ws?token=... - Realtime feed

Realtime protocol (JSON frames):
    server -> {"type": "snapshot", "notifications": [...], "unread_count": n}
    server -> {"type": "notification", "notification": {...}, "alert": {...}, "unread_count": n}
    client -> {"action": "mark_read", "id": "..."}   server -> {"type": "read", ...}
    client -> {"action": "mark_all_read"}            server -> {"type": "read_all", ...}
    client -> {"action": "refresh"}                  server -> snapshot
"""

import json
import logging
from typing import List

import anyio
from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from fastapi.encoders import jsonable_encoder

from app.core.auth import CurrentUser, get_current_user, load_current_user
from app.core.config import get_settings
from app.core.errors import AuthError
from app.services import notification_service
from app.services.realtime import NotificationFeed, alert_for, get_notification_hub
from app.schemas.schemas import (
    NotificationResponse, UnreadCountResponse, MarkReadResponse, MarkAllReadResponse
)

router = APIRouter(prefix="/notifications", tags=["Notifications"])
settings = get_settings()
logger = logging.getLogger(__name__)


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    limit: int = Query(settings.notification_feed_limit, ge=1, le=100),
    unread_only: bool = Query(False),
    user: CurrentUser = Depends(get_current_user)
):
    return notification_service.list_notifications(user.id, limit=limit, unread_only=unread_only)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(user: CurrentUser = Depends(get_current_user)):
    return UnreadCountResponse(unread=notification_service.unread_count(user.id))


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(user: CurrentUser = Depends(get_current_user)):
    return MarkAllReadResponse(updated=notification_service.mark_all_as_read(user.id))


@router.post("/{notification_id}/read", response_model=MarkReadResponse)
async def mark_read(notification_id: str, user: CurrentUser = Depends(get_current_user)):
    """Idempotent; `updated` is false when the notification was already read or is not yours."""
    return MarkReadResponse(
        updated=notification_service.mark_notification_as_read(notification_id, user.id)
    )


async def _send(websocket: WebSocket, payload: dict) -> None:
    await websocket.send_json(jsonable_encoder(payload))


async def _push_inserts(websocket: WebSocket, feed: NotificationFeed, subscription) -> None:
    while True:
        event = await subscription.get()
        if event is None:
            # Closed from the server side (sign-out)
            await websocket.close(code=status.WS_1000_NORMAL_CLOSURE)
            return
        row = feed.handle_insert(event["id"])
        if row is not None:
            await _send(websocket, {
                "type": "notification",
                "notification": row,
                "alert": alert_for(row),
                "unread_count": feed.unread_count,
            })


async def _receive_frame(websocket: WebSocket):
    """Next client frame as a dict, or None if it is not a JSON object."""
    raw = await websocket.receive_text()
    try:
        frame = json.loads(raw)
    except ValueError:
        return None
    return frame if isinstance(frame, dict) else None


async def _handle_client(websocket: WebSocket, feed: NotificationFeed) -> None:
    while True:
        frame = await _receive_frame(websocket)
        if frame is None:
            await _send(websocket, {"type": "error", "message": "Frames must be JSON objects"})
            continue
        action = frame.get("action")
        if action == "mark_read":
            updated = feed.mark_as_read(str(frame.get("id")))
            await _send(websocket, {
                "type": "read", "id": frame.get("id"), "updated": updated, "unread_count": feed.unread_count
            })
        elif action == "mark_all_read":
            updated = feed.mark_all_as_read()
            await _send(websocket, {"type": "read_all", "updated": updated, "unread_count": feed.unread_count})
        elif action == "refresh":
            feed.load()
            await _send(websocket, dict(type="snapshot", **feed.snapshot()))
        else:
            await _send(websocket, {"type": "error", "message": f"Unknown action: {action}"})


@router.websocket("/ws")
async def notifications_ws(websocket: WebSocket, token: str = Query(...)):
    try:
        user = load_current_user(token)
    except AuthError:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    feed = NotificationFeed(user.id)

    # Subscribe before the initial load so no insert falls between the two
    async with get_notification_hub().subscribe(user.id) as subscription:
        feed.load()
        await _send(websocket, dict(type="snapshot", **feed.snapshot()))

        # Whichever side finishes first ends the other; the task group
        # waits for both, including when this handler is cancelled.
        async with anyio.create_task_group() as tg:

            async def run_until_done(loop_fn, *args):
                try:
                    await loop_fn(*args)
                except WebSocketDisconnect:
                    pass
                except Exception as e:
                    logger.error("Realtime connection for user %s failed: %s", user.id, e)
                finally:
                    tg.cancel_scope.cancel()

            tg.start_soon(run_until_done, _push_inserts, websocket, feed, subscription)
            tg.start_soon(run_until_done, _handle_client, websocket, feed)
