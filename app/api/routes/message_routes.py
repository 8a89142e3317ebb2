"""
Message Routes

POST /messages - Send a message (messaging rules enforced here)
GET /messages - Inbox or sent box
GET /messages/recipients - Profiles the caller may message
GET /messages/can-message/{recipient_id} - Convenience permission check
GET /messages/conversation/{profile_id} - Both directions with one profile
POST /messages/{message_id}/read - Mark a received message as read
"""

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query

from app.core.auth import CurrentUser, get_current_user
from app.services import message_service
from app.services.permissions import allowed_recipients, check_can_message
from app.schemas.schemas import (
    MessageCreate, MessageOut, ProfileSummary, CanMessageResponse, MarkReadResponse
)

router = APIRouter(prefix="/messages", tags=["Messages"])


@router.post("", response_model=MessageOut, status_code=201)
async def send_message(data: MessageCreate, user: CurrentUser = Depends(get_current_user)):
    """
    Send a message.

    Admins can message anyone and anyone can message an admin. Companies
    and students can message each other once the student has applied to
    one of the company's internships.
    """
    return message_service.send_message(
        user,
        recipient_id=data.recipient_id,
        message_text=data.message_text,
        subject=data.subject,
        related_to=data.related_to.value,
        related_id=data.related_id
    )


@router.get("", response_model=List[MessageOut])
async def list_messages(
    box: Literal["inbox", "sent"] = Query("inbox"),
    unread_only: bool = Query(False),
    user: CurrentUser = Depends(get_current_user)
):
    return message_service.list_messages(user, box=box, unread_only=unread_only)


@router.get("/recipients", response_model=List[ProfileSummary])
async def list_recipients(user: CurrentUser = Depends(get_current_user)):
    return allowed_recipients(user.profile)


@router.get("/can-message/{recipient_id}", response_model=CanMessageResponse)
async def can_message(
    recipient_id: str,
    internship_id: Optional[str] = Query(None, description="Only count applications to this internship"),
    user: CurrentUser = Depends(get_current_user)
):
    recipient = message_service.load_profile(recipient_id)
    allowed, reason = check_can_message(user.profile, recipient, internship_id)
    return CanMessageResponse(allowed=allowed, reason=reason)


@router.get("/conversation/{profile_id}", response_model=List[MessageOut])
async def get_conversation(profile_id: str, user: CurrentUser = Depends(get_current_user)):
    return message_service.conversation(user, profile_id)


@router.post("/{message_id}/read", response_model=MarkReadResponse)
async def mark_message_read(message_id: str, user: CurrentUser = Depends(get_current_user)):
    return MarkReadResponse(updated=message_service.mark_message_as_read(message_id, user.id))
