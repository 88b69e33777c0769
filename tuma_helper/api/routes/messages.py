# tuma_helper/api/routes/messages.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sse_starlette.sse import EventSourceResponse

from tuma_helper.api.deps import get_messaging
from tuma_helper.core import notices
from tuma_helper.core.config import settings
from tuma_helper.core.security import get_current_user
from tuma_helper.db.models.user import User
from tuma_helper.schemas.common import ActionResult
from tuma_helper.schemas.message import (
    Conversation,
    MarkReadResponse,
    MessageCreate,
    MessageResponse,
    UnreadCountResponse,
)
from tuma_helper.services.messaging import MessagingService, message_events

router = APIRouter(prefix="/messages", tags=["messages"])


@router.get("/conversations", response_model=List[Conversation])
def list_conversations(
    messaging: MessagingService = Depends(get_messaging),
    current_user: User = Depends(get_current_user),
):
    return messaging.list_conversations(current_user)


@router.get("/unread-count", response_model=UnreadCountResponse)
def unread_count(
    messaging: MessagingService = Depends(get_messaging),
    current_user: User = Depends(get_current_user),
):
    return UnreadCountResponse(unread_count=messaging.unread_total(current_user))


@router.get("/stream")
async def stream_messages(
    messaging: MessagingService = Depends(get_messaging),
    current_user: User = Depends(get_current_user),
):
    """
    Server-sent events for new messages addressed to the current user.

    On a `new_message` event the client re-fetches the open conversation when
    the booking id matches it, and always refreshes the conversation list.
    """
    return EventSourceResponse(
        message_events(messaging, current_user, settings.sse_heartbeat_seconds),
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


# Opening a conversation marks its unread messages as read

@router.get("/{booking_id}", response_model=List[MessageResponse])
def list_messages(
    booking_id: int,
    mark_read: bool = Query(True),
    messaging: MessagingService = Depends(get_messaging),
    current_user: User = Depends(get_current_user),
):
    return messaging.list_messages(current_user, booking_id, mark_read=mark_read)


@router.post("/{booking_id}", response_model=ActionResult[MessageResponse], status_code=201)
def send_message(
    booking_id: int,
    payload: MessageCreate,
    messaging: MessagingService = Depends(get_messaging),
    current_user: User = Depends(get_current_user),
):
    message = messaging.send_message(current_user, booking_id, payload)
    return ActionResult[MessageResponse](
        notice=notices.success("Message sent"),
        data=MessageResponse.model_validate(message),
    )


@router.post("/{booking_id}/read", response_model=MarkReadResponse)
def mark_read(
    booking_id: int,
    messaging: MessagingService = Depends(get_messaging),
    current_user: User = Depends(get_current_user),
):
    return MarkReadResponse(booking_id=booking_id, marked_read=messaging.mark_read(current_user, booking_id))
