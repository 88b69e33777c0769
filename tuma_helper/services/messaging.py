"""Per-booking conversations between a customer and a provider."""

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import AsyncGenerator, Dict, List

from sqlalchemy import false, func, or_
from sqlalchemy.orm import aliased

from tuma_helper.core.exceptions import Forbidden, NotFound, ValidationFailed
from tuma_helper.db.changefeed import INSERT, Subscription
from tuma_helper.db.gateway import Gateway
from tuma_helper.db.models.booking import Booking
from tuma_helper.db.models.message import Message
from tuma_helper.db.models.service import Service
from tuma_helper.db.models.user import User
from tuma_helper.schemas.message import (
    Conversation,
    ConversationBooking,
    MessageCreate,
    MessageResponse,
    OtherParty,
)

logger = logging.getLogger(__name__)


class MessagingService:
    def __init__(self, gateway: Gateway):
        self.gateway = gateway

    def _booking_for(self, user: User, booking_id: int) -> Booking:
        booking = self.gateway.get(Booking, booking_id)
        if not booking:
            raise NotFound("Booking not found")
        if booking.party_of(user.id) is None:
            raise Forbidden("You are not part of this conversation")
        return booking

    def list_conversations(self, user: User) -> List[Conversation]:
        """
        One conversation per booking the user takes part in, newest booking first.

        Last message and unread count come back from the same statement: a
        row_number() window picks the latest message per booking and a grouped
        count gives unread messages addressed to the user.
        """
        db = self.gateway.db

        ranked = (
            db.query(
                Message.id.label("message_id"),
                Message.booking_id.label("booking_id"),
                func.row_number()
                .over(partition_by=Message.booking_id, order_by=(Message.created_at.desc(), Message.id.desc()))
                .label("rn"),
            )
            .subquery()
        )
        latest = db.query(ranked.c.booking_id, ranked.c.message_id).filter(ranked.c.rn == 1).subquery()
        unread = (
            db.query(Message.booking_id.label("booking_id"), func.count(Message.id).label("unread"))
            .filter(Message.receiver_id == user.id, Message.is_read == false())
            .group_by(Message.booking_id)
            .subquery()
        )

        Customer = aliased(User)
        Provider = aliased(User)
        LastMessage = aliased(Message)

        def fetch():
            return (
                db.query(Booking, Service.title, Customer, Provider, LastMessage, func.coalesce(unread.c.unread, 0))
                .join(Customer, Customer.id == Booking.customer_id)
                .join(Provider, Provider.id == Booking.provider_id)
                .outerjoin(Service, Service.id == Booking.service_id)
                .outerjoin(latest, latest.c.booking_id == Booking.id)
                .outerjoin(LastMessage, LastMessage.id == latest.c.message_id)
                .outerjoin(unread, unread.c.booking_id == Booking.id)
                .filter(or_(Booking.customer_id == user.id, Booking.provider_id == user.id))
                .order_by(Booking.created_at.desc(), Booking.id.desc())
                .all()
            )

        conversations = []
        for booking, service_title, customer, provider, last_message, unread_count in self.gateway.run(fetch):
            is_customer = booking.customer_id == user.id
            other = provider if is_customer else customer
            conversations.append(
                Conversation(
                    booking_id=booking.id,
                    other_party=OtherParty(
                        id=other.id,
                        full_name=other.full_name,
                        display_name=other.display_name,
                        avatar_url=other.avatar_url,
                        role="provider" if is_customer else "customer",
                    ),
                    last_message=MessageResponse.model_validate(last_message) if last_message else None,
                    unread_count=int(unread_count or 0),
                    booking=ConversationBooking(
                        id=booking.id,
                        service_id=booking.service_id,
                        service_title=service_title,
                        booking_date=booking.booking_date,
                        status=booking.status,
                    ),
                )
            )
        return conversations

    def list_messages(self, user: User, booking_id: int, mark_read: bool = True) -> List[Message]:
        self._booking_for(user, booking_id)
        if mark_read:
            self.mark_read(user, booking_id)
        return self.gateway.select(Message, {"booking_id": booking_id}, order_by="created_at")

    def send_message(self, user: User, booking_id: int, payload: MessageCreate) -> Message:
        text = payload.message_text or ""
        if not text.strip() and not payload.attachment_url:
            raise ValidationFailed("Message cannot be empty")

        booking = self._booking_for(user, booking_id)
        message = self.gateway.insert(
            Message,
            {
                "booking_id": booking.id,
                "sender_id": user.id,
                "receiver_id": booking.other_party_id(user.id),
                "message_text": text,
                "message_type": "text" if text.strip() else "attachment",
                "attachment_url": payload.attachment_url,
                "is_read": False,
            },
        )
        logger.info("Message %s sent on booking %s by user %s", message.id, booking.id, user.id)
        return message

    def mark_read(self, user: User, booking_id: int) -> int:
        self._booking_for(user, booking_id)
        return self.gateway.update(
            Message,
            {"booking_id": booking_id, "receiver_id": user.id, "is_read": False},
            {"is_read": True},
        )

    def unread_total(self, user: User) -> int:
        return self.gateway.count(Message, {"receiver_id": user.id, "is_read": False})

    def subscribe(self, user: User) -> Subscription:
        """New message rows addressed to `user`. Call from inside the event loop."""
        return self.gateway.subscribe(Message.__tablename__, INSERT, {"receiver_id": user.id})


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


async def message_events(
    messaging: MessagingService, user: User, heartbeat_seconds: float
) -> AsyncGenerator[Dict[str, str], None]:
    """
    SSE event dicts for new messages addressed to `user`.

    The subscription is opened on first iteration, so a stream that is never
    started leaves nothing behind in the change feed.

    Each `new_message` event carries the booking id so the client can re-fetch
    the open conversation and refresh its conversation list.
    """
    subscription = messaging.subscribe(user)
    try:
        yield {"event": "connected", "data": json.dumps({"status": "connected", "timestamp": _now()})}
        while True:
            try:
                change = await subscription.get(timeout=heartbeat_seconds)
            except asyncio.TimeoutError:
                yield {"event": "heartbeat", "data": json.dumps({"type": "heartbeat", "timestamp": _now()})}
                continue
            record = change.record
            yield {
                "event": "new_message",
                "id": str(record.get("id")),
                "data": json.dumps({"type": "new_message", "booking_id": record.get("booking_id"), "message": record}),
            }
    finally:
        subscription.close()

