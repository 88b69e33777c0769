# tuma_helper/schemas/message.py
from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class MessageCreate(BaseModel):
    message_text: str = Field(default="", max_length=5000)
    attachment_url: Optional[str] = None


class MessageResponse(BaseModel):
    id: int
    booking_id: int
    sender_id: int
    receiver_id: int
    message_text: str
    message_type: str
    attachment_url: Optional[str]
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True


class OtherParty(BaseModel):
    id: int
    full_name: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: Literal["customer", "provider"]


class ConversationBooking(BaseModel):
    id: int
    service_id: int
    service_title: Optional[str] = None
    booking_date: date
    status: str


class Conversation(BaseModel):
    booking_id: int
    other_party: OtherParty
    last_message: Optional[MessageResponse] = None
    unread_count: int = 0
    booking: ConversationBooking


class MarkReadResponse(BaseModel):
    booking_id: int
    marked_read: int


class UnreadCountResponse(BaseModel):
    unread_count: int
