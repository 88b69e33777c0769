from datetime import date, datetime, time
from typing import Optional

from pydantic import BaseModel, Field


# --- CREATE ---
class BookingCreate(BaseModel):
    service_id: int
    booking_date: date
    booking_time: time
    duration_hours: int = Field(default=1, ge=1)
    customer_name: str
    customer_phone: Optional[str] = None
    customer_address: str
    customer_notes: Optional[str] = None


# --- PROVIDER ACTIONS ---
class ProviderNotes(BaseModel):
    provider_notes: Optional[str] = None


class CustomerNotesUpdate(BaseModel):
    customer_notes: str


# --- RESPONSE ---
class BookingResponse(BaseModel):
    id: int
    customer_id: int
    provider_id: int
    service_id: int
    booking_date: date
    booking_time: time
    duration_hours: int
    total_amount: float
    status: str
    customer_name: str
    customer_phone: Optional[str]
    customer_address: str
    customer_notes: Optional[str]
    provider_notes: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class TransitionsResponse(BaseModel):
    booking_id: int
    status: str
    allowed: list[str]
