# tuma_helper/db/models/booking.py
import enum
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String, Time
from sqlalchemy.orm import relationship

from tuma_helper.db.base import Base


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = (BookingStatus.COMPLETED.value, BookingStatus.CANCELLED.value)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)

    customer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    provider_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)

    booking_date = Column(Date, nullable=False)
    booking_time = Column(Time, nullable=False)
    duration_hours = Column(Integer, nullable=False, default=1)

    total_amount = Column(Float, nullable=False)
    status = Column(String, nullable=False, default=BookingStatus.PENDING.value)

    customer_name = Column(String, nullable=False)
    customer_phone = Column(String, nullable=True)
    customer_address = Column(String, nullable=False)
    customer_notes = Column(String, nullable=True)
    provider_notes = Column(String, nullable=True)

    payment_intent_id = Column(String, nullable=True, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # relationships
    customer = relationship("User", foreign_keys=[customer_id])
    provider = relationship("User", foreign_keys=[provider_id])
    service = relationship("Service", foreign_keys=[service_id])

    def party_of(self, user_id: int) -> str | None:
        if user_id == self.customer_id:
            return "customer"
        if user_id == self.provider_id:
            return "provider"
        return None

    def other_party_id(self, user_id: int) -> int:
        return self.provider_id if user_id == self.customer_id else self.customer_id
