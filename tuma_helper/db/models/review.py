# tuma_helper/db/models/review.py
from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from tuma_helper.db.base import Base


class ProviderReview(Base):
    __tablename__ = "provider_reviews"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, unique=True)
    customer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    provider_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("services.id", ondelete="SET NULL"), nullable=True)

    rating = Column(Integer, nullable=False)   # 1..5
    review_text = Column(Text, nullable=True)
    review_photos = Column(JSON, nullable=True)
    # {"quality": int, "communication": int, "timeliness": int, "professionalism": int}
    dimensions = Column(JSON, nullable=True)

    response_text = Column(Text, nullable=True)
    response_date = Column(DateTime, nullable=True)
    helpful_count = Column(Integer, nullable=False, default=0)
    is_verified = Column(Boolean, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # relationships (helpful for response shaping)
    customer = relationship("User", foreign_keys=[customer_id])
    provider = relationship("User", foreign_keys=[provider_id])

    @property
    def customer_name(self) -> str | None:
        return self.customer.public_name if self.customer else None
