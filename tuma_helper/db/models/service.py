# tuma_helper/db/models/service.py
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from tuma_helper.db.base import Base


class Service(Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)

    # Foreign keys
    provider_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("service_categories.id", ondelete="SET NULL"), nullable=True)

    # Basic details
    title = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")
    location = Column(String, nullable=False, default="")
    city = Column(String, nullable=True, index=True)

    # Pricing
    price_from = Column(Float, nullable=False)
    price_to = Column(Float, nullable=True)
    price_unit = Column(String, nullable=True, default="hour")

    is_available = Column(Boolean, default=True)

    # Denormalised from provider_reviews of bookings for this service
    rating = Column(Float, nullable=True, default=0)
    total_reviews = Column(Integer, nullable=True, default=0)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    provider = relationship("User", back_populates="services")
    category = relationship("Category", back_populates="services")
