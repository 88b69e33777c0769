# tuma_helper/db/models/provider_profile.py
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Integer, Text

from tuma_helper.db.base import Base


class ProviderProfile(Base):
    """Professional details shown on a provider's public page. One row per provider."""

    __tablename__ = "provider_profiles"

    id = Column(Integer, primary_key=True, index=True)
    provider_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    bio = Column(Text, nullable=True)
    hourly_rate = Column(Float, nullable=False, default=0)
    service_areas = Column(JSON, nullable=False, default=list)
    portfolio_urls = Column(JSON, nullable=False, default=list)
    years_of_experience = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
