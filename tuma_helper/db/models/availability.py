# tuma_helper/db/models/availability.py
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, String, Time, UniqueConstraint

from tuma_helper.db.base import Base


class ProviderAvailability(Base):
    """
    Recurring weekly working hours for a provider, one window per weekday.
    weekday: 1 (Monday) .. 7 (Sunday)
    """
    __tablename__ = "provider_availabilities"
    __table_args__ = (
        CheckConstraint("weekday BETWEEN 1 AND 7", name="ck_provider_availabilities_weekday"),
        UniqueConstraint("provider_id", "weekday", name="uq_provider_availabilities_day"),
    )

    id = Column(Integer, primary_key=True, index=True)
    provider_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    weekday = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_active = Column(Boolean, default=True)


class ProviderTimeOff(Base):
    """
    One-off blocked window (holiday, sick day).
    Without start_time/end_time every day in the date range is blocked whole.
    """
    __tablename__ = "provider_timeoffs"

    id = Column(Integer, primary_key=True, index=True)
    provider_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    reason = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
