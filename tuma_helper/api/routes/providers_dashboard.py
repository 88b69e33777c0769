# tuma_helper/api/routes/providers_dashboard.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sqlalchemy import func, desc
from datetime import datetime
from typing import Optional

from tuma_helper.api.deps import get_review_service
from tuma_helper.db.base import get_db
from tuma_helper.db.models.booking import Booking, BookingStatus
from tuma_helper.db.models.service import Service
from tuma_helper.db.models.user import User
from tuma_helper.schemas.provider_dashboard import (
    SummaryResponse,
    EarningsResponse,
    EarningsBreakdownItem,
    BookingsStatsResponse,
    TopServiceItem,
)
from tuma_helper.core.security import require_provider
from tuma_helper.services.reviews import ReviewService

router = APIRouter(prefix="/provider/dashboard", tags=["provider-dashboard"])

COMPLETED = BookingStatus.COMPLETED.value


def _status_counts(db: Session, provider_id: int) -> dict:
    rows = (
        db.query(Booking.status, func.count(Booking.id))
        .filter(Booking.provider_id == provider_id)
        .group_by(Booking.status)
        .all()
    )
    counts = {status.value: 0 for status in BookingStatus}
    for status, cnt in rows:
        counts[status] = int(cnt)
    return counts


def _completed_in_month(provider_id: int, month: int, year: int):
    return (
        Booking.provider_id == provider_id,
        Booking.status == COMPLETED,
        func.extract("month", Booking.booking_date) == month,
        func.extract("year", Booking.booking_date) == year,
    )


# --------------------------
# 1) /provider/dashboard/summary
# --------------------------
@router.get("/summary", response_model=SummaryResponse)
def provider_summary(
    db: Session = Depends(get_db),
    reviews: ReviewService = Depends(get_review_service),
    current_user: User = Depends(require_provider),
):
    provider_id = current_user.id
    counts = _status_counts(db, provider_id)

    # Earnings - sum only completed bookings
    total_earnings = db.query(func.coalesce(func.sum(Booking.total_amount), 0)).filter(
        Booking.provider_id == provider_id, Booking.status == COMPLETED
    ).scalar() or 0.0

    now = datetime.utcnow()
    current_month_earnings = db.query(func.coalesce(func.sum(Booking.total_amount), 0)).filter(
        *_completed_in_month(provider_id, now.month, now.year)
    ).scalar() or 0.0

    # Rating recomputed from the provider's reviews
    rating = reviews.provider_summary(provider_id)

    # Top service by number of bookings
    top_q = (
        db.query(Service.id, Service.title, func.count(Booking.id).label("cnt"))
        .join(Booking, Booking.service_id == Service.id)
        .filter(Booking.provider_id == provider_id)
        .group_by(Service.id, Service.title)
        .order_by(desc("cnt"), Service.id)
        .first()
    )
    top_service = None
    if top_q:
        top_service = TopServiceItem(service_id=top_q[0], service_title=top_q[1], count=int(top_q[2]))

    return SummaryResponse(
        total_bookings=sum(counts.values()),
        pending=counts[BookingStatus.PENDING.value],
        confirmed=counts[BookingStatus.CONFIRMED.value],
        in_progress=counts[BookingStatus.IN_PROGRESS.value],
        completed=counts[COMPLETED],
        cancelled=counts[BookingStatus.CANCELLED.value],
        total_earnings=float(total_earnings),
        current_month_earnings=float(current_month_earnings),
        average_rating=rating.average_rating,
        total_reviews=rating.total_reviews,
        top_service=top_service,
    )


# --------------------------
# 2) /provider/dashboard/earnings?month=&year=
# --------------------------
@router.get("/earnings", response_model=EarningsResponse)
def provider_earnings(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_provider),
):
    provider_id = current_user.id
    now = datetime.utcnow()
    if month is None:
        month = now.month
    if year is None:
        year = now.year

    # Breakdown by service
    rows = (
        db.query(
            Service.title,
            func.count(Booking.id).label("cnt"),
            func.coalesce(func.sum(Booking.total_amount), 0).label("value"),
        )
        .join(Booking, Booking.service_id == Service.id)
        .filter(*_completed_in_month(provider_id, month, year))
        .group_by(Service.title)
        .order_by(desc("value"))
        .all()
    )

    breakdown = [EarningsBreakdownItem(service_title=r[0], count=int(r[1]), value=float(r[2] or 0.0)) for r in rows]

    return EarningsResponse(
        provider_id=provider_id,
        month=month,
        year=year,
        total_earnings=sum(item.value for item in breakdown),
        completed_bookings=sum(item.count for item in breakdown),
        breakdown=breakdown,
    )


# --------------------------
# 3) /provider/dashboard/bookings/stats
# --------------------------
@router.get("/bookings/stats", response_model=BookingsStatsResponse)
def provider_bookings_stats(db: Session = Depends(get_db), current_user: User = Depends(require_provider)):
    counts = _status_counts(db, current_user.id)
    total = sum(counts.values())
    completed = counts[COMPLETED]

    completion_rate = f"{(completed / total * 100):.1f}%" if total > 0 else "0.0%"

    return BookingsStatsResponse(
        total=total,
        pending=counts[BookingStatus.PENDING.value],
        confirmed=counts[BookingStatus.CONFIRMED.value],
        in_progress=counts[BookingStatus.IN_PROGRESS.value],
        completed=completed,
        cancelled=counts[BookingStatus.CANCELLED.value],
        completion_rate=completion_rate,
    )
