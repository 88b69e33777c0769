# tuma_helper/api/routes/customer_dashboard.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sqlalchemy import func
from datetime import date, datetime
from typing import List

from tuma_helper.db.base import get_db
from tuma_helper.db.models.booking import Booking, BookingStatus, TERMINAL_STATUSES
from tuma_helper.db.models.favorite import CustomerFavorite
from tuma_helper.db.models.review import ProviderReview
from tuma_helper.db.models.service import Service
from tuma_helper.db.models.user import User
from tuma_helper.schemas.customer_dashboard import (
    CustomerDashboardResponse,
    CustomerOverview,
    BookingMini,
    SpendingPoint,
)
from tuma_helper.core.security import require_customer

router = APIRouter(prefix="/customer/dashboard", tags=["customer-dashboard"])

COMPLETED = BookingStatus.COMPLETED.value
TERMINAL = list(TERMINAL_STATUSES)


def _mini(b: Booking, svc: Service, prov: User) -> BookingMini:
    return BookingMini(
        id=b.id,
        service_id=svc.id,
        service_title=svc.title,
        provider_id=prov.id,
        provider_name=prov.public_name,
        booking_date=b.booking_date,
        booking_time=b.booking_time.strftime("%H:%M") if b.booking_time else None,
        total_amount=float(b.total_amount or 0.0),
        status=b.status,
    )


def _month_starts(today: date, months: int) -> List[date]:
    """First day of each of the last `months` months, oldest first."""
    year, month = today.year, today.month
    starts = []
    for _ in range(months):
        starts.append(date(year, month, 1))
        month -= 1
        if month == 0:
            month, year = 12, year - 1
    return list(reversed(starts))


@router.get("", response_model=CustomerDashboardResponse)
def customer_dashboard(
    months_spending: int = Query(6, ge=1, le=24),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_customer),
):
    customer_id = current_user.id
    today = datetime.utcnow().date()

    # --- Overview ---
    counts = {status.value: 0 for status in BookingStatus}
    for status, cnt in (
        db.query(Booking.status, func.count(Booking.id))
        .filter(Booking.customer_id == customer_id)
        .group_by(Booking.status)
        .all()
    ):
        counts[status] = int(cnt)

    total_spent = db.query(func.coalesce(func.sum(Booking.total_amount), 0)).filter(
        Booking.customer_id == customer_id, Booking.status == COMPLETED
    ).scalar() or 0.0

    favorites = db.query(func.count(CustomerFavorite.id)).filter(CustomerFavorite.customer_id == customer_id).scalar() or 0

    avg_rating_given = db.query(func.avg(ProviderReview.rating)).filter(ProviderReview.customer_id == customer_id).scalar()

    overview = CustomerOverview(
        total_bookings=sum(counts.values()),
        pending=counts[BookingStatus.PENDING.value],
        confirmed=counts[BookingStatus.CONFIRMED.value],
        in_progress=counts[BookingStatus.IN_PROGRESS.value],
        completed=counts[COMPLETED],
        cancelled=counts[BookingStatus.CANCELLED.value],
        total_spent=float(total_spent),
        favorites=int(favorites),
        avg_rating_given=float(avg_rating_given) if avg_rating_given is not None else None,
    )

    # --- Upcoming bookings (still open, today or later) ---
    upcoming_rows = (
        db.query(Booking, Service, User)
        .join(Service, Booking.service_id == Service.id)
        .join(User, Booking.provider_id == User.id)
        .filter(Booking.customer_id == customer_id)
        .filter(Booking.status.notin_(TERMINAL))
        .filter(Booking.booking_date >= today)
        .order_by(Booking.booking_date.asc(), Booking.booking_time.asc())
        .limit(10)
        .all()
    )

    # --- Past bookings (limit 20) ---
    past_rows = (
        db.query(Booking, Service, User)
        .join(Service, Booking.service_id == Service.id)
        .join(User, Booking.provider_id == User.id)
        .filter(Booking.customer_id == customer_id)
        .filter(Booking.status.in_(TERMINAL))
        .order_by(Booking.booking_date.desc(), Booking.created_at.desc())
        .limit(20)
        .all()
    )

    # --- Spending summary (month wise last N months) ---
    spend_points = []
    for month_start in _month_starts(today, months_spending):
        total_spent_m = (
            db.query(func.coalesce(func.sum(Booking.total_amount), 0))
            .filter(
                Booking.customer_id == customer_id,
                Booking.status == COMPLETED,
                func.extract("month", Booking.booking_date) == month_start.month,
                func.extract("year", Booking.booking_date) == month_start.year,
            )
            .scalar()
            or 0.0
        )
        spend_points.append(SpendingPoint(month=month_start.strftime("%b"), year=month_start.year, total_spent=float(total_spent_m)))

    return CustomerDashboardResponse(
        overview=overview,
        upcoming=[_mini(*row) for row in upcoming_rows],
        past=[_mini(*row) for row in past_rows],
        spending_summary=spend_points,
    )
