# tuma_helper/api/routes/admin_dashboard.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sqlalchemy import func
from datetime import datetime, timedelta

from tuma_helper.db.base import get_db
from tuma_helper.db.models.user import User
from tuma_helper.db.models.booking import Booking, BookingStatus
from tuma_helper.db.models.service import Service
from tuma_helper.db.models.review import ProviderReview
from tuma_helper.schemas.admin_dashboard import (
    AdminDashboardResponse,
    KPIItem,
    RecentBookingItem,
    TrendPoint,
)
from tuma_helper.core.security import require_admin

router = APIRouter(prefix="/admin/dashboard", tags=["admin-dashboard"])

COMPLETED = BookingStatus.COMPLETED.value


@router.get("", response_model=AdminDashboardResponse)
def admin_dashboard(
    recent: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    now = datetime.utcnow()
    today = now.date()
    last_7 = now - timedelta(days=7)

    # KPIs
    total_users = db.query(func.count(User.id)).scalar() or 0
    total_providers = db.query(func.count(User.id)).filter(User.role == "provider").scalar() or 0
    total_services = db.query(func.count(Service.id)).scalar() or 0
    total_bookings = db.query(func.count(Booking.id)).scalar() or 0
    bookings_today = db.query(func.count(Booking.id)).filter(Booking.created_at >= datetime.combine(today, datetime.min.time())).scalar() or 0
    bookings_last_7_days = db.query(func.count(Booking.id)).filter(Booking.created_at >= last_7).scalar() or 0

    # revenue counts completed work only; booked value is every booking ever placed
    total_revenue = db.query(func.coalesce(func.sum(Booking.total_amount), 0)).filter(Booking.status == COMPLETED).scalar() or 0.0
    booked_value = db.query(func.coalesce(func.sum(Booking.total_amount), 0)).scalar() or 0.0

    avg_rating, total_reviews = db.query(func.avg(ProviderReview.rating), func.count(ProviderReview.id)).one()

    kpis = KPIItem(
        total_users=int(total_users),
        total_providers=int(total_providers),
        total_services=int(total_services),
        total_bookings=int(total_bookings),
        bookings_today=int(bookings_today),
        bookings_last_7_days=int(bookings_last_7_days),
        total_revenue=float(total_revenue),
        booked_value=float(booked_value),
        average_rating=round(float(avg_rating), 2) if avg_rating is not None else 0.0,
        total_reviews=int(total_reviews or 0),
    )

    # bookings by status, every status present
    bookings_by_status = {status.value: 0 for status in BookingStatus}
    for status, cnt in db.query(Booking.status, func.count(Booking.id)).group_by(Booking.status).all():
        bookings_by_status[status] = int(cnt)

    # recent activity
    recent_rows = (
        db.query(Booking, User.full_name)
        .outerjoin(User, User.id == Booking.customer_id)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .limit(recent)
        .all()
    )
    recent_bookings = [
        RecentBookingItem(
            id=b.id,
            status=b.status,
            created_at=b.created_at,
            total_amount=float(b.total_amount or 0.0),
            customer_name=full_name,
        )
        for b, full_name in recent_rows
    ]

    # bookings & earnings trend last 30 days, bucketed by creation day
    first_day = today - timedelta(days=29)
    buckets = {first_day + timedelta(days=i): [0, 0.0] for i in range(30)}
    for created_at, status, amount in (
        db.query(Booking.created_at, Booking.status, Booking.total_amount)
        .filter(Booking.created_at >= datetime.combine(first_day, datetime.min.time()))
        .all()
    ):
        bucket = buckets.get(created_at.date())
        if bucket is None:
            continue
        bucket[0] += 1
        if status == COMPLETED:
            bucket[1] += float(amount or 0.0)
    trend = [TrendPoint(date=day, bookings=b, earnings=e) for day, (b, e) in sorted(buckets.items())]

    return AdminDashboardResponse(
        kpis=kpis,
        bookings_by_status=bookings_by_status,
        recent_bookings=recent_bookings,
        bookings_trend_last_30_days=trend,
    )
