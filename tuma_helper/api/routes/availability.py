# tuma_helper/api/routes/availability.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from datetime import datetime, date, time, timedelta
from typing import List

from tuma_helper.core import notices
from tuma_helper.core.exceptions import NotFound, ValidationFailed
from tuma_helper.core.security import require_provider
from tuma_helper.db.base import get_db
from tuma_helper.db.models.user import User
from tuma_helper.db.models.availability import ProviderAvailability, ProviderTimeOff
from tuma_helper.db.models.booking import Booking, BookingStatus
from tuma_helper.schemas.availability import (
    ProviderAvailabilityCreate,
    ProviderAvailabilityResponse,
    ProviderTimeOffCreate,
    ProviderTimeOffResponse,
)
from tuma_helper.schemas.common import ActionResult

router = APIRouter(prefix="/availability", tags=["availability"])

CANCELLED = BookingStatus.CANCELLED.value


# Weekly hours: one window per weekday, saving a day again replaces it
@router.put("/provider/weekly", response_model=ActionResult[ProviderAvailabilityResponse])
def set_weekly_availability(
    payload: ProviderAvailabilityCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_provider),
):
    if payload.start_time >= payload.end_time:
        raise ValidationFailed("start_time must be before end_time")

    avail = db.query(ProviderAvailability).filter(
        ProviderAvailability.provider_id == current_user.id,
        ProviderAvailability.weekday == payload.weekday,
    ).first()
    if not avail:
        avail = ProviderAvailability(provider_id=current_user.id, weekday=payload.weekday)
        db.add(avail)
    avail.start_time = payload.start_time
    avail.end_time = payload.end_time
    avail.is_active = payload.is_active if payload.is_active is not None else True

    db.commit()
    db.refresh(avail)
    return ActionResult[ProviderAvailabilityResponse](
        notice=notices.success("Availability updated"),
        data=ProviderAvailabilityResponse.model_validate(avail),
    )


@router.get("/provider/weekly", response_model=List[ProviderAvailabilityResponse])
def list_weekly_availability(db: Session = Depends(get_db), current_user: User = Depends(require_provider)):
    return (
        db.query(ProviderAvailability)
        .filter(ProviderAvailability.provider_id == current_user.id)
        .order_by(ProviderAvailability.weekday)
        .all()
    )


@router.get("/provider/{provider_id}/weekly", response_model=List[ProviderAvailabilityResponse])
def public_weekly_availability(provider_id: int, db: Session = Depends(get_db)):
    return (
        db.query(ProviderAvailability)
        .filter(ProviderAvailability.provider_id == provider_id, ProviderAvailability.is_active == True)  # noqa: E712
        .order_by(ProviderAvailability.weekday)
        .all()
    )


@router.post("/provider/timeoff", response_model=ProviderTimeOffResponse, status_code=201)
def add_timeoff(
    payload: ProviderTimeOffCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_provider),
):
    if payload.start_date > payload.end_date:
        raise ValidationFailed("start_date must be <= end_date")
    if (payload.start_time is None) != (payload.end_time is None):
        raise ValidationFailed("Give both start_time and end_time, or neither for whole days")
    if payload.start_time is not None and payload.start_time >= payload.end_time:
        raise ValidationFailed("start_time must be before end_time")

    timeoff = ProviderTimeOff(provider_id=current_user.id, **payload.model_dump())
    db.add(timeoff)
    db.commit()
    db.refresh(timeoff)
    return timeoff


@router.get("/provider/timeoff", response_model=List[ProviderTimeOffResponse])
def list_timeoffs(db: Session = Depends(get_db), current_user: User = Depends(require_provider)):
    return (
        db.query(ProviderTimeOff)
        .filter(ProviderTimeOff.provider_id == current_user.id)
        .order_by(ProviderTimeOff.start_date)
        .all()
    )


@router.delete("/provider/timeoff/{timeoff_id}", response_model=ActionResult[ProviderTimeOffResponse])
def delete_timeoff(timeoff_id: int, db: Session = Depends(get_db), current_user: User = Depends(require_provider)):
    timeoff = db.query(ProviderTimeOff).filter(
        ProviderTimeOff.id == timeoff_id, ProviderTimeOff.provider_id == current_user.id
    ).first()
    if not timeoff:
        raise NotFound("Time off not found")
    removed = ProviderTimeOffResponse.model_validate(timeoff)
    db.delete(timeoff)
    db.commit()
    return ActionResult[ProviderTimeOffResponse](notice=notices.success("Time off removed"), data=removed)


# Slot generation + conflict detection


def overlaps(start1, end1, start2, end2):
    return max(start1, start2) < min(end1, end2)


def get_provider_bookings_on_date(db: Session, provider_id: int, dt: date):
    # (start, end) of every booking that still occupies the provider
    rows = db.query(Booking).filter(
        Booking.provider_id == provider_id,
        Booking.booking_date == dt,
        Booking.status != CANCELLED,
    ).all()
    result = []
    for r in rows:
        start_dt = datetime.combine(r.booking_date, r.booking_time)
        result.append((start_dt, start_dt + timedelta(hours=r.duration_hours or 1)))
    return result


def timeoff_blocks_on_date(db: Session, provider_id: int, dt: date):
    rows = db.query(ProviderTimeOff).filter(
        ProviderTimeOff.provider_id == provider_id,
        ProviderTimeOff.start_date <= dt,
        ProviderTimeOff.end_date >= dt,
    ).all()
    blocks = []
    for t in rows:
        if t.start_time and t.end_time:
            blocks.append((datetime.combine(dt, t.start_time), datetime.combine(dt, t.end_time)))
        else:
            blocks.append((datetime.combine(dt, time.min), datetime.combine(dt, time.max)))
    return blocks


@router.get("/provider/{provider_id}/slots", response_model=List[str])
def get_available_slots_for_date(
    provider_id: int,
    date_str: str = Query(..., description="date in YYYY-MM-DD"),
    duration_hours: int = Query(1, ge=1, le=24),
    interval_minutes: int = Query(30, ge=5, le=240, description="slot step in minutes"),
    db: Session = Depends(get_db),
):
    """
    Start times (ISO strings) on the given date where a booking of
    `duration_hours` fits inside the provider's weekly window without touching
    another booking or a time-off block.
    """
    try:
        target_date = datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationFailed("Invalid date format, use YYYY-MM-DD")

    duration = timedelta(hours=duration_hours)
    step = timedelta(minutes=interval_minutes)

    windows = db.query(ProviderAvailability).filter(
        ProviderAvailability.provider_id == provider_id,
        ProviderAvailability.weekday == target_date.isoweekday(),
        ProviderAvailability.is_active == True,  # noqa: E712
    ).all()

    busy = get_provider_bookings_on_date(db, provider_id, target_date) + timeoff_blocks_on_date(db, provider_id, target_date)

    slots = []
    for w in windows:
        window_end = datetime.combine(target_date, w.end_time)
        slot_start = datetime.combine(target_date, w.start_time)
        while slot_start + duration <= window_end:
            slot_end = slot_start + duration
            if not any(overlaps(b_start, b_end, slot_start, slot_end) for b_start, b_end in busy):
                slots.append(slot_start.isoformat())
            slot_start += step

    return slots
