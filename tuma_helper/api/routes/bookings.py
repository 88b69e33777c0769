# tuma_helper/api/routes/bookings.py
from typing import List, Literal, Optional

from fastapi import APIRouter, Body, Depends, Query

from tuma_helper.api.deps import get_booking_manager
from tuma_helper.core import notices
from tuma_helper.core.security import get_current_user, require_admin, require_customer, require_provider
from tuma_helper.db.models.user import User
from tuma_helper.schemas.booking import (
    BookingCreate,
    BookingResponse,
    CustomerNotesUpdate,
    ProviderNotes,
    TransitionsResponse,
)
from tuma_helper.schemas.common import ActionResult
from tuma_helper.services.booking_manager import ACTIONS, BookingManager, allowed_transitions

router = APIRouter(prefix="/bookings", tags=["bookings"])

StatusFilter = Optional[Literal["pending", "confirmed", "in_progress", "completed", "cancelled"]]


def _updated(booking, action: str) -> ActionResult[BookingResponse]:
    return ActionResult[BookingResponse](
        notice=notices.success("Booking updated", f"Booking {ACTIONS[action].past_tense}."),
        data=BookingResponse.model_validate(booking),
    )


# Customer creates booking

@router.post("/customer", response_model=ActionResult[BookingResponse], status_code=201)
def create_booking(
    booking: BookingCreate,
    manager: BookingManager = Depends(get_booking_manager),
    current_user: User = Depends(require_customer),
):
    created = manager.create_booking(current_user, booking)
    return ActionResult[BookingResponse](
        notice=notices.success("Booking requested", "Your booking is pending provider confirmation."),
        data=BookingResponse.model_validate(created),
    )


# Customer views their bookings

@router.get("/customer/me", response_model=List[BookingResponse])
def customer_my_bookings(
    status: StatusFilter = Query(None),
    manager: BookingManager = Depends(get_booking_manager),
    current_user: User = Depends(require_customer),
):
    return manager.list_for_customer(current_user, status)


# Provider views their bookings

@router.get("/provider/me", response_model=List[BookingResponse])
def provider_my_bookings(
    status: StatusFilter = Query(None),
    manager: BookingManager = Depends(get_booking_manager),
    current_user: User = Depends(require_provider),
):
    return manager.list_for_provider(current_user, status)


# Admin views all bookings

@router.get("/admin/all", response_model=List[BookingResponse])
def admin_all_bookings(
    status: StatusFilter = Query(None),
    manager: BookingManager = Depends(get_booking_manager),
    current_user: User = Depends(require_admin),
):
    return manager.list_all(status)


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: int,
    manager: BookingManager = Depends(get_booking_manager),
    current_user: User = Depends(get_current_user),
):
    return manager.get_for_participant(current_user, booking_id)


@router.get("/{booking_id}/transitions", response_model=TransitionsResponse)
def booking_transitions(
    booking_id: int,
    manager: BookingManager = Depends(get_booking_manager),
    current_user: User = Depends(get_current_user),
):
    booking = manager.get_for_participant(current_user, booking_id)
    return TransitionsResponse(
        booking_id=booking.id,
        status=booking.status,
        allowed=sorted(allowed_transitions(booking.status)),
    )


# Provider actions

@router.post("/{booking_id}/accept", response_model=ActionResult[BookingResponse])
def accept_booking(
    booking_id: int,
    manager: BookingManager = Depends(get_booking_manager),
    current_user: User = Depends(require_provider),
):
    return _updated(manager.accept(current_user, booking_id), "accept")


@router.post("/{booking_id}/decline", response_model=ActionResult[BookingResponse])
def decline_booking(
    booking_id: int,
    payload: Optional[ProviderNotes] = Body(default=None),
    manager: BookingManager = Depends(get_booking_manager),
    current_user: User = Depends(require_provider),
):
    notes = payload.provider_notes if payload else None
    return _updated(manager.decline(current_user, booking_id, notes), "decline")


@router.post("/{booking_id}/start", response_model=ActionResult[BookingResponse])
def start_booking(
    booking_id: int,
    manager: BookingManager = Depends(get_booking_manager),
    current_user: User = Depends(require_provider),
):
    return _updated(manager.start(current_user, booking_id), "start")


@router.post("/{booking_id}/complete", response_model=ActionResult[BookingResponse])
def complete_booking(
    booking_id: int,
    payload: Optional[ProviderNotes] = Body(default=None),
    manager: BookingManager = Depends(get_booking_manager),
    current_user: User = Depends(require_provider),
):
    notes = payload.provider_notes if payload else None
    return _updated(manager.complete(current_user, booking_id, notes), "complete")


# Customer cancels booking

@router.post("/{booking_id}/cancel", response_model=ActionResult[BookingResponse])
def cancel_booking(
    booking_id: int,
    manager: BookingManager = Depends(get_booking_manager),
    current_user: User = Depends(require_customer),
):
    return _updated(manager.cancel(current_user, booking_id), "cancel")


@router.put("/{booking_id}/customer-notes", response_model=ActionResult[BookingResponse])
def update_customer_notes(
    booking_id: int,
    payload: CustomerNotesUpdate,
    manager: BookingManager = Depends(get_booking_manager),
    current_user: User = Depends(require_customer),
):
    booking = manager.update_customer_notes(current_user, booking_id, payload.customer_notes)
    return ActionResult[BookingResponse](
        notice=notices.success("Booking updated", "Your notes were saved."),
        data=BookingResponse.model_validate(booking),
    )
