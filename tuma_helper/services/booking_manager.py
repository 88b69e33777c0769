"""Booking lifecycle: creation, actor-scoped status transitions and notes."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, FrozenSet, List, Optional

from tuma_helper.core.config import settings
from tuma_helper.core.exceptions import Forbidden, InvalidTransition, NotFound, ValidationFailed
from tuma_helper.db.gateway import Gateway
from tuma_helper.db.models.booking import TERMINAL_STATUSES, Booking, BookingStatus
from tuma_helper.db.models.service import Service
from tuma_helper.db.models.user import User
from tuma_helper.schemas.booking import BookingCreate

logger = logging.getLogger(__name__)

PENDING = BookingStatus.PENDING.value
CONFIRMED = BookingStatus.CONFIRMED.value
IN_PROGRESS = BookingStatus.IN_PROGRESS.value
COMPLETED = BookingStatus.COMPLETED.value
CANCELLED = BookingStatus.CANCELLED.value

ALLOWED_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    PENDING: frozenset({CONFIRMED, CANCELLED}),
    CONFIRMED: frozenset({IN_PROGRESS, CANCELLED}),
    IN_PROGRESS: frozenset({COMPLETED}),
    COMPLETED: frozenset(),
    CANCELLED: frozenset(),
}


@dataclass(frozen=True)
class Action:
    actor: str
    sources: FrozenSet[str]
    target: str
    past_tense: str


ACTIONS: Dict[str, Action] = {
    "accept": Action("provider", frozenset({PENDING}), CONFIRMED, "accepted"),
    "decline": Action("provider", frozenset({PENDING}), CANCELLED, "declined"),
    "start": Action("provider", frozenset({CONFIRMED}), IN_PROGRESS, "started"),
    "complete": Action("provider", frozenset({IN_PROGRESS}), COMPLETED, "completed"),
    "cancel": Action("customer", frozenset({PENDING, CONFIRMED}), CANCELLED, "cancelled"),
}


def allowed_transitions(status: str) -> FrozenSet[str]:
    try:
        return ALLOWED_TRANSITIONS[status]
    except KeyError:
        raise InvalidTransition(f"Unknown booking status '{status}'")


def validate_transition(current: str, target: str) -> None:
    if target not in allowed_transitions(current):
        raise InvalidTransition(f"Cannot move booking from {current} to {target}")


def _label(status: str) -> str:
    return status.replace("_", " ")


class BookingManager:
    def __init__(self, gateway: Gateway):
        self.gateway = gateway

    # ---- reads ----

    def get(self, booking_id: int) -> Booking:
        booking = self.gateway.get(Booking, booking_id, fresh=True)
        if not booking:
            raise NotFound("Booking not found")
        return booking

    def get_for_participant(self, user: User, booking_id: int) -> Booking:
        booking = self.get(booking_id)
        if user.role != "admin" and booking.party_of(user.id) is None:
            raise Forbidden("Not your booking")
        return booking

    def list_for_customer(self, customer: User, status: Optional[str] = None) -> List[Booking]:
        filters = {"customer_id": customer.id}
        if status:
            filters["status"] = status
        return self.gateway.select(Booking, filters, order_by="created_at", descending=True)

    def list_for_provider(self, provider: User, status: Optional[str] = None) -> List[Booking]:
        filters = {"provider_id": provider.id}
        if status:
            filters["status"] = status
        return self.gateway.select(Booking, filters, order_by="created_at", descending=True)

    def list_all(self, status: Optional[str] = None) -> List[Booking]:
        return self.gateway.select(Booking, {"status": status} if status else None, order_by="created_at", descending=True)

    # ---- create ----

    def create_booking(self, customer: User, payload: BookingCreate, now: Optional[datetime] = None) -> Booking:
        if not payload.customer_name.strip() or not payload.customer_address.strip():
            raise ValidationFailed("Please fill in all required fields")

        if payload.duration_hours < 1 or payload.duration_hours > settings.max_booking_hours:
            raise ValidationFailed(f"Duration must be between 1 and {settings.max_booking_hours} hours")

        if settings.require_future_bookings:
            starts_at = datetime.combine(payload.booking_date, payload.booking_time)
            if starts_at <= (now or datetime.now()):
                raise ValidationFailed("Please select a future date and time")

        service = self.gateway.get(Service, payload.service_id)
        if not service:
            raise NotFound("Service not found")
        if not service.is_available:
            raise ValidationFailed("This service is not currently available")
        if service.provider_id == customer.id:
            raise ValidationFailed("You cannot book your own service")

        booking = self.gateway.insert(
            Booking,
            {
                "customer_id": customer.id,
                "provider_id": service.provider_id,
                "service_id": service.id,
                "booking_date": payload.booking_date,
                "booking_time": payload.booking_time,
                "duration_hours": payload.duration_hours,
                "total_amount": round(service.price_from * payload.duration_hours, 2),
                "customer_name": payload.customer_name.strip(),
                "customer_phone": payload.customer_phone,
                "customer_address": payload.customer_address.strip(),
                "customer_notes": payload.customer_notes,
                "status": PENDING,
            },
        )
        logger.info("Booking %s created by customer %s for service %s", booking.id, customer.id, service.id)
        return booking

    # ---- transitions ----

    def transition(self, booking: Booking, target: str, values: Optional[dict] = None) -> Booking:
        """
        Move `booking` to `target` with a compare-and-set on its current status.

        Raises InvalidTransition when the move is not allowed, or when another
        writer changed the status between our read and our update.
        """
        current = booking.status
        validate_transition(current, target)

        changes = {"status": target, **(values or {})}
        changed = self.gateway.update(Booking, {"id": booking.id, "status": current}, changes)
        fresh = self.get(booking.id)
        if not changed:
            raise InvalidTransition(f"Booking is already {_label(fresh.status)}")

        logger.info("Booking %s: %s -> %s", booking.id, current, target)
        return fresh

    def apply(self, user: User, booking_id: int, action: str, notes: Optional[str] = None) -> Booking:
        rule = ACTIONS.get(action)
        if rule is None:
            raise ValidationFailed(f"Unknown booking action '{action}'")

        booking = self.get(booking_id)
        if booking.party_of(user.id) != rule.actor:
            raise Forbidden("Not your booking")

        if booking.status not in rule.sources:
            raise InvalidTransition(f"Cannot {action} a booking that is {_label(booking.status)}")

        values = {}
        if notes and rule.actor == "provider":
            values["provider_notes"] = notes
        return self.transition(booking, rule.target, values)

    def accept(self, provider: User, booking_id: int) -> Booking:
        return self.apply(provider, booking_id, "accept")

    def decline(self, provider: User, booking_id: int, notes: Optional[str] = None) -> Booking:
        return self.apply(provider, booking_id, "decline", notes)

    def start(self, provider: User, booking_id: int) -> Booking:
        return self.apply(provider, booking_id, "start")

    def complete(self, provider: User, booking_id: int, notes: Optional[str] = None) -> Booking:
        return self.apply(provider, booking_id, "complete", notes)

    def cancel(self, customer: User, booking_id: int) -> Booking:
        return self.apply(customer, booking_id, "cancel")

    # ---- notes ----

    def update_customer_notes(self, customer: User, booking_id: int, notes: str) -> Booking:
        booking = self.get(booking_id)
        if booking.customer_id != customer.id:
            raise Forbidden("Not your booking")
        if booking.status in TERMINAL_STATUSES:
            raise InvalidTransition(f"Cannot edit a booking that is {_label(booking.status)}")

        changed = self.gateway.update(Booking, {"id": booking.id, "status": booking.status}, {"customer_notes": notes})
        fresh = self.get(booking.id)
        if not changed:
            raise InvalidTransition(f"Cannot edit a booking that is {_label(fresh.status)}")
        return fresh
