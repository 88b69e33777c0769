"""Stripe payment intents for bookings."""

import logging
from typing import Any, Dict

import stripe

from tuma_helper.core.config import settings
from tuma_helper.core.exceptions import (
    Forbidden,
    InvalidTransition,
    NotFound,
    PaymentError,
    PaymentProviderUnavailable,
)
from tuma_helper.db.gateway import Gateway
from tuma_helper.db.models.booking import Booking
from tuma_helper.db.models.user import User
from tuma_helper.services.booking_manager import CONFIRMED, PENDING, BookingManager

logger = logging.getLogger(__name__)


def to_minor_units(amount: float) -> int:
    return int(round(amount * 100))


def _check_amount(booking: Booking, minor_units: int) -> None:
    # charged amount must match the booking total to the cent
    if minor_units != to_minor_units(booking.total_amount or 0):
        raise PaymentError("Payment amount does not match the booking total")


class PaymentService:
    def __init__(self, gateway: Gateway, bookings: BookingManager | None = None):
        self.gateway = gateway
        self.bookings = bookings or BookingManager(gateway)

    def create_payment_intent(self, customer: User, booking_id: int, amount: float) -> Dict[str, str]:
        if amount <= 0:
            raise PaymentError("Missing required parameters")

        booking = self.gateway.first(Booking, {"id": booking_id, "customer_id": customer.id})
        if not booking:
            raise NotFound("Booking not found or access denied")
        if booking.status != PENDING:
            raise InvalidTransition(f"Cannot pay for a booking that is {booking.status.replace('_', ' ')}")
        _check_amount(booking, to_minor_units(amount))

        try:
            intent = stripe.PaymentIntent.create(
                api_key=settings.stripe_secret_key,
                amount=to_minor_units(amount),
                currency=settings.payment_currency,
                automatic_payment_methods={"enabled": True},
                metadata={"booking_id": str(booking.id), "user_id": str(customer.id)},
            )
        except stripe.StripeError as e:
            logger.error(f"Error creating payment intent for booking {booking.id}: {e}")
            raise PaymentProviderUnavailable("Could not start payment. Please try again.")

        self.gateway.update(Booking, {"id": booking.id}, {"payment_intent_id": intent["id"]})
        logger.info("Payment intent %s created for booking %s", intent["id"], booking.id)
        return {"client_secret": intent["client_secret"], "payment_intent_id": intent["id"]}

    def _retrieve(self, payment_intent_id: str) -> Any:
        try:
            return stripe.PaymentIntent.retrieve(payment_intent_id, api_key=settings.stripe_secret_key)
        except stripe.StripeError as e:
            logger.error(f"Error retrieving payment intent {payment_intent_id}: {e}")
            raise PaymentProviderUnavailable("Could not verify payment. Please try again.")

    def confirm_payment(self, user: User, payment_intent_id: str) -> Booking:
        intent = self._retrieve(payment_intent_id)
        if intent["status"] != "succeeded":
            raise PaymentError("Payment not completed")

        metadata = intent.get("metadata") or {}
        raw_booking_id = metadata.get("booking_id")
        if not raw_booking_id:
            raise PaymentError("Booking ID not found in payment metadata")

        booking = self.bookings.get(int(raw_booking_id))
        if user.role != "admin" and booking.customer_id != user.id:
            raise Forbidden("Not your booking")
        if booking.payment_intent_id and booking.payment_intent_id != payment_intent_id:
            raise PaymentError("Payment does not match this booking")
        if intent.get("amount") is not None:
            _check_amount(booking, int(intent["amount"]))

        if booking.status == CONFIRMED:
            logger.info("Booking %s already confirmed; payment %s acknowledged", booking.id, payment_intent_id)
            return booking

        booking = self.bookings.transition(booking, CONFIRMED, {"payment_intent_id": payment_intent_id})
        logger.info("Payment %s confirmed booking %s", payment_intent_id, booking.id)
        return booking
