# tuma_helper/api/routes/payments.py
from fastapi import APIRouter, Depends

from tuma_helper.api.deps import get_payments
from tuma_helper.core.security import get_current_user, require_customer
from tuma_helper.db.models.user import User
from tuma_helper.schemas.payment import (
    PaymentConfirm,
    PaymentConfirmResponse,
    PaymentIntentCreate,
    PaymentIntentResponse,
)
from tuma_helper.services.payments import PaymentService

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/intent", response_model=PaymentIntentResponse)
def create_payment_intent(
    payload: PaymentIntentCreate,
    payments: PaymentService = Depends(get_payments),
    current_user: User = Depends(require_customer),
):
    return payments.create_payment_intent(current_user, payload.booking_id, payload.amount)


@router.post("/confirm", response_model=PaymentConfirmResponse)
def confirm_payment(
    payload: PaymentConfirm,
    payments: PaymentService = Depends(get_payments),
    current_user: User = Depends(get_current_user),
):
    booking = payments.confirm_payment(current_user, payload.payment_intent_id)
    return PaymentConfirmResponse(
        success=True,
        message="Payment confirmed and booking updated",
        booking_id=booking.id,
        status=booking.status,
    )
