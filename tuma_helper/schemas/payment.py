# tuma_helper/schemas/payment.py
from pydantic import BaseModel, Field


class PaymentIntentCreate(BaseModel):
    booking_id: int
    amount: float = Field(..., gt=0)


class PaymentIntentResponse(BaseModel):
    client_secret: str
    payment_intent_id: str


class PaymentConfirm(BaseModel):
    payment_intent_id: str = Field(..., min_length=1)


class PaymentConfirmResponse(BaseModel):
    success: bool
    message: str
    booking_id: int
    status: str
