# tuma_helper/schemas/customer_dashboard.py
from pydantic import BaseModel
from typing import List, Optional
from datetime import date

class BookingMini(BaseModel):
    id: int
    service_id: int
    service_title: Optional[str]
    provider_id: int
    provider_name: Optional[str]
    booking_date: date
    booking_time: Optional[str]
    total_amount: float
    status: str

    class Config:
        from_attributes = True

class SpendingPoint(BaseModel):
    month: str
    year: int
    total_spent: float

class CustomerOverview(BaseModel):
    total_bookings: int
    pending: int
    confirmed: int
    in_progress: int
    completed: int
    cancelled: int
    total_spent: float
    favorites: int
    avg_rating_given: Optional[float]

    class Config:
        from_attributes = True

class CustomerDashboardResponse(BaseModel):
    overview: CustomerOverview
    upcoming: List[BookingMini]
    past: List[BookingMini]
    spending_summary: List[SpendingPoint]

    class Config:
        from_attributes = True
