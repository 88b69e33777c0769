# tuma_helper/schemas/provider_dashboard.py
from pydantic import BaseModel
from typing import List, Optional

class TopServiceItem(BaseModel):
    service_id: int
    service_title: str
    count: int

class SummaryResponse(BaseModel):
    total_bookings: int
    pending: int
    confirmed: int
    in_progress: int
    completed: int
    cancelled: int
    total_earnings: float
    current_month_earnings: float
    average_rating: float
    total_reviews: int
    top_service: Optional[TopServiceItem] = None

    class Config:
        from_attributes = True

class EarningsBreakdownItem(BaseModel):
    service_title: str
    count: int
    value: float

class EarningsResponse(BaseModel):
    provider_id: int
    month: int
    year: int
    total_earnings: float
    completed_bookings: int
    breakdown: List[EarningsBreakdownItem]

    class Config:
        from_attributes = True

class BookingsStatsResponse(BaseModel):
    total: int
    pending: int
    confirmed: int
    in_progress: int
    completed: int
    cancelled: int
    completion_rate: str  # e.g. "89.4%"

    class Config:
        from_attributes = True
