# tuma_helper/schemas/admin_dashboard.py
from pydantic import BaseModel
from typing import Dict, List, Optional
from datetime import date, datetime

class KPIItem(BaseModel):
    total_users: int
    total_providers: int
    total_services: int
    total_bookings: int
    bookings_today: int
    bookings_last_7_days: int
    total_revenue: float
    booked_value: float
    average_rating: float
    total_reviews: int

class RecentBookingItem(BaseModel):
    id: int
    status: str
    created_at: datetime
    total_amount: float
    customer_name: Optional[str]

    class Config:
        from_attributes = True

class TrendPoint(BaseModel):
    date: date
    bookings: int
    earnings: float

class AdminDashboardResponse(BaseModel):
    kpis: KPIItem
    bookings_by_status: Dict[str, int]
    recent_bookings: List[RecentBookingItem]
    bookings_trend_last_30_days: List[TrendPoint]
