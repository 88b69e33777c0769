# tuma_helper/schemas/provider_profile.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ProviderProfileUpdate(BaseModel):
    bio: Optional[str] = None
    hourly_rate: Optional[float] = Field(None, ge=0)
    service_areas: Optional[List[str]] = None
    portfolio_urls: Optional[List[str]] = None
    years_of_experience: Optional[int] = Field(None, ge=0, le=80)


class ProviderProfileResponse(BaseModel):
    provider_id: int
    bio: Optional[str] = None
    hourly_rate: float = 0
    service_areas: List[str] = []
    portfolio_urls: List[str] = []
    years_of_experience: int = 0
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
