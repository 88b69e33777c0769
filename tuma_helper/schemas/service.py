# tuma_helper/schemas/service.py

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    icon: Optional[str] = None


class CategoryResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None

    class Config:
        from_attributes = True


class ProviderMini(BaseModel):
    id: int
    full_name: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True


# Shared fields
class ServiceBase(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = ""
    price_from: float = Field(..., ge=0)
    price_to: Optional[float] = Field(default=None, ge=0)
    price_unit: Optional[str] = "hour"
    location: str = ""
    city: Optional[str] = None
    is_available: Optional[bool] = True


# Provider creates service
class ServiceCreate(ServiceBase):
    category_id: Optional[int] = None


# Provider updates service
class ServiceUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    price_from: Optional[float] = Field(default=None, ge=0)
    price_to: Optional[float] = Field(default=None, ge=0)
    price_unit: Optional[str] = None
    location: Optional[str] = None
    city: Optional[str] = None
    is_available: Optional[bool] = None
    category_id: Optional[int] = None


# What API returns
class ServiceResponse(BaseModel):
    id: int
    provider_id: int
    category_id: Optional[int]

    title: str
    description: str
    price_from: float
    price_to: Optional[float]
    price_unit: Optional[str]
    location: str
    city: Optional[str]
    is_available: bool
    rating: Optional[float] = 0
    total_reviews: Optional[int] = 0

    category: Optional[CategoryResponse] = None
    provider: Optional[ProviderMini] = None

    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
