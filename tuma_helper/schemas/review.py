# tuma_helper/schemas/review.py
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, conint, field_validator

DIMENSIONS = ("quality", "communication", "timeliness", "professionalism")


class ReviewDimensions(BaseModel):
    quality: conint(ge=0, le=5) = 0
    communication: conint(ge=0, le=5) = 0
    timeliness: conint(ge=0, le=5) = 0
    professionalism: conint(ge=0, le=5) = 0


class ReviewCreate(BaseModel):
    booking_id: Optional[int] = None
    # 0 means "not rated yet" and is rejected by the review service with a notice
    rating: conint(ge=0, le=5) = Field(0, description="Rating 1-5")
    review_text: Optional[str] = None
    review_photos: List[str] = Field(default_factory=list)
    dimensions: ReviewDimensions = Field(default_factory=ReviewDimensions)


class ReviewResponseCreate(BaseModel):
    response_text: str = Field(..., min_length=1)


class ReviewResponse(BaseModel):
    id: int
    booking_id: int
    customer_id: int
    provider_id: int
    service_id: Optional[int]
    rating: int
    review_text: Optional[str]
    review_photos: List[str] = Field(default_factory=list)
    dimensions: ReviewDimensions = Field(default_factory=ReviewDimensions)
    response_text: Optional[str]
    response_date: Optional[datetime]
    helpful_count: int = 0
    is_verified: bool = False
    customer_name: Optional[str] = None
    created_at: datetime

    @field_validator("review_photos", mode="before")
    @classmethod
    def _photos(cls, value):
        return value or []

    @field_validator("dimensions", mode="before")
    @classmethod
    def _dimensions(cls, value):
        # rows written without dimension data come back as NULL
        return value or {}

    @field_validator("helpful_count", mode="before")
    @classmethod
    def _helpful(cls, value):
        return value or 0

    class Config:
        from_attributes = True


class RatingSummary(BaseModel):
    average_rating: float
    total_reviews: int
    breakdown: Dict[int, int]
    dimension_averages: Dict[str, float]


class ProviderReviewsResponse(BaseModel):
    provider_id: int
    summary: RatingSummary
    reviews: List[ReviewResponse]
