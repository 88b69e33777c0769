"""Provider reviews and the rating aggregate recomputed on every read."""

import logging
from datetime import datetime
from typing import Any, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError

from tuma_helper.core.exceptions import (
    AuthenticationRequired,
    Conflict,
    Forbidden,
    NotFound,
    ValidationFailed,
)
from tuma_helper.db.gateway import Gateway
from tuma_helper.db.models.booking import Booking, BookingStatus
from tuma_helper.db.models.review import ProviderReview
from tuma_helper.db.models.service import Service
from tuma_helper.db.models.user import User
from tuma_helper.schemas.review import DIMENSIONS, RatingSummary, ReviewCreate

logger = logging.getLogger(__name__)

RATING_REQUIRED = "Please provide a rating before submitting"


def _dimension(dimensions: Any, name: str) -> float:
    if dimensions is None:
        return 0
    if hasattr(dimensions, "model_dump"):
        dimensions = dimensions.model_dump()
    return dimensions.get(name) or 0


def aggregate(reviews: Iterable[Any]) -> RatingSummary:
    """
    Mean rating, per-star histogram and per-dimension means.

    A review with no value for a dimension counts as 0 for that dimension.
    With no reviews every figure is 0.
    """
    reviews = list(reviews)
    total = len(reviews)
    breakdown = {star: 0 for star in range(1, 6)}
    for r in reviews:
        if r.rating in breakdown:
            breakdown[r.rating] += 1

    if total == 0:
        return RatingSummary(
            average_rating=0.0,
            total_reviews=0,
            breakdown=breakdown,
            dimension_averages={name: 0.0 for name in DIMENSIONS},
        )

    return RatingSummary(
        average_rating=sum(r.rating for r in reviews) / total,
        total_reviews=total,
        breakdown=breakdown,
        dimension_averages={
            name: sum(_dimension(r.dimensions, name) for r in reviews) / total for name in DIMENSIONS
        },
    )


class ReviewService:
    def __init__(self, gateway: Gateway):
        self.gateway = gateway

    def get(self, review_id: int) -> ProviderReview:
        review = self.gateway.get(ProviderReview, review_id)
        if not review:
            raise NotFound("Review not found")
        return review

    def list_for_provider(self, provider_id: int) -> List[ProviderReview]:
        return self.gateway.select(ProviderReview, {"provider_id": provider_id}, order_by="created_at", descending=True)

    def provider_summary(self, provider_id: int) -> RatingSummary:
        return aggregate(self.list_for_provider(provider_id))

    def _refresh_service_rating(self, service_id: Optional[int]) -> None:
        if service_id is None:
            return
        summary = aggregate(self.gateway.select(ProviderReview, {"service_id": service_id}))
        self.gateway.update(
            Service,
            {"id": service_id},
            {"rating": round(summary.average_rating, 2), "total_reviews": summary.total_reviews},
        )

    def submit_review(self, user: Optional[User], payload: ReviewCreate) -> ProviderReview:
        # Validation happens before any store call
        if user is None:
            raise AuthenticationRequired("Please sign in to leave a review.")
        if not payload.booking_id or payload.rating == 0:
            raise ValidationFailed(RATING_REQUIRED)
        if user.role != "customer":
            raise Forbidden("Only customers can create reviews")

        booking = self.gateway.get(Booking, payload.booking_id)
        if not booking:
            raise NotFound("Booking not found")
        if booking.customer_id != user.id:
            raise Forbidden("Booking does not belong to you")
        if booking.status != BookingStatus.COMPLETED.value:
            raise ValidationFailed("Can only review completed bookings")
        if self.gateway.first(ProviderReview, {"booking_id": booking.id}):
            raise Conflict("Review for this booking already exists")

        try:
            review = self.gateway.insert(
                ProviderReview,
                {
                    "booking_id": booking.id,
                    "customer_id": user.id,
                    "provider_id": booking.provider_id,
                    "service_id": booking.service_id,
                    "rating": payload.rating,
                    "review_text": payload.review_text,
                    "review_photos": list(payload.review_photos),
                    "dimensions": payload.dimensions.model_dump(),
                    "helpful_count": 0,
                    # tied to a completed booking of this customer
                    "is_verified": True,
                },
            )
        except IntegrityError:
            raise Conflict("Review for this booking already exists")

        self._refresh_service_rating(booking.service_id)
        logger.info("Review %s submitted for provider %s (booking %s)", review.id, review.provider_id, booking.id)
        return review

    def mark_helpful(self, review_id: int) -> ProviderReview:
        self.get(review_id)
        self.gateway.increment(ProviderReview, {"id": review_id}, "helpful_count")
        return self.get(review_id)

    def respond(self, provider: User, review_id: int, text: str) -> ProviderReview:
        review = self.get(review_id)
        if review.provider_id != provider.id:
            raise Forbidden("You can only respond to your own reviews")
        if review.response_text:
            raise Conflict("You have already responded to this review")

        changed = self.gateway.update(
            ProviderReview,
            {"id": review_id, "response_text": None},
            {"response_text": text, "response_date": datetime.utcnow()},
        )
        if not changed:
            raise Conflict("You have already responded to this review")
        return self.get(review_id)
