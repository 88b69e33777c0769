# tuma_helper/api/routes/reviews.py
from typing import Optional

from fastapi import APIRouter, Depends

from tuma_helper.api.deps import get_review_service
from tuma_helper.core import notices
from tuma_helper.core.security import get_current_user, get_optional_user, require_provider
from tuma_helper.db.models.user import User
from tuma_helper.schemas.common import ActionResult
from tuma_helper.schemas.review import (
    ProviderReviewsResponse,
    RatingSummary,
    ReviewCreate,
    ReviewResponse,
    ReviewResponseCreate,
)
from tuma_helper.services.reviews import ReviewService

router = APIRouter(prefix="/reviews", tags=["reviews"])


# Create review (customer)
@router.post("/", response_model=ActionResult[ReviewResponse], status_code=201)
def create_review(
    review_in: ReviewCreate,
    reviews: ReviewService = Depends(get_review_service),
    current_user: Optional[User] = Depends(get_optional_user),
):
    review = reviews.submit_review(current_user, review_in)
    return ActionResult[ReviewResponse](
        notice=notices.success("Review Submitted", "Thank you for your feedback!"),
        data=ReviewResponse.model_validate(review),
    )


# List reviews for a provider with the aggregate (public)
@router.get("/provider/{provider_id}", response_model=ProviderReviewsResponse)
def list_provider_reviews(provider_id: int, reviews: ReviewService = Depends(get_review_service)):
    rows = reviews.list_for_provider(provider_id)
    return ProviderReviewsResponse(
        provider_id=provider_id,
        summary=reviews.provider_summary(provider_id),
        reviews=[ReviewResponse.model_validate(r) for r in rows],
    )


@router.get("/provider/{provider_id}/summary", response_model=RatingSummary)
def provider_rating_summary(provider_id: int, reviews: ReviewService = Depends(get_review_service)):
    return reviews.provider_summary(provider_id)


@router.post("/{review_id}/helpful", response_model=ActionResult[ReviewResponse])
def mark_helpful(
    review_id: int,
    reviews: ReviewService = Depends(get_review_service),
    current_user: User = Depends(get_current_user),
):
    review = reviews.mark_helpful(review_id)
    return ActionResult[ReviewResponse](
        notice=notices.success("Thanks!", "You marked this review as helpful."),
        data=ReviewResponse.model_validate(review),
    )


@router.post("/{review_id}/response", response_model=ActionResult[ReviewResponse])
def respond_to_review(
    review_id: int,
    payload: ReviewResponseCreate,
    reviews: ReviewService = Depends(get_review_service),
    current_user: User = Depends(require_provider),
):
    review = reviews.respond(current_user, review_id, payload.response_text)
    return ActionResult[ReviewResponse](
        notice=notices.success("Response posted"),
        data=ReviewResponse.model_validate(review),
    )
