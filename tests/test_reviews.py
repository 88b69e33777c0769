from types import SimpleNamespace

import pytest

from tuma_helper.core.exceptions import AuthenticationRequired, Conflict, Forbidden, ValidationFailed
from tuma_helper.db.models.review import ProviderReview
from tuma_helper.db.models.service import Service
from tuma_helper.schemas.review import ReviewCreate
from tuma_helper.services.reviews import RATING_REQUIRED, ReviewService, aggregate

DIMENSIONS = {"quality": 5, "communication": 3, "timeliness": 4, "professionalism": 4}


@pytest.fixture
def completed_booking(make_booking, customer, service):
    return make_booking(customer, service, status="completed")


@pytest.fixture
def review(gateway, customer, completed_booking):
    return ReviewService(gateway).submit_review(
        customer, ReviewCreate(booking_id=completed_booking.id, rating=4, dimensions=DIMENSIONS)
    )


class TestAggregate:
    def test_no_reviews_reports_zero(self):
        summary = aggregate([])

        assert summary.average_rating == 0
        assert summary.total_reviews == 0
        assert summary.breakdown == {1: 0, 2: 0, 3: 0, 4: 0, 5: 0}
        assert all(v == 0 for v in summary.dimension_averages.values())

    def test_missing_dimension_counts_as_zero(self):
        reviews = [
            SimpleNamespace(rating=5, dimensions={"quality": 4}),
            SimpleNamespace(rating=3, dimensions=None),
        ]
        summary = aggregate(reviews)

        assert summary.average_rating == 4
        assert summary.breakdown[5] == 1
        assert summary.breakdown[3] == 1
        assert summary.dimension_averages["quality"] == 2
        assert summary.dimension_averages["timeliness"] == 0


class TestSubmitReview:
    def test_single_review_round_trip(self, gateway, review, provider):
        summary = ReviewService(gateway).provider_summary(provider.id)

        assert summary.total_reviews == 1
        assert summary.average_rating == 4
        assert summary.dimension_averages["quality"] == 5
        assert summary.dimension_averages["communication"] == 3

    def test_review_is_verified_and_refreshes_service_rating(self, gateway, review, service):
        assert review.is_verified is True
        refreshed = gateway.get(Service, service.id)
        assert refreshed.rating == 4
        assert refreshed.total_reviews == 1

    def test_anonymous_rejected(self, gateway, completed_booking):
        with pytest.raises(AuthenticationRequired):
            ReviewService(gateway).submit_review(None, ReviewCreate(booking_id=completed_booking.id, rating=5))

    def test_zero_rating_rejected_before_store(self, gateway, customer, completed_booking):
        with pytest.raises(ValidationFailed, match=RATING_REQUIRED):
            ReviewService(gateway).submit_review(customer, ReviewCreate(booking_id=completed_booking.id, rating=0))
        assert gateway.count(ProviderReview) == 0

    def test_missing_booking_rejected(self, gateway, customer):
        with pytest.raises(ValidationFailed, match=RATING_REQUIRED):
            ReviewService(gateway).submit_review(customer, ReviewCreate(rating=4))

    def test_only_completed_bookings(self, gateway, customer, booking):
        with pytest.raises(ValidationFailed, match="completed"):
            ReviewService(gateway).submit_review(customer, ReviewCreate(booking_id=booking.id, rating=4))

    def test_not_your_booking(self, gateway, make_user, completed_booking):
        with pytest.raises(Forbidden):
            ReviewService(gateway).submit_review(
                make_user("customer"), ReviewCreate(booking_id=completed_booking.id, rating=4)
            )

    def test_one_review_per_booking(self, gateway, customer, completed_booking, review):
        with pytest.raises(Conflict):
            ReviewService(gateway).submit_review(customer, ReviewCreate(booking_id=completed_booking.id, rating=2))


class TestHelpfulAndResponse:
    def test_mark_helpful_increments(self, gateway, review):
        reviews = ReviewService(gateway)
        reviews.mark_helpful(review.id)
        assert reviews.mark_helpful(review.id).helpful_count == 2

    def test_provider_responds_once(self, gateway, provider, review):
        reviews = ReviewService(gateway)
        answered = reviews.respond(provider, review.id, "Thanks for having us!")

        assert answered.response_text == "Thanks for having us!"
        assert answered.response_date is not None
        with pytest.raises(Conflict):
            reviews.respond(provider, review.id, "Again")

    def test_other_provider_cannot_respond(self, gateway, make_user, review):
        with pytest.raises(Forbidden):
            ReviewService(gateway).respond(make_user("provider"), review.id, "Not mine")


class TestReviewRoutes:
    def test_submit_over_http(self, client, auth_headers, customer, completed_booking):
        res = client.post(
            "/reviews/",
            json={"booking_id": completed_booking.id, "rating": 5, "review_text": "Spotless", "dimensions": DIMENSIONS},
            headers=auth_headers(customer),
        )

        assert res.status_code == 201
        assert res.json()["notice"]["title"] == "Review Submitted"
        assert res.json()["data"]["customer_name"] == customer.full_name

    def test_anonymous_submit_gets_sign_in_notice(self, client, completed_booking):
        res = client.post("/reviews/", json={"booking_id": completed_booking.id, "rating": 5})

        assert res.status_code == 401
        assert res.json()["notice"]["variant"] == "destructive"

    def test_zero_rating_notice(self, client, auth_headers, customer, completed_booking):
        res = client.post("/reviews/", json={"booking_id": completed_booking.id}, headers=auth_headers(customer))

        assert res.status_code == 422
        assert res.json()["detail"] == RATING_REQUIRED

    def test_provider_reviews_page(self, client, provider, review):
        res = client.get(f"/reviews/provider/{provider.id}")

        body = res.json()
        assert body["summary"]["total_reviews"] == 1
        assert body["summary"]["dimension_averages"]["quality"] == 5
        assert body["reviews"][0]["id"] == review.id

    def test_provider_without_reviews(self, client, make_user):
        lonely = make_user("provider")
        res = client.get(f"/reviews/provider/{lonely.id}/summary")

        assert res.json()["average_rating"] == 0

    def test_helpful_and_response_routes(self, client, auth_headers, customer, provider, review):
        res = client.post(f"/reviews/{review.id}/helpful", headers=auth_headers(customer))
        assert res.json()["data"]["helpful_count"] == 1

        res = client.post(
            f"/reviews/{review.id}/response",
            json={"response_text": "Thank you!"},
            headers=auth_headers(provider),
        )
        assert res.status_code == 200
        assert res.json()["data"]["response_text"] == "Thank you!"
