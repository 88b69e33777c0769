import asyncio
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from tuma_helper.core.retry import RetryPolicy
from tuma_helper.db.changefeed import ANY, DELETE, INSERT, UPDATE, ChangeEvent, ChangeFeed
from tuma_helper.db.models.category import Category
from tuma_helper.db.models.review import ProviderReview
from tuma_helper.db.models.service import Service


def _operational():
    return OperationalError("SELECT 1", {}, Exception("database is locked"))


class TestRetryPolicy:
    def test_fixed_delay_by_default(self):
        policy = RetryPolicy()
        assert [policy.wait_for(n) for n in (1, 2, 3)] == [1.0, 1.0, 1.0]

    def test_exponential_backoff(self):
        policy = RetryPolicy(delay=0.5, backoff=2.0)
        assert [policy.wait_for(n) for n in (1, 2, 3)] == [0.5, 1.0, 2.0]

    def test_retries_transient_errors_then_succeeds(self):
        sleeps = []
        fn = MagicMock(side_effect=[_operational(), _operational(), "ok"])
        policy = RetryPolicy(max_attempts=3, delay=1.0, sleep=sleeps.append)

        assert policy.call(fn) == "ok"
        assert fn.call_count == 3
        assert sleeps == [1.0, 1.0]

    def test_gives_up_after_max_attempts(self):
        fn = MagicMock(side_effect=_operational())
        on_retry = MagicMock()
        policy = RetryPolicy(max_attempts=3, sleep=lambda _s: None)

        with pytest.raises(OperationalError):
            policy.call(fn, on_retry=on_retry)
        assert fn.call_count == 3
        assert on_retry.call_count == 2

    def test_other_errors_are_not_retried(self):
        fn = MagicMock(side_effect=ValueError("bad"))
        with pytest.raises(ValueError):
            RetryPolicy(sleep=lambda _s: None).call(fn)
        assert fn.call_count == 1


class TestGatewayCrud:
    def test_select_filters_orders_and_limits(self, gateway, provider, make_service):
        make_service(provider, title="A", price_from=10)
        make_service(provider, title="B", price_from=30)
        make_service(provider, title="C", price_from=20, is_available=False)

        rows = gateway.select(Service, {"is_available": True}, order_by="price_from", descending=True)
        assert [s.title for s in rows] == ["B", "A"]

        rows = gateway.select(Service, {"title": ["A", "C"]}, order_by="title", limit=1)
        assert [s.title for s in rows] == ["A"]

    def test_none_filter_is_null(self, gateway, provider, make_service, category):
        make_service(provider, title="Uncategorised")
        make_service(provider, title="Filed", category_id=category.id)

        assert [s.title for s in gateway.select(Service, {"category_id": None})] == ["Uncategorised"]

    def test_update_returns_changed_rows(self, gateway, provider, make_service):
        make_service(provider, title="A")
        make_service(provider, title="B")

        assert gateway.update(Service, {"provider_id": provider.id}, {"is_available": False}) == 2
        assert gateway.update(Service, {"title": "missing"}, {"is_available": True}) == 0
        assert gateway.count(Service, {"is_available": False}) == 2

    def test_increment_is_computed_in_sql(self, gateway, review_row):
        gateway.increment(ProviderReview, {"id": review_row.id}, "helpful_count")
        gateway.increment(ProviderReview, {"id": review_row.id}, "helpful_count", by=2)

        assert gateway.get(ProviderReview, review_row.id).helpful_count == 3

    def test_delete_returns_count(self, gateway):
        gateway.insert(Category, {"name": "Plumbing"})
        assert gateway.delete(Category, {"name": "Plumbing"}) == 1
        assert gateway.first(Category, {"name": "Plumbing"}) is None

    def test_integrity_error_rolls_back_and_propagates(self, gateway):
        gateway.insert(Category, {"name": "Plumbing"})
        with pytest.raises(IntegrityError):
            gateway.insert(Category, {"name": "Plumbing"})
        # session is usable again
        assert gateway.count(Category) == 1

    def test_transient_read_error_is_retried(self, gateway, db):
        real_query = db.query
        calls = {"n": 0}

        def flaky_query(*args, **kwargs):
            calls["n"] += 1
            if calls["n"] == 1:
                raise _operational()
            return real_query(*args, **kwargs)

        db.query = flaky_query
        try:
            assert gateway.count(Category) == 0
        finally:
            db.query = real_query
        assert calls["n"] == 2


@pytest.fixture
def review_row(db, make_booking, customer, service):
    booking = make_booking(customer, service, status="completed")
    review = ProviderReview(
        booking_id=booking.id,
        customer_id=customer.id,
        provider_id=service.provider_id,
        service_id=service.id,
        rating=5,
    )
    db.add(review)
    db.commit()
    db.refresh(review)
    return review


class TestChangeFeed:
    @pytest.mark.asyncio
    async def test_gateway_publishes_committed_writes(self, gateway, changes):
        inserts = changes.subscribe("service_categories", INSERT)
        everything = changes.subscribe("service_categories", ANY)

        category = gateway.insert(Category, {"name": "Plumbing"})
        gateway.update(Category, {"id": category.id}, {"icon": "wrench"})
        gateway.delete(Category, {"id": category.id})

        first = await inserts.get(timeout=1)
        assert first.event == INSERT
        assert first.record["name"] == "Plumbing"
        assert inserts.queue.empty()

        kinds = [(await everything.get(timeout=1)).event for _ in range(3)]
        assert kinds == [INSERT, UPDATE, DELETE]
        assert everything.queue.empty() is True

        inserts.close()
        everything.close()
        assert changes.subscriber_count == 0

    @pytest.mark.asyncio
    async def test_filters_match_on_record_values(self):
        changes = ChangeFeed()
        async with changes.subscribe("messages", INSERT, {"receiver_id": 7}) as sub:
            assert changes.publish(ChangeEvent("messages", INSERT, {"id": 1, "receiver_id": 8})) == 0
            assert changes.publish(ChangeEvent("messages", INSERT, {"id": 2, "receiver_id": 7})) == 1
            change = await sub.get(timeout=1)
        assert change.record["id"] == 2
        assert changes.subscriber_count == 0

    @pytest.mark.asyncio
    async def test_publish_from_worker_thread(self):
        changes = ChangeFeed()
        sub = changes.subscribe("messages")
        loop = asyncio.get_running_loop()

        await loop.run_in_executor(None, changes.publish, ChangeEvent("messages", INSERT, {"id": 3}))
        change = await sub.get(timeout=1)

        assert change.record == {"id": 3}
        sub.close()
