from datetime import date

from tuma_helper.db.models.review import ProviderReview


class TestProviderDashboard:
    def test_summary(self, client, auth_headers, provider, customer, service, make_booking, make_service):
        today = date.today()
        other = make_service(provider, title="Ironing", price_from=50)
        make_booking(customer, service, status="completed", total_amount=300, booking_date=today)
        make_booking(customer, service, status="completed", total_amount=200, booking_date=today)
        make_booking(customer, other, status="pending")
        make_booking(customer, other, status="cancelled")
        make_booking(customer, other, status="in_progress")

        body = client.get("/provider/dashboard/summary", headers=auth_headers(provider)).json()

        assert body["total_bookings"] == 5
        assert body["completed"] == 2
        assert body["in_progress"] == 1
        assert body["total_earnings"] == 500
        assert body["current_month_earnings"] == 500
        assert body["average_rating"] == 0
        assert body["top_service"]["service_title"] == "Ironing"

    def test_stats_completion_rate(self, client, auth_headers, provider, customer, service, make_booking):
        make_booking(customer, service, status="completed")
        make_booking(customer, service, status="pending")

        body = client.get("/provider/dashboard/bookings/stats", headers=auth_headers(provider)).json()

        assert body["total"] == 2
        assert body["completion_rate"] == "50.0%"

    def test_earnings_breakdown(self, client, auth_headers, provider, customer, service, make_booking):
        make_booking(customer, service, status="completed", total_amount=120, booking_date=date(2025, 3, 1))

        body = client.get(
            "/provider/dashboard/earnings", params={"month": 3, "year": 2025}, headers=auth_headers(provider)
        ).json()

        assert body["total_earnings"] == 120
        assert body["breakdown"][0]["service_title"] == service.title

    def test_customers_are_turned_away(self, client, auth_headers, customer):
        res = client.get("/provider/dashboard/summary", headers=auth_headers(customer))
        assert res.status_code == 403


class TestCustomerDashboard:
    def test_overview_and_lists(self, client, auth_headers, customer, provider, service, make_booking):
        make_booking(customer, service, status="pending")
        make_booking(customer, service, status="completed", total_amount=250, booking_date=date.today())
        client.post(f"/favorites/{provider.id}/toggle", headers=auth_headers(customer))

        body = client.get("/customer/dashboard", headers=auth_headers(customer)).json()

        assert body["overview"]["total_bookings"] == 2
        assert body["overview"]["total_spent"] == 250
        assert body["overview"]["favorites"] == 1
        assert [b["status"] for b in body["upcoming"]] == ["pending"]
        assert [b["status"] for b in body["past"]] == ["completed"]
        assert len(body["spending_summary"]) == 6
        assert body["spending_summary"][-1]["total_spent"] == 250

    def test_status_counts_add_up_to_total(self, client, auth_headers, customer, service, make_booking):
        for status in ("pending", "confirmed", "in_progress", "in_progress", "completed", "cancelled"):
            make_booking(customer, service, status=status)

        overview = client.get("/customer/dashboard", headers=auth_headers(customer)).json()["overview"]

        assert overview["in_progress"] == 2
        shown = sum(overview[key] for key in ("pending", "confirmed", "in_progress", "completed", "cancelled"))
        assert shown == overview["total_bookings"] == 6


class TestAdminDashboard:
    def test_platform_stats(self, client, auth_headers, db, admin, customer, provider, service, make_booking):
        done = make_booking(customer, service, status="completed", total_amount=300)
        make_booking(customer, service, status="cancelled", total_amount=100)
        make_booking(customer, service, status="in_progress", total_amount=200)
        db.add(ProviderReview(booking_id=done.id, customer_id=customer.id, provider_id=provider.id, rating=4))
        db.commit()

        body = client.get("/admin/dashboard", headers=auth_headers(admin)).json()

        kpis = body["kpis"]
        assert kpis["total_users"] == 3
        assert kpis["total_providers"] == 1
        assert kpis["total_bookings"] == 3
        assert kpis["total_revenue"] == 300
        assert kpis["booked_value"] == 600
        assert kpis["average_rating"] == 4
        assert body["bookings_by_status"] == {
            "pending": 0,
            "confirmed": 0,
            "in_progress": 1,
            "completed": 1,
            "cancelled": 1,
        }
        assert len(body["recent_bookings"]) == 3
        assert body["recent_bookings"][0]["customer_name"] == "Jane Customer"
        assert len(body["bookings_trend_last_30_days"]) == 30
        assert body["bookings_trend_last_30_days"][-1]["bookings"] == 3

    def test_recent_bookings_capped(self, client, auth_headers, admin, customer, service, make_booking):
        for _ in range(12):
            make_booking(customer, service)

        body = client.get("/admin/dashboard", headers=auth_headers(admin)).json()
        assert len(body["recent_bookings"]) == 10

    def test_admins_only(self, client, auth_headers, provider):
        res = client.get("/admin/dashboard", headers=auth_headers(provider))
        assert res.status_code == 403
