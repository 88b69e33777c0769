from datetime import date, time, timedelta

from tuma_helper.db.models.availability import ProviderAvailability
from tuma_helper.db.models.provider_profile import ProviderProfile


class TestProviderProfile:
    def test_blank_profile_before_first_save(self, client, auth_headers, provider):
        body = client.get("/providers/me/profile", headers=auth_headers(provider)).json()

        assert body["provider_id"] == provider.id
        assert body["hourly_rate"] == 0
        assert body["service_areas"] == []

    def test_first_save_creates_then_updates(self, client, auth_headers, db, provider):
        res = client.put(
            "/providers/me/profile",
            json={
                "bio": "Ten years of deep cleaning",
                "hourly_rate": 120,
                "service_areas": ["Windhoek", " Klein Windhoek ", "Windhoek", ""],
                "years_of_experience": 10,
            },
            headers=auth_headers(provider),
        )
        assert res.status_code == 200
        assert res.json()["notice"]["title"] == "Profile updated"
        assert res.json()["data"]["service_areas"] == ["Windhoek", "Klein Windhoek"]

        client.put("/providers/me/profile", json={"hourly_rate": 150}, headers=auth_headers(provider))

        rows = db.query(ProviderProfile).filter(ProviderProfile.provider_id == provider.id).all()
        assert len(rows) == 1
        assert rows[0].hourly_rate == 150
        assert rows[0].bio == "Ten years of deep cleaning"

    def test_public_profile(self, client, auth_headers, provider):
        client.put(
            "/providers/me/profile",
            json={"portfolio_urls": ["https://cdn.example.com/kitchen.jpg"]},
            headers=auth_headers(provider),
        )

        body = client.get(f"/providers/{provider.id}/profile").json()
        assert body["portfolio_urls"] == ["https://cdn.example.com/kitchen.jpg"]

    def test_customer_is_not_a_provider(self, client, auth_headers, customer):
        assert client.get(f"/providers/{customer.id}/profile").status_code == 404
        assert client.put("/providers/me/profile", json={"bio": "hi"}, headers=auth_headers(customer)).status_code == 403

    def test_negative_rate_rejected(self, client, auth_headers, provider):
        res = client.put("/providers/me/profile", json={"hourly_rate": -5}, headers=auth_headers(provider))
        assert res.status_code == 422


class TestWeeklyAvailability:
    def test_saving_a_day_twice_replaces_it(self, client, auth_headers, db, provider):
        headers = auth_headers(provider)
        client.put("/availability/provider/weekly", json={"weekday": 1, "start_time": "08:00", "end_time": "12:00"}, headers=headers)
        res = client.put(
            "/availability/provider/weekly",
            json={"weekday": 1, "start_time": "09:00", "end_time": "17:00"},
            headers=headers,
        )

        assert res.status_code == 200
        assert res.json()["notice"]["title"] == "Availability updated"
        rows = db.query(ProviderAvailability).filter(ProviderAvailability.provider_id == provider.id).all()
        assert [(r.weekday, r.start_time) for r in rows] == [(1, time(9, 0))]

    def test_window_must_be_ordered(self, client, auth_headers, provider):
        res = client.put(
            "/availability/provider/weekly",
            json={"weekday": 2, "start_time": "17:00", "end_time": "09:00"},
            headers=auth_headers(provider),
        )
        assert res.status_code == 422

    def test_public_view_hides_inactive_days(self, client, auth_headers, provider):
        headers = auth_headers(provider)
        client.put("/availability/provider/weekly", json={"weekday": 1, "start_time": "09:00", "end_time": "17:00"}, headers=headers)
        client.put(
            "/availability/provider/weekly",
            json={"weekday": 6, "start_time": "09:00", "end_time": "12:00", "is_active": False},
            headers=headers,
        )

        assert [d["weekday"] for d in client.get("/availability/provider/weekly", headers=headers).json()] == [1, 6]
        assert [d["weekday"] for d in client.get(f"/availability/provider/{provider.id}/weekly").json()] == [1]


class TestSlots:
    def _open_day(self, client, headers, day):
        client.put(
            "/availability/provider/weekly",
            json={"weekday": day.isoweekday(), "start_time": "09:00", "end_time": "12:00"},
            headers=headers,
        )

    def test_booked_hour_is_skipped(self, client, auth_headers, provider, customer, service, make_booking):
        day = date.today() + timedelta(days=7)
        self._open_day(client, auth_headers(provider), day)
        make_booking(customer, service, booking_date=day, booking_time=time(10, 0), duration_hours=1)
        make_booking(customer, service, status="cancelled", booking_date=day, booking_time=time(11, 0), duration_hours=1)

        res = client.get(
            f"/availability/provider/{provider.id}/slots",
            params={"date_str": day.isoformat(), "interval_minutes": 60},
        )

        assert res.json() == [f"{day.isoformat()}T09:00:00", f"{day.isoformat()}T11:00:00"]

    def test_whole_day_time_off_blocks_everything(self, client, auth_headers, provider):
        day = date.today() + timedelta(days=7)
        headers = auth_headers(provider)
        self._open_day(client, headers, day)
        res = client.post(
            "/availability/provider/timeoff",
            json={"start_date": day.isoformat(), "end_date": day.isoformat(), "reason": "Holiday"},
            headers=headers,
        )
        assert res.status_code == 201

        slots = client.get(f"/availability/provider/{provider.id}/slots", params={"date_str": day.isoformat()})
        assert slots.json() == []

        client.delete(f"/availability/provider/timeoff/{res.json()['id']}", headers=headers)
        slots = client.get(f"/availability/provider/{provider.id}/slots", params={"date_str": day.isoformat()})
        assert len(slots.json()) == 5

    def test_bad_date(self, client, provider):
        res = client.get(f"/availability/provider/{provider.id}/slots", params={"date_str": "next tuesday"})
        assert res.status_code == 422
