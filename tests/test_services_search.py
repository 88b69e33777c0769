import pytest

from tuma_helper.core.config import settings


class TestCatalogue:
    def test_provider_creates_and_updates_service(self, client, auth_headers, provider, category):
        res = client.post(
            "/services/provider/services",
            json={"title": "Garden care", "price_from": 120, "category_id": category.id, "city": "Windhoek"},
            headers=auth_headers(provider),
        )
        assert res.status_code == 201
        service_id = res.json()["data"]["id"]
        assert res.json()["data"]["category"]["name"] == "Cleaning"

        res = client.put(
            f"/services/provider/services/{service_id}",
            json={"price_from": 140},
            headers=auth_headers(provider),
        )
        assert res.json()["data"]["price_from"] == 140

        res = client.delete(f"/services/provider/services/{service_id}", headers=auth_headers(provider))
        assert res.json()["data"]["is_available"] is False

    def test_customer_cannot_create_service(self, client, auth_headers, customer):
        res = client.post(
            "/services/provider/services", json={"title": "Nope", "price_from": 1}, headers=auth_headers(customer)
        )
        assert res.status_code == 403

    def test_other_provider_cannot_edit(self, client, auth_headers, make_user, service):
        res = client.put(
            f"/services/provider/services/{service.id}", json={"title": "Mine now"}, headers=auth_headers(make_user("provider"))
        )
        assert res.status_code == 403

    def test_admin_creates_category(self, client, auth_headers, admin, category):
        res = client.post("/services/categories", json={"name": "Plumbing"}, headers=auth_headers(admin))
        assert res.status_code == 201

        res = client.post("/services/categories", json={"name": "cleaning"}, headers=auth_headers(admin))
        assert res.status_code == 400

        names = [c["name"] for c in client.get("/services/categories").json()]
        assert names == ["Cleaning", "Plumbing"]

    def test_service_detail(self, client, service, provider):
        res = client.get(f"/services/{service.id}")

        assert res.json()["provider"]["id"] == provider.id
        assert client.get("/services/9999").status_code == 404


class TestFeatured:
    def test_highest_rated_available_first(self, client, provider, make_service, monkeypatch):
        monkeypatch.setattr(settings, "featured_services_limit", 2)
        make_service(provider, title="Good", rating=4.2)
        make_service(provider, title="Best", rating=4.9)
        make_service(provider, title="Okay", rating=3.1)
        make_service(provider, title="Hidden", rating=5.0, is_available=False)

        titles = [s["title"] for s in client.get("/services/featured").json()]

        assert titles == ["Best", "Good"]

    def test_filtered_by_context_city(self, client, provider, make_service):
        make_service(provider, title="Capital", city="Windhoek", rating=4.0)
        make_service(provider, title="Coast", city="Swakopmund", rating=4.5)

        res = client.get("/services/featured", headers={"X-City": "swakopmund"})

        assert [s["title"] for s in res.json()] == ["Coast"]


class TestSearch:
    @pytest.fixture
    def catalogue(self, provider, make_service, category):
        return [
            make_service(provider, title="Deep cleaning", price_from=300, rating=4.8, category_id=category.id),
            make_service(provider, title="Window washing", description="Cleaning of windows", price_from=90, rating=3.9),
            make_service(
                provider, title="Garden care", description="Lawn mowing", price_from=150, rating=4.1, city="Swakopmund"
            ),
        ]

    def test_keyword_matches_title_or_description(self, client, catalogue):
        res = client.get("/search/services", params={"q": "clean", "sort": "price_asc"})

        body = res.json()
        assert body["total"] == 2
        assert [s["title"] for s in body["items"]] == ["Window washing", "Deep cleaning"]

    def test_price_and_rating_filters(self, client, catalogue):
        res = client.get("/search/services", params={"min_price": 100, "min_rating": 4.5})
        assert [s["title"] for s in res.json()["items"]] == ["Deep cleaning"]

    def test_city_and_category(self, client, catalogue, category):
        assert client.get("/search/services", params={"city": "swakopmund"}).json()["total"] == 1
        assert client.get("/search/services", params={"category_id": category.id}).json()["total"] == 1

    def test_pagination(self, client, catalogue):
        res = client.get("/search/services", params={"sort": "rating_desc", "per_page": 2, "page": 2})

        body = res.json()
        assert body["total"] == 3
        assert [s["title"] for s in body["items"]] == ["Window washing"]

    def test_relevance_prefers_booked_services(self, client, catalogue, customer, make_booking):
        make_booking(customer, catalogue[2])
        res = client.get("/search/services")
        assert res.json()["items"][0]["title"] == "Garden care"

    def test_unknown_sort_rejected(self, client):
        assert client.get("/search/services", params={"sort": "popularity"}).status_code == 422
