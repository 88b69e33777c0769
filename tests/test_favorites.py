from unittest.mock import patch

import pytest
from sqlalchemy.exc import IntegrityError

from tuma_helper.core.exceptions import Forbidden, NotFound, ValidationFailed
from tuma_helper.db.models.favorite import CustomerFavorite
from tuma_helper.services.favorites import FavoritesService


def _rows(gateway, customer, provider):
    return gateway.count(CustomerFavorite, {"customer_id": customer.id, "provider_id": provider.id})


class TestToggle:
    def test_toggle_adds_exactly_one_row_then_removes_it(self, gateway, customer, provider):
        favorites = FavoritesService(gateway)

        assert favorites.toggle(customer, provider.id) is True
        assert _rows(gateway, customer, provider) == 1

        assert favorites.toggle(customer, provider.id) is False
        assert _rows(gateway, customer, provider) == 0

    def test_on_off_on_ends_on(self, gateway, customer, provider):
        favorites = FavoritesService(gateway)
        for _ in range(3):
            favorites.toggle(customer, provider.id)

        assert favorites.is_favorite(customer, provider.id) is True
        assert _rows(gateway, customer, provider) == 1

    def test_concurrent_insert_reported_as_favorited(self, gateway, customer, provider):
        favorites = FavoritesService(gateway)
        with patch.object(gateway, "insert", side_effect=IntegrityError("INSERT", {}, Exception("UNIQUE"))):
            assert favorites.toggle(customer, provider.id) is True

    def test_only_customers(self, gateway, provider, make_user):
        with pytest.raises(Forbidden):
            FavoritesService(gateway).toggle(make_user("provider"), provider.id)

    def test_target_must_be_provider(self, gateway, customer, make_user):
        with pytest.raises(NotFound):
            FavoritesService(gateway).toggle(customer, make_user("customer").id)

    def test_cannot_favorite_self(self, gateway, customer):
        with pytest.raises(ValidationFailed):
            FavoritesService(gateway).toggle(customer, customer.id)


class TestListing:
    def test_lists_newest_first_with_two_services(self, gateway, customer, provider, make_user, make_service):
        for title in ("Windows", "Gardening", "Ironing"):
            make_service(provider, title=title)
        make_service(provider, title="Retired", is_available=False)
        other = make_user("provider")
        favorites = FavoritesService(gateway)
        favorites.toggle(customer, provider.id)
        favorites.toggle(customer, other.id)

        listed = favorites.list_for_customer(customer)

        assert [f.provider_id for f in listed] == [other.id, provider.id]
        assert len(listed[1].services) == 2
        assert "Retired" not in [s.title for s in listed[1].services]
        assert favorites.favorite_provider_ids(customer) == {provider.id, other.id}
        assert len(favorites.list_for_customer(customer, limit=1)) == 1


class TestFavoriteRoutes:
    def test_toggle_route_notices(self, client, auth_headers, customer, provider):
        res = client.post(f"/favorites/{provider.id}/toggle", headers=auth_headers(customer))
        assert res.json()["data"]["is_favorite"] is True
        assert res.json()["notice"]["title"] == "Added to favorites"

        res = client.get(f"/favorites/{provider.id}", headers=auth_headers(customer))
        assert res.json() == {"provider_id": provider.id, "is_favorite": True}

        res = client.delete(f"/favorites/{provider.id}", headers=auth_headers(customer))
        assert res.json()["data"]["is_favorite"] is False

    def test_anonymous_toggle_needs_sign_in(self, client, provider):
        res = client.post(f"/favorites/{provider.id}/toggle")

        assert res.status_code == 401
        assert res.json()["notice"]["description"] == "Please sign in to continue."
