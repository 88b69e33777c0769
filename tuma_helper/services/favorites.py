"""Customer x provider favourites."""

import logging
from typing import List, Optional, Set

from sqlalchemy.exc import IntegrityError

from tuma_helper.core.exceptions import Forbidden, NotFound, ValidationFailed
from tuma_helper.db.gateway import Gateway
from tuma_helper.db.models.favorite import CustomerFavorite
from tuma_helper.db.models.service import Service
from tuma_helper.db.models.user import User
from tuma_helper.schemas.favorite import FavoriteProvider, FavoriteServiceMini

logger = logging.getLogger(__name__)

SERVICES_PER_FAVORITE = 2


class FavoritesService:
    def __init__(self, gateway: Gateway):
        self.gateway = gateway

    def _check(self, customer: User, provider_id: int) -> None:
        if customer.role != "customer":
            raise Forbidden("Only customers can save favorites")
        if provider_id == customer.id:
            raise ValidationFailed("You cannot favorite yourself")
        provider = self.gateway.get(User, provider_id)
        if not provider or provider.role != "provider":
            raise NotFound("Provider not found")

    def is_favorite(self, customer: User, provider_id: int) -> bool:
        return self.gateway.first(CustomerFavorite, {"customer_id": customer.id, "provider_id": provider_id}) is not None

    def toggle(self, customer: User, provider_id: int) -> bool:
        """
        Flip membership and return the new state.

        Existence check then insert/delete: two round trips, not atomic. A
        concurrent duplicate insert hits the unique (customer, provider)
        constraint and is reported as already favourited.
        """
        self._check(customer, provider_id)
        pair = {"customer_id": customer.id, "provider_id": provider_id}

        if self.gateway.first(CustomerFavorite, pair):
            self.gateway.delete(CustomerFavorite, pair)
            logger.info("Customer %s removed provider %s from favorites", customer.id, provider_id)
            return False

        try:
            self.gateway.insert(CustomerFavorite, pair)
        except IntegrityError:
            logger.info("Duplicate favorite for customer %s / provider %s ignored", customer.id, provider_id)
        else:
            logger.info("Customer %s added provider %s to favorites", customer.id, provider_id)
        return True

    def remove(self, customer: User, provider_id: int) -> bool:
        removed = self.gateway.delete(CustomerFavorite, {"customer_id": customer.id, "provider_id": provider_id})
        return removed > 0

    def favorite_provider_ids(self, customer: User) -> Set[int]:
        return {f.provider_id for f in self.gateway.select(CustomerFavorite, {"customer_id": customer.id})}

    def list_for_customer(self, customer: User, limit: Optional[int] = None) -> List[FavoriteProvider]:
        favorites = self.gateway.select(
            CustomerFavorite, {"customer_id": customer.id}, order_by="created_at", descending=True, limit=limit
        )
        result = []
        for fav in favorites:
            provider = self.gateway.get(User, fav.provider_id)
            services = self.gateway.select(
                Service,
                {"provider_id": fav.provider_id, "is_available": True},
                order_by="rating",
                descending=True,
                limit=SERVICES_PER_FAVORITE,
            )
            result.append(
                FavoriteProvider(
                    id=fav.id,
                    provider_id=fav.provider_id,
                    provider_name=provider.public_name if provider else None,
                    created_at=fav.created_at,
                    services=[
                        FavoriteServiceMini(
                            id=s.id,
                            title=s.title,
                            price_from=s.price_from,
                            rating=s.rating,
                            category_name=s.category.name if s.category else None,
                        )
                        for s in services
                    ],
                )
            )
        return result
