# tuma_helper/api/routes/favorites.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from tuma_helper.api.deps import get_favorites
from tuma_helper.core import notices
from tuma_helper.core.security import require_customer
from tuma_helper.db.models.user import User
from tuma_helper.schemas.common import ActionResult
from tuma_helper.schemas.favorite import FavoriteProvider, FavoriteStatus
from tuma_helper.services.favorites import FavoritesService

router = APIRouter(prefix="/favorites", tags=["favorites"])


@router.get("", response_model=List[FavoriteProvider])
def list_favorites(
    limit: Optional[int] = Query(None, ge=1, le=100),
    favorites: FavoritesService = Depends(get_favorites),
    current_user: User = Depends(require_customer),
):
    return favorites.list_for_customer(current_user, limit)


@router.get("/provider-ids", response_model=List[int])
def favorite_provider_ids(
    favorites: FavoritesService = Depends(get_favorites),
    current_user: User = Depends(require_customer),
):
    return sorted(favorites.favorite_provider_ids(current_user))


@router.get("/{provider_id}", response_model=FavoriteStatus)
def favorite_status(
    provider_id: int,
    favorites: FavoritesService = Depends(get_favorites),
    current_user: User = Depends(require_customer),
):
    return FavoriteStatus(provider_id=provider_id, is_favorite=favorites.is_favorite(current_user, provider_id))


@router.post("/{provider_id}/toggle", response_model=ActionResult[FavoriteStatus])
def toggle_favorite(
    provider_id: int,
    favorites: FavoritesService = Depends(get_favorites),
    current_user: User = Depends(require_customer),
):
    is_favorite = favorites.toggle(current_user, provider_id)
    notice = (
        notices.success("Added to favorites", "Provider added to your favorites list.")
        if is_favorite
        else notices.success("Removed from favorites", "Provider removed from your favorites list.")
    )
    return ActionResult[FavoriteStatus](notice=notice, data=FavoriteStatus(provider_id=provider_id, is_favorite=is_favorite))


@router.delete("/{provider_id}", response_model=ActionResult[FavoriteStatus])
def remove_favorite(
    provider_id: int,
    favorites: FavoritesService = Depends(get_favorites),
    current_user: User = Depends(require_customer),
):
    favorites.remove(current_user, provider_id)
    return ActionResult[FavoriteStatus](
        notice=notices.success("Removed from favorites"),
        data=FavoriteStatus(provider_id=provider_id, is_favorite=False),
    )
