# tuma_helper/schemas/favorite.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class FavoriteStatus(BaseModel):
    provider_id: int
    is_favorite: bool


class FavoriteServiceMini(BaseModel):
    id: int
    title: str
    price_from: float
    rating: Optional[float]
    category_name: Optional[str] = None


class FavoriteProvider(BaseModel):
    id: int
    provider_id: int
    provider_name: Optional[str] = None
    created_at: datetime
    services: List[FavoriteServiceMini] = []
