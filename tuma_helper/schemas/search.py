# tuma_helper/schemas/search.py
from pydantic import BaseModel

from tuma_helper.schemas.service import ServiceResponse


class SearchResponse(BaseModel):
    total: int
    page: int
    per_page: int
    items: list[ServiceResponse]
