# tuma_helper/api/routes/search.py
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import asc, desc, func, or_
from sqlalchemy.orm import Session

from tuma_helper.db.base import get_db
from tuma_helper.db.models.booking import Booking
from tuma_helper.db.models.service import Service
from tuma_helper.schemas.search import SearchResponse
from tuma_helper.schemas.service import ServiceResponse

router = APIRouter(prefix="/search", tags=["search"])

SortOption = Literal["relevance", "price_asc", "price_desc", "rating_desc", "newest"]


@router.get("/services", response_model=SearchResponse)
def search_services(
    q: Optional[str] = Query(None, description="Search keywords (title + description)"),
    category_id: Optional[int] = Query(None),
    provider_id: Optional[int] = Query(None),
    min_price: Optional[float] = Query(None, ge=0.0),
    max_price: Optional[float] = Query(None, ge=0.0),
    min_rating: Optional[float] = Query(None, ge=0.0, le=5.0),
    city: Optional[str] = Query(None),
    location: Optional[str] = Query(None, description="Partial match on the service location"),
    sort: SortOption = Query("relevance"),
    page: int = Query(1, ge=1),
    per_page: int = Query(12, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """
    Search available services with filters, sorting, and pagination.
    - `q` does a case-insensitive partial match on title & description
    - `relevance` prefers the most booked services, then the best rated
    """

    bookings_count = (
        db.query(Booking.service_id.label("service_id"), func.count(Booking.id).label("bookings_count"))
        .group_by(Booking.service_id)
        .subquery()
    )
    popularity = func.coalesce(bookings_count.c.bookings_count, 0)

    base = (
        db.query(Service)
        .outerjoin(bookings_count, bookings_count.c.service_id == Service.id)
        .filter(Service.is_available == True)
    )

    # Filters
    if q and q.strip():
        q_like = f"%{q.strip()}%"
        base = base.filter(or_(Service.title.ilike(q_like), Service.description.ilike(q_like)))

    if category_id:
        base = base.filter(Service.category_id == category_id)

    if provider_id:
        base = base.filter(Service.provider_id == provider_id)

    if min_price is not None:
        base = base.filter(Service.price_from >= min_price)

    if max_price is not None:
        base = base.filter(Service.price_from <= max_price)

    if min_rating is not None:
        base = base.filter(func.coalesce(Service.rating, 0) >= min_rating)

    if city and city.strip():
        base = base.filter(func.lower(Service.city) == city.strip().lower())

    if location and location.strip():
        base = base.filter(Service.location.ilike(f"%{location.strip()}%"))

    # Sorting
    if sort == "price_asc":
        base = base.order_by(asc(Service.price_from))
    elif sort == "price_desc":
        base = base.order_by(desc(Service.price_from))
    elif sort == "rating_desc":
        base = base.order_by(desc(func.coalesce(Service.rating, 0)))
    elif sort == "newest":
        base = base.order_by(desc(Service.created_at))
    else:
        base = base.order_by(desc(popularity), desc(func.coalesce(Service.rating, 0)))
    base = base.order_by(Service.id)

    # Pagination
    total = base.count()
    rows = base.offset((page - 1) * per_page).limit(per_page).all()

    return SearchResponse(
        total=int(total or 0),
        page=page,
        per_page=per_page,
        items=[ServiceResponse.model_validate(s) for s in rows],
    )
