# tuma_helper/api/routes/services.py

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from tuma_helper.core import notices
from tuma_helper.core.config import settings
from tuma_helper.core.context import AppContext, get_app_context
from tuma_helper.core.security import require_admin, require_provider
from tuma_helper.db.base import get_db
from tuma_helper.db.gateway import Gateway, get_gateway
from tuma_helper.db.models.category import Category
from tuma_helper.db.models.service import Service
from tuma_helper.db.models.user import User
from tuma_helper.schemas.common import ActionResult
from tuma_helper.schemas.service import (
    CategoryCreate,
    CategoryResponse,
    ServiceCreate,
    ServiceResponse,
    ServiceUpdate,
)


router = APIRouter(prefix="/services", tags=["services"])


def _check_category(db: Session, category_id):
    if category_id is None:
        return
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise HTTPException(404, detail="Category not found")


# Categories

@router.get("/categories", response_model=list[CategoryResponse])
def list_categories(db: Session = Depends(get_db)):
    return db.query(Category).order_by(Category.name).all()


@router.post("/categories", response_model=ActionResult[CategoryResponse], status_code=201)
def create_category(
    category_in: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    if db.query(Category).filter(func.lower(Category.name) == category_in.name.strip().lower()).first():
        raise HTTPException(400, detail="Category already exists")

    category = Category(name=category_in.name.strip(), description=category_in.description, icon=category_in.icon)
    db.add(category)
    db.commit()
    db.refresh(category)
    return ActionResult[CategoryResponse](
        notice=notices.success("Category created"),
        data=CategoryResponse.model_validate(category),
    )


# Featured services: available, highest rated first, optionally in the selected city

@router.get("/featured", response_model=list[ServiceResponse])
def featured_services(
    gateway: Gateway = Depends(get_gateway),
    context: AppContext = Depends(get_app_context),
):
    where = []
    if context.city:
        where.append(func.lower(Service.city) == context.city.lower())
    return gateway.select(
        Service,
        {"is_available": True},
        order_by="rating",
        descending=True,
        limit=settings.featured_services_limit,
        where=where,
    )


# Provider creates service

@router.post("/provider/services", response_model=ActionResult[ServiceResponse], status_code=201)
def create_service(
    service_data: ServiceCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_provider),
):
    _check_category(db, service_data.category_id)

    new_service = Service(provider_id=current_user.id, **service_data.model_dump())

    db.add(new_service)
    db.commit()
    db.refresh(new_service)

    return ActionResult[ServiceResponse](
        notice=notices.success("Service created", f"{new_service.title} is now listed."),
        data=ServiceResponse.model_validate(new_service),
    )


# Provider views their services

@router.get("/provider/services", response_model=list[ServiceResponse])
def get_my_services(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_provider),
):
    return (
        db.query(Service)
        .filter(Service.provider_id == current_user.id)
        .order_by(Service.created_at.desc(), Service.id.desc())
        .all()
    )


# Provider updates their service

@router.put("/provider/services/{service_id}", response_model=ActionResult[ServiceResponse])
def update_service(
    service_id: int,
    update_data: ServiceUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_provider),
):
    service = db.query(Service).filter(Service.id == service_id).first()
    if not service:
        raise HTTPException(404, "Service not found")

    # Permission check
    if service.provider_id != current_user.id:
        raise HTTPException(403, "You cannot edit another provider's service")

    changes = update_data.model_dump(exclude_unset=True)
    if "category_id" in changes:
        _check_category(db, changes["category_id"])

    for field, value in changes.items():
        setattr(service, field, value)

    db.commit()
    db.refresh(service)
    return ActionResult[ServiceResponse](
        notice=notices.success("Service updated"),
        data=ServiceResponse.model_validate(service),
    )


# Provider deactivates their service

@router.delete("/provider/services/{service_id}", response_model=ActionResult[ServiceResponse])
def deactivate_service(
    service_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_provider),
):
    service = db.query(Service).filter(Service.id == service_id).first()
    if not service:
        raise HTTPException(404, "Service not found")

    if service.provider_id != current_user.id:
        raise HTTPException(403, "You cannot delete another provider's service")

    service.is_available = False

    db.commit()
    db.refresh(service)
    return ActionResult[ServiceResponse](
        notice=notices.success("Service deactivated"),
        data=ServiceResponse.model_validate(service),
    )


# Get services by category

@router.get("/category/{category_id}", response_model=list[ServiceResponse])
def get_services_by_category(category_id: int, db: Session = Depends(get_db)):
    services = (
        db.query(Service)
        .filter(Service.category_id == category_id, Service.is_available == True)
        .order_by(Service.rating.desc(), Service.id)
        .all()
    )
    return services


# Get services by provider

@router.get("/provider/{provider_id}", response_model=list[ServiceResponse])
def get_provider_services(provider_id: int, db: Session = Depends(get_db)):
    services = (
        db.query(Service)
        .filter(Service.provider_id == provider_id, Service.is_available == True)
        .order_by(Service.created_at.desc(), Service.id.desc())
        .all()
    )
    return services


@router.get("/{service_id}", response_model=ServiceResponse)
def get_service(service_id: int, db: Session = Depends(get_db)):
    service = db.query(Service).filter(Service.id == service_id).first()
    if not service:
        raise HTTPException(404, "Service not found")
    return service
