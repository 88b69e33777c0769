from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from tuma_helper.core.config import settings
from tuma_helper.core.exceptions import (
    DomainError,
    domain_exception_handler,
    http_exception_handler,
    store_exception_handler,
    validation_exception_handler,
)
from tuma_helper.core.logging_config import configure_logging
from tuma_helper.db.init_db import init_db
from tuma_helper.api.routes import auth
from tuma_helper.api.routes import profiles as profiles_router
from tuma_helper.api.routes import services as services_router
from tuma_helper.api.routes import search as search_router
from tuma_helper.api.routes import bookings as bookings_router
from tuma_helper.api.routes import messages as messages_router
from tuma_helper.api.routes import reviews as reviews_router
from tuma_helper.api.routes import favorites as favorites_router
from tuma_helper.api.routes import payments as payments_router
from tuma_helper.api.routes import providers_dashboard as providers_dashboard_router
from tuma_helper.api.routes import customer_dashboard as customer_dashboard_router
from tuma_helper.api.routes import admin_dashboard as admin_dashboard_router
from tuma_helper.api.routes import providers as providers_router
from tuma_helper.api.routes import availability as availability_router


configure_logging()

app = FastAPI(title=settings.app_name)

app.add_exception_handler(DomainError, domain_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(SQLAlchemyError, store_exception_handler)

@app.on_event("startup")
def startup():
    init_db()

@app.get("/")
def root():
    return {"message": f"{settings.app_name} API running"}


app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(profiles_router.router)
app.include_router(providers_router.router)
app.include_router(availability_router.router)
app.include_router(services_router.router)
app.include_router(search_router.router)
app.include_router(bookings_router.router)
app.include_router(messages_router.router)
app.include_router(reviews_router.router)
app.include_router(favorites_router.router)
app.include_router(payments_router.router)
app.include_router(providers_dashboard_router.router)
app.include_router(customer_dashboard_router.router)
app.include_router(admin_dashboard_router.router)
