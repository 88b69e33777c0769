from datetime import date, time, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tuma_helper.core.config import settings
from tuma_helper.core.retry import RetryPolicy
from tuma_helper.core.security import create_access_token, hash_password
from tuma_helper.db.base import Base, get_db
from tuma_helper.db.changefeed import ChangeFeed
from tuma_helper.db.gateway import Gateway
from tuma_helper.db.init_db import init_db
from tuma_helper.db.models.booking import Booking
from tuma_helper.db.models.category import Category
from tuma_helper.db.models.service import Service
from tuma_helper.db.models.user import User
from tuma_helper.main import app

# bcrypt is deliberately slow; hash the fixture password once
PASSWORD = "secret123"
PASSWORD_HASH = hash_password(PASSWORD)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def changes():
    return ChangeFeed()


@pytest.fixture
def no_wait_policy():
    return RetryPolicy(max_attempts=3, delay=0, sleep=lambda _s: None)


@pytest.fixture
def gateway(db, no_wait_policy, changes):
    return Gateway(db, policy=no_wait_policy, changes=changes)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def allow_past_bookings(monkeypatch):
    monkeypatch.setattr(settings, "require_future_bookings", False)


# ---- factories ----

@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def factory(role="customer", full_name=None, **extra):
        counter["n"] += 1
        user = User(
            email=extra.pop("email", f"{role}{counter['n']}@example.com"),
            password_hash=PASSWORD_HASH,
            role=role,
            full_name=full_name or f"{role.title()} {counter['n']}",
            **extra,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return factory


@pytest.fixture
def customer(make_user):
    return make_user("customer", full_name="Jane Customer")


@pytest.fixture
def provider(make_user):
    return make_user("provider", full_name="Sipho Provider", city="Windhoek")


@pytest.fixture
def admin(make_user):
    return make_user("admin", full_name="Ada Admin")


@pytest.fixture
def category(db):
    category = Category(name="Cleaning", description="Home cleaning")
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


@pytest.fixture
def make_service(db):
    def factory(provider, **values):
        service = Service(
            provider_id=provider.id,
            title=values.pop("title", "House cleaning"),
            description=values.pop("description", "Full house clean"),
            price_from=values.pop("price_from", 150.0),
            location=values.pop("location", "Klein Windhoek"),
            city=values.pop("city", "Windhoek"),
            **values,
        )
        db.add(service)
        db.commit()
        db.refresh(service)
        return service

    return factory


@pytest.fixture
def service(make_service, provider, category):
    return make_service(provider, category_id=category.id)


@pytest.fixture
def make_booking(db):
    def factory(customer, service, status="pending", **values):
        booking = Booking(
            customer_id=customer.id,
            provider_id=service.provider_id,
            service_id=service.id,
            booking_date=values.pop("booking_date", date.today() + timedelta(days=7)),
            booking_time=values.pop("booking_time", time(10, 0)),
            duration_hours=values.pop("duration_hours", 2),
            total_amount=values.pop("total_amount", service.price_from * 2),
            customer_name=values.pop("customer_name", customer.full_name),
            customer_address=values.pop("customer_address", "12 Main Street"),
            status=status,
            **values,
        )
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    return factory


@pytest.fixture
def booking(make_booking, customer, service):
    return make_booking(customer, service)


@pytest.fixture
def auth_headers():
    def headers(user):
        return {"Authorization": f"Bearer {create_access_token({'sub': user.email})}"}

    return headers
