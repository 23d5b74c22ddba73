"""
Pytest configuration and fixtures for backend tests.
"""

import os
from datetime import date

# Must be set before the application modules read their settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["JWT_SECRET"] = "test-secret-key-that-is-long-enough-0123456789"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rest_api.main import create_app
from rest_api.models import (
    Base,
    Category,
    DiningTable,
    Employee,
    Establishment,
    Order,
    OrderItem,
    Product,
    User,
    WorkSchedule,
    WorkScheduleDay,
)
from shared.config.constants import Weekday
from shared.config.settings import Settings
from shared.infrastructure.db import get_db
from shared.security.password import hash_password
from shared.utils.worktime import shift_minutes


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

OWNER_EMAIL = "owner@test.com"
OWNER_PASSWORD = "testpass123"


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def test_settings():
    return Settings(
        database_url="sqlite://",
        jwt_secret="test-secret-key-that-is-long-enough-0123456789",
        public_base_url="http://pos.test",
        rate_limit_enabled=False,
        environment="test",
    )


@pytest.fixture
def app(test_settings, db_session):
    application = create_app(test_settings)

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    application.dependency_overrides[get_db] = override_get_db
    return application


@pytest.fixture(scope="function")
def client(app):
    """Test client with the database session override."""
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# =============================================================================
# Seed data
# =============================================================================


@pytest.fixture
def owner(db_session):
    """The owner account of the test establishment."""
    user = User(email=OWNER_EMAIL, password=hash_password(OWNER_PASSWORD))
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def establishment(db_session, owner):
    est = Establishment(
        user_id=owner.id,
        name="Test Bistro",
        slug="test-bistro",
        phones=["+33 1 23 45 67 89"],
        address="1 Main Street",
        images=[],
    )
    db_session.add(est)
    db_session.commit()
    db_session.refresh(est)
    return est


def login_as(client, app, user):
    """Put a valid session cookie for ``user`` in the client's cookie jar."""
    codec = app.state.session_codec
    client.cookies.set(codec.cookie_name, codec.sign(user.id, user.email))
    return client


@pytest.fixture
def auth_client(client, app, owner, establishment):
    """Client logged in as the owner of ``establishment``."""
    return login_as(client, app, owner)


@pytest.fixture
def other_establishment(db_session):
    """A second tenant, to check isolation."""
    user = User(email="rival@test.com", password=hash_password("rivalpass"))
    db_session.add(user)
    db_session.flush()
    est = Establishment(
        user_id=user.id,
        name="Rival Diner",
        slug="rival-diner",
        phones=["+1 555 0100"],
        address="2 Side Street",
        images=[],
    )
    db_session.add(est)
    db_session.commit()
    db_session.refresh(est)
    return est


@pytest.fixture
def make_category(db_session):
    def _make(establishment, name="Drinks"):
        category = Category(establishment_id=establishment.id, name=name)
        db_session.add(category)
        db_session.commit()
        db_session.refresh(category)
        return category

    return _make


@pytest.fixture
def make_product(db_session):
    def _make(
        establishment,
        name="Espresso",
        price_cents=250,
        quantity=None,
        category=None,
        status="ACTIVE",
    ):
        product = Product(
            establishment_id=establishment.id,
            category_id=category.id if category else None,
            name=name,
            price_cents=price_cents,
            is_quantifiable=quantity is not None,
            quantity=quantity,
            status=status,
        )
        db_session.add(product)
        db_session.commit()
        db_session.refresh(product)
        return product

    return _make


@pytest.fixture
def make_table(db_session):
    def _make(establishment, number=1, token="tok-000001"):
        table = DiningTable(
            establishment_id=establishment.id,
            number=number,
            name=f"Table {number}",
            table_token=token,
            qr_url=f"http://pos.test/t/{establishment.id}/table/{token}",
        )
        db_session.add(table)
        db_session.commit()
        db_session.refresh(table)
        return table

    return _make


@pytest.fixture
def make_order(db_session):
    """Insert an order directly, with ``lines`` as (product, quantity) pairs."""

    def _make(establishment, lines, status="PENDING", created_at=None, price_cents=None):
        items = []
        total = 0
        for product, quantity in lines:
            unit = product.price_cents if price_cents is None else price_cents
            items.append(
                OrderItem(
                    product_id=product.id,
                    quantity=quantity,
                    unit_price_cents=unit,
                    total_cents=unit * quantity,
                )
            )
            total += unit * quantity
        order = Order(
            establishment_id=establishment.id,
            status=status,
            total_amount_cents=total,
            items=items,
        )
        if created_at is not None:
            order.created_at = created_at
        db_session.add(order)
        db_session.commit()
        db_session.refresh(order)
        return order

    return _make


@pytest.fixture
def make_employee(db_session):
    def _make(
        establishment,
        first_name="Ana",
        last_name="Lopez",
        position="WAITER",
        status="ACTIVE",
        schedule=None,
    ):
        employee = Employee(
            establishment_id=establishment.id,
            schedule_id=schedule.id if schedule else None,
            first_name=first_name,
            last_name=last_name,
            phone="+33 6 00 00 00 00",
            position=position,
            department="DINING_ROOM",
            contract_type="PERMANENT",
            hire_date=date(2024, 1, 15),
            status=status,
        )
        db_session.add(employee)
        db_session.commit()
        db_session.refresh(employee)
        return employee

    return _make


@pytest.fixture
def make_schedule(db_session):
    """A schedule working ``start``-``end`` every day except ``rest_days``."""

    def _make(establishment, name="Day shift", start="09:00", end="17:00", rest_days=("SUNDAY",)):
        days = []
        for weekday in Weekday.ALL:
            working = weekday not in rest_days
            days.append(
                WorkScheduleDay(
                    day_of_week=weekday,
                    is_working_day=working,
                    start_time=start if working else None,
                    end_time=end if working else None,
                    planned_minutes=shift_minutes(start, end) if working else None,
                )
            )
        schedule = WorkSchedule(establishment_id=establishment.id, name=name, days=days)
        db_session.add(schedule)
        db_session.commit()
        db_session.refresh(schedule)
        return schedule

    return _make
