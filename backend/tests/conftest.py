"""Pytest fixtures for the orders API.

Provides reusable test fixtures for:
- Database session on a fresh schema per test
- Product and draft order factories
- Requesters and authenticated test clients with JWT tokens

Usage:
    def test_convert(customer_client, make_draft):
        draft = make_draft()
        response = customer_client.post(f"/api/v1/orders/{draft.id}/convert")
        assert response.status_code == 200
"""

import os
import sys
from decimal import Decimal
from pathlib import Path
from typing import Generator

# Set environment variables BEFORE any imports to ensure they take effect
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-key-256-bits-minimum-length-required-for-security")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("ENVIRONMENT", "test")

backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from models.base import Base
from models.order import Order, OrderItem
from models.product import Product
from auth.dependencies import Requester
from auth.jwt import create_access_token
from auth.roles import UserRole
from orders.status import OrderStatus
from database import get_db as database_get_db


CUSTOMER_ID = 42
OTHER_CUSTOMER_ID = 7
ADMIN_ID = 1

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite://")

if TEST_DATABASE_URL.startswith("sqlite"):
    # One shared in-memory connection so TestClient worker threads see the same data
    test_engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    test_engine = create_engine(TEST_DATABASE_URL)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


ADDRESS = {
    "street": "1 Market Street",
    "city": "Springfield",
    "postal_code": "12345",
    "country": "US",
}


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test.

    Creates all tables before the test and drops them after.
    """
    Base.metadata.create_all(bind=test_engine)

    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def make_product(db_session: Session):
    """Factory creating committed products."""
    counter = {"n": 0}

    def _make_product(
        quantity: int = 5,
        is_published: bool = True,
        is_digital: bool = False,
        name: str = None,
        price: Decimal = Decimal("10.00"),
    ) -> Product:
        counter["n"] += 1
        product = Product(
            sku=f"SKU-{counter['n']:03d}",
            name=name or f"Product {counter['n']}",
            price=price,
            quantity=quantity,
            is_published=is_published,
            is_digital=is_digital,
        )
        db_session.add(product)
        db_session.commit()
        db_session.refresh(product)
        return product

    return _make_product


@pytest.fixture
def make_draft(db_session: Session, make_product):
    """Factory creating committed draft orders.

    `lines` is a list of (product, quantity, subtotal, tax) tuples; by
    default one line of 2 units of a product with stock 5.
    """
    counter = {"n": 0}

    def _make_draft(
        lines=None,
        customer_id: int = CUSTOMER_ID,
        status: str = OrderStatus.DRAFT.value,
        shipping_address=ADDRESS,
        billing_address=ADDRESS,
        metadata=None,
        payment_status: str = None,
        payment_details=None,
        total_amount: Decimal = Decimal("0.00"),
    ) -> Order:
        counter["n"] += 1
        if lines is None:
            lines = [(make_product(quantity=5), 2, Decimal("20.00"), Decimal("1.60"))]

        order = Order(
            order_number=f"DRAFT-1700000000{counter['n']:03d}",
            customer_id=customer_id,
            status=status,
            payment_status=payment_status,
            payment_details=payment_details,
            total_amount=total_amount,
            shipping_address=shipping_address,
            billing_address=billing_address,
            metadata_json=metadata if metadata is not None else {"isDraft": True},
            items=[
                OrderItem(
                    product_id=product.id,
                    sku=product.sku,
                    name=product.name,
                    quantity=quantity,
                    unit_price=product.price,
                    subtotal=subtotal,
                    tax=tax,
                    total=subtotal + tax,
                )
                for product, quantity, subtotal, tax in lines
            ],
        )
        db_session.add(order)
        db_session.commit()
        db_session.refresh(order)
        return order

    return _make_draft


@pytest.fixture
def customer() -> Requester:
    return Requester(id=CUSTOMER_ID, role=UserRole.CUSTOMER, email="customer@test.com")


@pytest.fixture
def other_customer() -> Requester:
    return Requester(id=OTHER_CUSTOMER_ID, role=UserRole.CUSTOMER, email="other@test.com")


def _client_for(db_session: Session, requester_id: int = None, role: UserRole = UserRole.CUSTOMER):
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[database_get_db] = override_get_db

    client = TestClient(app)
    if requester_id is not None:
        token = create_access_token(user_id=requester_id, role=role.value)
        client.headers.update({"Authorization": f"Bearer {token}"})
    return client


@pytest.fixture(scope="function")
def client(db_session: Session):
    """Unauthenticated test client."""
    from main import app

    yield _client_for(db_session)
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def customer_client(db_session: Session):
    """Test client authenticated as the draft-owning customer."""
    from main import app

    yield _client_for(db_session, CUSTOMER_ID, UserRole.CUSTOMER)
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def other_customer_client(db_session: Session):
    """Test client authenticated as a customer who owns nothing."""
    from main import app

    yield _client_for(db_session, OTHER_CUSTOMER_ID, UserRole.CUSTOMER)
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def admin_client(db_session: Session):
    """Test client authenticated as an ADMIN."""
    from main import app

    yield _client_for(db_session, ADMIN_ID, UserRole.ADMIN)
    app.dependency_overrides.clear()
