"""
Shared fixtures for the cashflow dashboard test suite.

Runs the API against an in-memory SQLite database and a mocked WooCommerce
transport, so no external services are needed.
"""
import os
import uuid

from cryptography.fernet import Fernet

# Configure the app BEFORE importing it; settings are read at import time.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENCRYPTION_KEY"] = Fernet.generate_key().decode()
os.environ["RATE_LIMIT_ENABLED"] = "false"

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.dependencies import get_woocommerce_factory
from app.main import app
from app.models import Business, BusinessSettings
from app.services.woocommerce_service import WooCommerceClient

WEBHOOK_SECRET = "s3cret-webhook"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def db():
    """Fresh schema per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def business(db):
    """A business with default-like settings: 18% VAT, 2.5% card fees, 30% materials."""
    b = Business(name="Test Shop")
    db.add(b)
    db.flush()
    db.add(BusinessSettings(
        business_id=b.id,
        vat_rate=18.0,
        credit_card_rate=2.5,
        materials_rate=30.0,
        google_ads_webhook_secret=WEBHOOK_SECRET,
    ))
    db.commit()
    db.refresh(b)
    return b


@pytest.fixture
def bare_business(db):
    """A business with no settings row."""
    b = Business(name="Bare Shop")
    db.add(b)
    db.commit()
    db.refresh(b)
    return b


@pytest.fixture
def business_id(business):
    return str(business.id)


@pytest.fixture
def missing_business_id():
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# API client fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def client(db):
    """FastAPI test client sharing the test session."""
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class FakeWooCommerce:
    """Serves canned orders through httpx.MockTransport and records requests."""

    def __init__(self):
        self.orders = []
        self.status_code = 200
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"message": "upstream failure"})
        return httpx.Response(200, json=self.orders)

    def client(self) -> WooCommerceClient:
        return WooCommerceClient(
            url="https://shop.example.com/",
            consumer_key="ck_test",
            consumer_secret="cs_test",
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def woo():
    return FakeWooCommerce()


@pytest.fixture
def woo_client(client, woo):
    """Route WooCommerce calls made by the API to the fake store."""
    app.dependency_overrides[get_woocommerce_factory] = lambda: (lambda business_settings: woo.client())
    yield woo
    app.dependency_overrides.pop(get_woocommerce_factory, None)


def make_order(order_id, status="completed", total="100.00", created="2024-03-10T12:00:00",
               shipping_total="0.00", shipping_methods=None, quantities=(1,)):
    """Build a WooCommerce order payload."""
    return {
        "id": order_id,
        "status": status,
        "total": total,
        "date_created": created,
        "shipping_total": shipping_total,
        "shipping_lines": [{"method_id": m} for m in (shipping_methods or [])],
        "line_items": [{"id": i, "quantity": q} for i, q in enumerate(quantities, start=1)],
    }
