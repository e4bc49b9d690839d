import os

# Settings are read at import time
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["PAYMENT_PROVIDER"] = "mock"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_secret"
os.environ["FRONTEND_URL"] = "http://shop.test"
os.environ["PAYMENT_CURRENCY"] = "rub"
os.environ.pop("REDIS_URL", None)

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from storefront.main import app
from storefront.core.monitoring import monitoring
from storefront.db.session import Base, SessionLocal, engine
from storefront.models.product import Product
from storefront.services.mock_payment_service import MockPaymentService
from storefront.services.payment_service import get_payment_service

from helpers import auth_headers


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    monitoring.reset()
    yield


@pytest.fixture
def payment_service():
    service = MockPaymentService()
    app.dependency_overrides[get_payment_service] = lambda: service
    yield service
    app.dependency_overrides.pop(get_payment_service, None)


@pytest.fixture
def client(payment_service):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def alice():
    return auth_headers(1, "alice@example.com")


@pytest.fixture
def bob():
    return auth_headers(2, "bob@example.com")


@pytest.fixture
def make_product():
    """Insert a catalog product and return its id"""
    def _make(name="Tee", price="1500.00", sizes=None, category="Shirts",
              description="Cotton tee", image="https://cdn.test/tee.jpg"):
        with SessionLocal() as session:
            product = Product(
                name=name,
                description=description,
                price=Decimal(price),
                image=image,
                category=category,
                sizes=["S", "M", "L"] if sizes is None else sizes,
            )
            session.add(product)
            session.commit()
            return product.id
    return _make
