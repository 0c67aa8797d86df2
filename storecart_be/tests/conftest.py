import os
from typing import Dict, Optional

# Settings are read at import time; point them at throwaway values before importing the app.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ALGORITHM"] = "HS256"
os.environ["ADMIN_EMAIL"] = "admin@example.com"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storecart.main import app
from storecart.models.user import Base, User, get_db
from storecart.models.product import Product
import storecart.models.cart  # noqa: F401  register Cart/CartItem tables
from storecart.services.inventory import NotFound
from storecart.utils.security import create_access_token


class FakeInventory:
    """Dict-backed stand-in for InventoryView: product id -> Availability."""

    def __init__(self, availabilities: Dict[int, object], names: Optional[Dict[int, str]] = None):
        self.availabilities = availabilities
        self.names = names or {}
        self.lookups = []

    def availability(self, product_id):
        self.lookups.append(product_id)
        return self.availabilities.get(product_id, NotFound(product_id))

    def product_name(self, product_id):
        return self.names.get(product_id)


@pytest.fixture
def make_inventory():
    return FakeInventory


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    test_client = TestClient(app)
    yield test_client
    test_client.close()
    app.dependency_overrides.clear()


def create_user(session_factory, email="shopper@example.com", role="USER") -> int:
    with session_factory() as session:
        user = User(first_name="Cart", last_name="User", email=email, password="secret", role=role)
        session.add(user)
        session.commit()
        return user.id


def seed_product(session_factory, title="Tee", stock=0, sizes=None, price=19.99, main_image="/media/tee.png", images=None) -> int:
    """sizes: ordered list of (label, quantity) pairs, or None for an unsized product."""
    with session_factory() as session:
        product = Product(
            title=title,
            price=price,
            category="tops",
            stock=stock,
            main_image=main_image,
            images=images or [],
            size_quantities=[{"size": s, "quantity": q} for s, q in sizes] if sizes else None,
        )
        session.add(product)
        session.commit()
        return product.id


def auth_headers(email="shopper@example.com") -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(subject=email)}"}
