"""Shared fixtures: in-memory database, seeded catalog, services and API client."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import marketplace.data.models  # noqa: F401
from marketplace.api.deps import get_identity_resolver, get_lock_service
from marketplace.data.database import Base, get_db
from marketplace.data.models.product import ProductModel
from marketplace.domain.actors import Actor, Role
from marketplace.domain.policy import AccessPolicy
from marketplace.main import create_app
from marketplace.services.cart_service import CartService
from marketplace.services.catalog import DatabaseCatalog
from marketplace.services.identity import IdentityResolver
from marketplace.services.lock_service import LocalCartLock
from marketplace.services.order_service import OrderService

ADMIN_ID = 1
VENDOR_V = 10
VENDOR_W = 20
VENDOR_X = 30
CUSTOMER_C = 100
CUSTOMER_D = 101

KEYBOARD = 1  # vendor V
MOUSE = 2  # vendor V
MONITOR = 3  # vendor W

TEST_SECRET = "test-secret"

ORDER_DETAILS = {
    "shipping_name": "Jan Kowalski",
    "shipping_address": "ul. Prosta 1, 00-001 Warszawa",
    "contact_email": "jan@example.com",
    "contact_phone": None,
    "payment_token": "tok_123",
}


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def products(db):
    rows = [
        ProductModel(id=KEYBOARD, vendor_id=VENDOR_V, name="Keyboard", price=Decimal("199.99")),
        ProductModel(id=MOUSE, vendor_id=VENDOR_V, name="Mouse", price=Decimal("49.50")),
        ProductModel(id=MONITOR, vendor_id=VENDOR_W, name="Monitor", price=Decimal("899.00")),
    ]
    db.add_all(rows)
    db.commit()
    return {p.id: p for p in rows}


@pytest.fixture()
def locks():
    return LocalCartLock(wait_seconds=1)


@pytest.fixture()
def policy():
    return AccessPolicy()


@pytest.fixture()
def catalog(db):
    return DatabaseCatalog(db)


@pytest.fixture()
def cart_service(db, catalog, locks, policy, products):
    return CartService(db=db, catalog=catalog, lock_service=locks, policy=policy)


@pytest.fixture()
def order_service(db, catalog, locks, policy, products):
    return OrderService(db=db, catalog=catalog, lock_service=locks, policy=policy)


@pytest.fixture()
def customer():
    return Actor.customer(CUSTOMER_C)


@pytest.fixture()
def resolver():
    return IdentityResolver(secret=TEST_SECRET)


@pytest.fixture()
def client(session_factory, locks, resolver, products):
    app = create_app()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_lock_service] = lambda: locks
    app.dependency_overrides[get_identity_resolver] = lambda: resolver
    return TestClient(app)


@pytest.fixture()
def auth(resolver):
    """Helper: Authorization header for a user id and role."""

    def _auth(user_id: int, role: Role) -> dict:
        return {"Authorization": f"Bearer {resolver.issue_token(user_id, role)}"}

    return _auth
