"""
Pytest configuration and shared fixtures.

Every test gets its own in-memory SQLite database, a fakeredis-backed
LockService and Celery running tasks eagerly, so no Postgres, Redis or
broker is needed.
"""

import os

# must be set before storefront.* builds its engine
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from decimal import Decimal

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.api.deps import get_lock_service
from storefront.celery_worker import celery_app
from storefront.data.database import get_db, init_db
from storefront.data.models import ProductModel, UserModel
from storefront.main import create_app
from storefront.services.lock_service import LockService


# ============================================================================
# Database
# ============================================================================

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.rollback()
    session.close()


# ============================================================================
# Redis / Celery
# ============================================================================

@pytest.fixture
def redis_server():
    return fakeredis.FakeServer()


@pytest.fixture
def redis_client(redis_server):
    client = fakeredis.FakeRedis(server=redis_server, decode_responses=True)
    yield client
    client.close()


@pytest.fixture
def lock_service(redis_client):
    return LockService(client=redis_client, ttl=30, wait_seconds=0.5)


@pytest.fixture(autouse=True)
def eager_celery():
    celery_app.conf.task_always_eager = True
    yield
    celery_app.conf.task_always_eager = False


# ============================================================================
# Data factories
# ============================================================================

@pytest.fixture
def make_user(db):
    def _make(name="Customer", role="customer", is_active=True, email=None):
        user = UserModel(name=name, role=role, is_active=is_active, email=email)
        db.add(user)
        db.commit()
        return user
    return _make


@pytest.fixture
def make_product(db):
    def _make(name="Product", price="10.00", discount="0", quantity=5, status="active"):
        product = ProductModel(
            name=name,
            price=Decimal(price),
            discount=Decimal(discount),
            quantity=quantity,
            status=status,
        )
        db.add(product)
        db.commit()
        return product
    return _make


@pytest.fixture
def customer(make_user):
    return make_user(name="Alice", email="alice@example.com")


@pytest.fixture
def admin(make_user):
    return make_user(name="Admin", role="admin", email="admin@example.com")


# ============================================================================
# HTTP
# ============================================================================

@pytest.fixture
def app(session_factory, lock_service):
    app = create_app(with_lifespan=False)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_lock_service] = lambda: lock_service
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth():
    """Headers the upstream identity layer would forward for a user."""
    def _headers(user) -> dict:
        return {"X-User-Id": str(user.id)}
    return _headers
