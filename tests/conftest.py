import os
import uuid
from contextvars import ContextVar
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

# Environment must be in place before the app (and its settings) import.
os.environ.setdefault("PYTEST_RUNNING", "1")
os.environ.setdefault("JWT_SECRET", "franchisehub-test-secret-0123456789abcdef")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from franchisehub.api.main import app  # noqa: E402
from franchisehub.db import database as db_module  # noqa: E402
from franchisehub.db import models  # noqa: E402
from franchisehub.db.repositories import tenants as tenant_repo  # noqa: E402
from franchisehub.utils.config import get_settings  # noqa: E402
from franchisehub.utils.passwords import create_access_token, hash_password  # noqa: E402
from franchisehub.utils.roles import ROLE_MANAGER  # noqa: E402

get_settings.cache_clear()

DEFAULT_PASSWORD = "secret123"

_current_session: ContextVar[Optional[Session]] = ContextVar("franchisehub_test_session", default=None)
_global_session: Optional[Session] = None


@pytest.fixture(scope="session")
def _test_engine():
    """Engine for the run: in-memory SQLite, or a throwaway Postgres when TEST_POSTGRES_IMAGE is set."""
    image = os.getenv("TEST_POSTGRES_IMAGE")
    if not image:
        yield db_module.engine
        return

    from testcontainers.postgres import PostgresContainer

    container = PostgresContainer(image)
    container.start()
    url = container.get_connection_url()
    os.environ["TEST_DATABASE_URL"] = url
    engine = create_engine(url)
    try:
        yield engine
    finally:
        engine.dispose()
        container.stop()
        os.environ.pop("TEST_DATABASE_URL", None)


@pytest.fixture(autouse=True)
def db_session(_test_engine):
    """Fresh schema per test; the app's ``get_db`` yields this same session."""
    global _global_session
    models.Base.metadata.drop_all(bind=_test_engine)
    db_module.init_db(bind=_test_engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_test_engine)
    session = TestingSessionLocal()
    token = _current_session.set(session)
    _global_session = session
    try:
        yield session
    finally:
        _current_session.reset(token)
        _global_session = None
        session.close()
        models.Base.metadata.drop_all(bind=_test_engine)


def _override_get_db():
    # TestClient runs sync endpoints in a worker thread, where the ContextVar is unset
    session = _current_session.get() or _global_session
    if session is None:
        session = db_module.SessionLocal()
        try:
            yield session
        finally:
            session.close()
    else:
        yield session


app.dependency_overrides[db_module.get_db] = _override_get_db


@pytest.fixture
def db(db_session):
    return db_session


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def tenant_factory(db_session):
    def _make(name: Optional[str] = None):
        tenant = models.Tenant(name=name or f"Tenant {uuid.uuid4().hex[:6]}")
        db_session.add(tenant)
        db_session.commit()
        db_session.refresh(tenant)
        return tenant

    return _make


@pytest.fixture
def restaurant_factory(db_session):
    def _make(tenant, name: Optional[str] = None, city: Optional[str] = "Lyon"):
        return tenant_repo.create_restaurant(
            db_session, tenant_id=tenant.id, name=name or f"Resto {uuid.uuid4().hex[:6]}", city=city
        )

    return _make


@pytest.fixture
def user_factory(db_session):
    def _make(role: str = ROLE_MANAGER, tenant=None, restaurant=None, email: Optional[str] = None,
              password: str = DEFAULT_PASSWORD, is_active: bool = True):
        user = tenant_repo.create_user(
            db_session,
            email=email or f"{role}-{uuid.uuid4().hex[:8]}@example.com",
            password_hash=hash_password(password),
            role=role,
            tenant_id=tenant.id if tenant is not None else None,
            restaurant_id=restaurant.id if restaurant is not None else None,
        )
        if not is_active:
            user = tenant_repo.set_user_active(db_session, user, False)
        return user

    return _make


def auth_headers(user, **kwargs):
    return {"Authorization": f"Bearer {create_access_token(user, **kwargs)}"}


@pytest.fixture
def headers():
    return auth_headers
