"""
Shared test fixtures.

Sets up an isolated SQLite database so tests never touch the
real database. Tables are created before each test and dropped
after it, so every test starts clean.
"""

import os

# Settings are read once and cached, so the test environment has
# to be in place before anything from donation_tracker is imported.
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["ENVIRONMENT"] = "test"
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["EMAIL_ENCRYPTION_SECRET"] = "test-email-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from donation_tracker.api.rate_limit import limiter
from donation_tracker.main import app
from donation_tracker.models import Admin, AdminRole, Campaign
from donation_tracker.models.base import Base, get_db
from donation_tracker.security.passwords import hash_password
from donation_tracker.security.tokens import create_access_token
from donation_tracker.services.cache import ReadCache, get_cache


TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)

DEFAULT_PASSWORD = "Str0ng!Passw0rd"


@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def cache():
    return ReadCache()


@pytest.fixture
def client(db_session, cache):
    """
    Test client wired to the test session and a fresh cache.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache] = lambda: cache
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def rate_limits():
    """Switch the request limiter on with empty counters."""
    limiter.reset()
    limiter.enabled = True
    yield limiter
    limiter.enabled = False
    limiter.reset()


# --- Factories ---

@pytest.fixture
def make_admin(db_session):
    def factory(
        email="admin@example.com",
        password=DEFAULT_PASSWORD,
        role=AdminRole.ADMIN,
        is_active=True,
        full_name="Test Admin",
    ):
        admin = Admin(
            email=email,
            password_hash=hash_password(password),
            full_name=full_name,
            role=role,
            is_active=is_active,
        )
        db_session.add(admin)
        db_session.commit()
        return admin

    return factory


@pytest.fixture
def make_campaign(db_session):
    def factory(title="Winter shelter", goal_amount="10000.00", is_active=True):
        campaign = Campaign(
            title=title,
            description="Warm beds and hot meals for the winter months.",
            goal_amount=goal_amount,
            is_active=is_active,
        )
        db_session.add(campaign)
        db_session.commit()
        return campaign

    return factory


def token_for(admin: Admin) -> str:
    return create_access_token({
        "id": admin.id,
        "email": admin.email,
        "full_name": admin.full_name,
        "role": admin.role.value,
    })


def auth_header(admin: Admin) -> dict:
    return {"Authorization": f"Bearer {token_for(admin)}"}


@pytest.fixture
def admin(make_admin):
    return make_admin()


@pytest.fixture
def super_admin(make_admin):
    return make_admin(
        email="root@example.com",
        role=AdminRole.SUPER_ADMIN,
        full_name="Root",
    )


@pytest.fixture
def admin_headers(admin):
    return auth_header(admin)


@pytest.fixture
def super_headers(super_admin):
    return auth_header(super_admin)
