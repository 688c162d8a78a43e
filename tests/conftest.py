"""
Test configuration and fixtures.

Provides:
- Isolated in-memory SQLite database per test
- Profiles per role and matching UserSession contexts
- HTTPX AsyncClient with session cookie and CSRF header
"""
import os
import uuid
from contextlib import asynccontextmanager
from typing import Generator

from cryptography.fernet import Fernet

# Settings are read at import time; configure before importing the app
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DATA_ENCRYPTION_KEY", Fernet.generate_key().decode())
os.environ.setdefault("ENV", "test")

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from casework.core.deps import COOKIE_NAME, get_db
from casework.core.security import create_session_token
from casework.db.base import Base
import casework.db.models  # noqa: F401
from casework.db.enums import Role
from casework.db.models import Profile
from casework.db.session import enable_sqlite_savepoints
from casework.main import app
from casework.schemas.auth import UserSession
from casework.services import cache_service


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def engine():
    """
    Fresh in-memory database per test, with the same SAVEPOINT handling
    as the application engine.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    enable_sqlite_savepoints(engine)

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(engine) -> Generator[Session, None, None]:
    """Session bound to the per-test database."""
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def clear_client_cache():
    """Cached client lists never leak between tests."""
    cache_service.client_list_cache.clear()
    yield
    cache_service.client_list_cache.clear()


# =============================================================================
# Profile / Session Fixtures
# =============================================================================

def make_profile(
    db: Session,
    role: Role,
    email: str | None = None,
    first_name: str | None = None,
    last_name: str = "Tester",
) -> Profile:
    profile = Profile(
        id=uuid.uuid4(),
        email=email or f"{role.value}-{uuid.uuid4().hex[:8]}@test.com",
        first_name=first_name or role.value.replace("_", " ").title(),
        last_name=last_name,
        role=role.value,
        is_active=True,
        token_version=1,
    )
    db.add(profile)
    db.commit()
    return profile


def session_for(profile: Profile) -> UserSession:
    return UserSession(
        user_id=profile.id,
        role=Role(profile.role),
        email=profile.email,
        display_name=profile.full_name,
    )


@pytest.fixture
def admin_profile(db: Session) -> Profile:
    return make_profile(db, Role.ADMIN, first_name="Ada")


@pytest.fixture
def staff_profile(db: Session) -> Profile:
    return make_profile(db, Role.STAFF, first_name="Sam")


@pytest.fixture
def case_manager_profile(db: Session) -> Profile:
    return make_profile(db, Role.CASE_MANAGER, first_name="Casey", last_name="Manager")


@pytest.fixture
def volunteer_profile(db: Session) -> Profile:
    return make_profile(db, Role.VOLUNTEER, first_name="Val")


@pytest.fixture
def client_profile(db: Session) -> Profile:
    return make_profile(db, Role.CLIENT, first_name="Pat", last_name="Portal")


@pytest.fixture
def staff_session(staff_profile: Profile) -> UserSession:
    return session_for(staff_profile)


@pytest.fixture
def admin_session(admin_profile: Profile) -> UserSession:
    return session_for(admin_profile)


# =============================================================================
# Payload Fixtures
# =============================================================================

def intake_payload(**participant_overrides) -> dict:
    """Valid camelCase intake payload as posted by the intake form."""
    participant = {
        "firstName": "Jordan",
        "lastName": "Rivera",
        "email": "jordan.rivera@example.com",
        "primaryPhone": "(555) 123-4567",
        "dateOfBirth": "1990-04-12",
        "streetAddress": "12 Main St",
        "city": "Springfield",
        "state": "CA",
        "zipCode": "90210",
    }
    participant.update(participant_overrides)
    return {
        "participantDetails": participant,
        "emergencyContacts": [
            {"name": "Alex Rivera", "relationship": "Sibling", "phone": "555-222-3333"},
            {"name": "Morgan Lee", "relationship": "Friend", "phone": "555-444-5555", "email": ""},
        ],
        "caseManagement": {
            "clientStatus": "active",
            "housingStatus": "unhoused",
            "primaryLanguage": "Spanish",
            "viSpdatScore": 8,
            "healthInsurance": "yes",
            "nonCashBenefits": ["SNAP"],
        },
        "demographics": {
            "race": ["Hispanic/Latino"],
            "genderIdentity": "Non-binary",
            "monthlyIncome": "$1,200",
            "veteranStatus": False,
        },
        "household": {
            "members": [
                {"name": "Riley Ann Rivera", "relationship": "Child", "dateOfBirth": "2015-06-01"},
            ],
        },
    }


# =============================================================================
# Client Fixtures
# =============================================================================

@asynccontextmanager
async def api_client(db: Session, profile: Profile | None = None):
    """
    AsyncClient bound to the test database.

    With a profile, the client carries that profile's session cookie.
    """
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    cookies = {}
    if profile is not None:
        cookies[COOKIE_NAME] = create_session_token(
            user_id=profile.id,
            role=profile.role,
            token_version=profile.token_version,
        )

    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
            cookies=cookies,
            headers={"X-Requested-With": "XMLHttpRequest"},  # CSRF header
        ) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def client(db: Session):
    """Unauthenticated AsyncClient for public endpoints."""
    async with api_client(db) as c:
        yield c


@pytest.fixture(scope="function")
async def staff_client(db: Session, staff_profile: Profile):
    async with api_client(db, staff_profile) as c:
        yield c


@pytest.fixture(scope="function")
async def admin_client(db: Session, admin_profile: Profile):
    async with api_client(db, admin_profile) as c:
        yield c
