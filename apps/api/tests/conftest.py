"""
Test configuration and fixtures.

Provides:
- In-memory SQLite database built from the ORM metadata (fresh per test)
- Organization and entity client fixtures
- HTTPX AsyncClient per role with session and CSRF headers
"""
import os
import uuid
from typing import AsyncGenerator, Callable, Generator

# Settings are read at import time
os.environ["TESTING"] = "1"
os.environ["DEV_BYPASS_AUTH"] = "False"
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from flock.core.deps import get_db
from flock.db.base import Base
from flock.db.enums import FieldType, Role
from flock.db.models import Organization
from flock.main import app
from flock.schemas.profile_field import ProfileFieldCreate
from flock.services import profile_field_service
from flock.services.entity_client import EntityClients, get_entity_clients, require


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(scope="function")
def test_org(db: Session) -> Organization:
    """Create a test organization."""
    org = Organization(
        id=uuid.uuid4(),
        name="Test Church",
        slug=f"test-church-{uuid.uuid4().hex[:8]}",
    )
    db.add(org)
    db.commit()
    return org


@pytest.fixture(scope="function")
def clients(db: Session, test_org: Organization) -> EntityClients:
    return get_entity_clients(db, test_org.id)


# =============================================================================
# Data Factories
# =============================================================================

@pytest.fixture
def make_person(clients: EntityClients) -> Callable:
    def _make(first_name: str = "Ada", last_name: str = "Lovelace", **kwargs):
        return require(
            clients.people.create({"first_name": first_name, "last_name": last_name, **kwargs})
        )
    return _make


@pytest.fixture
def make_field(clients: EntityClients) -> Callable:
    def _make(label: str, type: FieldType = FieldType.TEXT, **kwargs):
        return profile_field_service.create_field(
            clients.profile_fields, ProfileFieldCreate(label=label, type=type, **kwargs)
        )
    return _make


@pytest.fixture
def make_tag(clients: EntityClients) -> Callable:
    def _make(name: str, **kwargs):
        return require(clients.tags.create({"name": name, **kwargs}))
    return _make


# =============================================================================
# Client Fixtures
# =============================================================================

USER_ID = uuid.UUID("00000000-0000-0000-0000-0000000000aa")


def session_headers(org: Organization, role: Role | str, csrf: bool = True) -> dict[str, str]:
    headers = {
        "X-Org-Id": str(org.id),
        "X-User-Id": str(USER_ID),
        "X-Role": role.value if isinstance(role, Role) else role,
    }
    if csrf:
        headers["X-Requested-With"] = "XMLHttpRequest"  # CSRF header
    return headers


@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient without session headers."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


async def _role_client(db: Session, org: Organization, role: Role):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    return AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=session_headers(org, role),
    )


@pytest.fixture(scope="function")
async def admin_client(db: Session, test_org: Organization) -> AsyncGenerator[AsyncClient, None]:
    async with await _role_client(db, test_org, Role.ADMIN) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def member_client(db: Session, test_org: Organization) -> AsyncGenerator[AsyncClient, None]:
    async with await _role_client(db, test_org, Role.MEMBER) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def viewer_client(db: Session, test_org: Organization) -> AsyncGenerator[AsyncClient, None]:
    async with await _role_client(db, test_org, Role.VIEWER) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def headers_for(test_org: Organization) -> Callable:
    """Session headers for the test organization and a given role."""
    def _headers(role: Role | str, csrf: bool = True) -> dict[str, str]:
        return session_headers(test_org, role, csrf=csrf)
    return _headers
