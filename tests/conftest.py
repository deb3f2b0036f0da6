"""Pytest configuration and fixtures for the portal identity service.

Required settings are set in the environment before app.main is imported
(create_app resolves settings at import). HTTP tests run against app.main:app
through ASGITransport with an in-memory service container; the lifespan
(which would build the Firestore-backed container) is not run.
"""

import os

os.environ.setdefault("ARCGIS_CLIENT_ID", "portal-app")
os.environ.setdefault("FIREBASE_API_KEY", "test-api-key")
os.environ.setdefault("FIREBASE_SERVICE_ACCOUNT_KEY", '{"project_id": "test-project"}')
os.environ.setdefault("CREDENTIAL_BRIDGE_KEY", "test-credential-bridge-key-0123456789abcdef")
os.environ.setdefault("SESSION_COOKIE_SECURE", "false")
os.environ.setdefault("PORTAL_BASE_URL", "http://portal.test")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.application.services import CredentialBridge  # noqa: E402
from app.core.container import ServiceContainer  # noqa: E402
from app.core.limiter import limiter  # noqa: E402
from app.infrastructure.session.registry import BrowserSessionRegistry  # noqa: E402
from app.main import app  # noqa: E402
from tests.fakes import (  # noqa: E402
    FakeAdminRepository,
    FakeAuthService,
    FakeIdentityProvider,
    FakeOrganizationRepository,
    FakeTenantWriter,
    InMemoryDocumentStore,
)

TEST_BRIDGE_KEY = os.environ["CREDENTIAL_BRIDGE_KEY"]
BASE_URL = "http://portal.test"


@pytest.fixture
def db() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def admins(db: InMemoryDocumentStore) -> FakeAdminRepository:
    return FakeAdminRepository(db)


@pytest.fixture
def organizations(db: InMemoryDocumentStore) -> FakeOrganizationRepository:
    return FakeOrganizationRepository(db)


@pytest.fixture
def tenant_writer(db: InMemoryDocumentStore) -> FakeTenantWriter:
    return FakeTenantWriter(db)


@pytest.fixture
def auth_service() -> FakeAuthService:
    return FakeAuthService()


@pytest.fixture
def provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def bridge() -> CredentialBridge:
    return CredentialBridge(TEST_BRIDGE_KEY, "arcgis.users.invalid")


@pytest.fixture
async def container(
    admins: FakeAdminRepository,
    organizations: FakeOrganizationRepository,
    tenant_writer: FakeTenantWriter,
    auth_service: FakeAuthService,
    provider: FakeIdentityProvider,
    bridge: CredentialBridge,
) -> ServiceContainer:
    """Service container wired with in-memory collaborators."""
    container = ServiceContainer(
        admins=admins,
        organizations=organizations,
        tenant_writer=tenant_writer,
        identity_provider=provider,
        bridge=bridge,
        sessions=BrowserSessionRegistry(
            auth_factory=auth_service.backend,
            admins=admins,
            organizations=organizations,
            ttl_seconds=3600,
        ),
    )
    yield container
    await container.aclose()


@pytest.fixture
async def client(container: ServiceContainer) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI), acting as one browser."""
    app.state.container = container
    limiter.enabled = False
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url=BASE_URL) as ac:
        yield ac
    app.state.container = None
    limiter.enabled = True


@pytest.fixture
async def second_browser(client: AsyncClient) -> AsyncClient:
    """Another browser (separate cookie jar) against the same app and container."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url=BASE_URL) as ac:
        yield ac
