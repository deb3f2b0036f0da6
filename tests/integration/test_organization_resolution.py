"""Role resolution against the Firestore repositories when the organization read fails."""

import httpx
import pytest

from app.application.services import session_coordinator
from app.application.services.provisioning_signal import ProvisioningSignal
from app.application.services.session_coordinator import SessionCoordinator
from app.domain.enums import SessionState
from app.infrastructure.firebase.repositories import (
    FirestoreAdminRepository,
    FirestoreOrganizationRepository,
)
from tests.integration.conftest import document

ADMIN_FIELDS = {
    "email": {"stringValue": "jdoe@acme.gov"},
    "role": {"stringValue": "org_admin"},
    "organizationId": {"stringValue": "acme-county"},
}


@pytest.fixture
async def signed_in_coordinator(firestore, auth_service, monkeypatch):
    monkeypatch.setattr(session_coordinator, "ORGANIZATION_LOAD_TIMEOUT_SECONDS", 0.2)
    uid = auth_service.add_account("jdoe@acme.gov", "pw")
    backend = auth_service.backend()
    await backend.sign_in("jdoe@acme.gov", "pw")
    coordinator = SessionCoordinator(
        backend,
        FirestoreAdminRepository(firestore),
        FirestoreOrganizationRepository(firestore, watch_interval=0.01),
        ProvisioningSignal({}),
    )
    yield coordinator, uid
    await coordinator.close()


def _admin_or(uid: str, organization_response):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith(f"/admins/{uid}"):
            return httpx.Response(200, json=document(f"admins/{uid}", ADMIN_FIELDS))
        return organization_response(request)

    return handler


async def test_unavailable_organization_denies_instead_of_hanging(
    signed_in_coordinator, transport
) -> None:
    coordinator, uid = signed_in_coordinator
    transport.handler = _admin_or(
        uid, lambda request: httpx.Response(503, json={"error": {"status": "UNAVAILABLE"}})
    )
    coordinator.start()

    snapshot = await coordinator.snapshot(2.0)

    assert snapshot.state == SessionState.ACCESS_DENIED
    assert snapshot.reason == "resolution_failed"
    assert snapshot.organization is None


async def test_organization_watch_recovers_from_non_http_failure(
    signed_in_coordinator, transport
) -> None:
    coordinator, uid = signed_in_coordinator
    calls = {"n": 0}

    def organization(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        if calls["n"] == 1:
            raise RuntimeError("token refresh failed")
        return httpx.Response(
            200,
            json=document("organizations/acme-county", {"name": {"stringValue": "Acme County"}}),
        )

    transport.handler = _admin_or(uid, organization)
    coordinator.start()

    snapshot = await coordinator.snapshot(2.0)

    assert snapshot.state == SessionState.ORG_ADMIN
    assert snapshot.organization["name"] == "Acme County"
    assert calls["n"] >= 2
