"""In-memory collaborators for unit and API tests.

InMemoryDocumentStore holds the admins / organizations / users / bindings
documents shared by the fake repositories and tenant writer. FakeAuthService
holds the accounts of the password backend; each browser gets its own
FakeAuthBackend bound to it. Every async method yields to the event loop at
least once so concurrent flows interleave as they would against the network.
"""

from __future__ import annotations

import asyncio
import copy
import itertools
from collections.abc import Callable
from dataclasses import dataclass, field

from app.application.dtos.identity import ProviderIdentity
from app.domain.entities import AdminRecord, Organization, Principal
from app.domain.enums import AdminRole, OAuthMode
from app.domain.exceptions import (
    AuthBackendError,
    AuthenticationException,
    IdentityConflictError,
    ProviderError,
    TenantDocumentConflict,
)


@dataclass
class InMemoryDocumentStore:
    admins: dict[str, AdminRecord] = field(default_factory=dict)
    organizations: dict[str, Organization] = field(default_factory=dict)
    users: dict[str, dict] = field(default_factory=dict)
    bindings: dict[str, str] = field(default_factory=dict)

    def add_super_admin(self, uid: str, email: str) -> AdminRecord:
        record = AdminRecord(uid=uid, email=email, role=AdminRole.SUPER_ADMIN)
        self.admins[uid] = record
        return record

    def add_organization(self, slug: str, name: str, arcgis_org_id: str | None = None) -> Organization:
        organization = Organization(id=slug, name=name, arcgis_org_id=arcgis_org_id)
        self.organizations[slug] = organization
        return organization


class FakeAdminRepository:
    def __init__(self, db: InMemoryDocumentStore) -> None:
        self.db = db
        self.get_calls = 0

    async def get(self, uid: str) -> AdminRecord | None:
        self.get_calls += 1
        await asyncio.sleep(0)
        record = self.db.admins.get(uid)
        return copy.deepcopy(record) if record else None


class FakeOrganizationRepository:
    def __init__(self, db: InMemoryDocumentStore) -> None:
        self.db = db
        self._listeners: dict[str, list[Callable]] = {}

    async def get(self, organization_id: str) -> Organization | None:
        await asyncio.sleep(0)
        organization = self.db.organizations.get(organization_id)
        return copy.deepcopy(organization) if organization else None

    async def exists(self, organization_id: str) -> bool:
        await asyncio.sleep(0)
        return organization_id in self.db.organizations

    async def find_by_arcgis_org_id(self, arcgis_org_id: str) -> Organization | None:
        await asyncio.sleep(0)
        slug = self.db.bindings.get(arcgis_org_id)
        if slug and slug in self.db.organizations:
            return copy.deepcopy(self.db.organizations[slug])
        for organization in self.db.organizations.values():
            if organization.arcgis_org_id == arcgis_org_id:
                return copy.deepcopy(organization)
        return None

    def subscribe(self, organization_id: str, listener: Callable) -> Callable[[], None]:
        listeners = self._listeners.setdefault(organization_id, [])
        listeners.append(listener)
        asyncio.get_running_loop().call_soon(self._deliver, organization_id, listener)

        def _unsubscribe() -> None:
            if listener in listeners:
                listeners.remove(listener)

        return _unsubscribe

    def subscriber_count(self, organization_id: str) -> int:
        return len(self._listeners.get(organization_id, []))

    def notify(self, organization_id: str) -> None:
        """Push the current document to every subscriber (simulates a remote edit)."""
        for listener in list(self._listeners.get(organization_id, [])):
            self._deliver(organization_id, listener)

    def _deliver(self, organization_id: str, listener: Callable) -> None:
        if listener not in self._listeners.get(organization_id, []):
            return
        organization = self.db.organizations.get(organization_id)
        listener(copy.deepcopy(organization) if organization else None)


class FakeTenantWriter:
    """Atomic create of all tenant documents; any existing document fails the whole commit."""

    def __init__(self, db: InMemoryDocumentStore) -> None:
        self.db = db
        self.commits: list[str] = []
        self.conflicts = 0
        self.fail_with: Exception | None = None
        self.gate: asyncio.Event | None = None

    async def commit_tenant(self, organization: Organization, admin: AdminRecord, profile: dict) -> None:
        await asyncio.sleep(0)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with
        taken = (
            organization.id in self.db.organizations
            or admin.uid in self.db.admins
            or admin.uid in self.db.users
            or (organization.arcgis_org_id or "") in self.db.bindings
        )
        if taken:
            self.conflicts += 1
            raise TenantDocumentConflict(organization.id)
        self.db.users[admin.uid] = dict(profile)
        self.db.organizations[organization.id] = copy.deepcopy(organization)
        self.db.admins[admin.uid] = copy.deepcopy(admin)
        if organization.arcgis_org_id:
            self.db.bindings[organization.arcgis_org_id] = organization.id
        self.commits.append(organization.id)


@dataclass
class _Account:
    uid: str
    email: str
    password: str


class FakeAuthService:
    """Accounts of the password backend, shared by all browsers."""

    def __init__(self) -> None:
        self.accounts: dict[str, _Account] = {}
        self._ids = itertools.count(1)
        self.create_calls = 0
        self.sign_in_calls = 0
        self.delete_calls = 0
        self.fail_delete = False

    def backend(self) -> "FakeAuthBackend":
        return FakeAuthBackend(self)

    def add_account(self, email: str, password: str) -> str:
        uid = f"uid-{next(self._ids)}"
        self.accounts[email] = _Account(uid, email, password)
        return uid


class FakeAuthBackend:
    """Authentication state of one browser; listeners are scheduled with call_soon."""

    def __init__(self, service: FakeAuthService) -> None:
        self.service = service
        self._principal: Principal | None = None
        self._listeners: list[Callable] = []

    @property
    def current_principal(self) -> Principal | None:
        return self._principal

    async def create_principal(self, email: str, password: str) -> Principal:
        self.service.create_calls += 1
        await asyncio.sleep(0)
        if email in self.service.accounts:
            raise IdentityConflictError("Email already registered", reason="email_registered")
        uid = self.service.add_account(email, password)
        principal = Principal(uid=uid, email=email, id_token=f"token-{uid}")
        self._set(principal)
        return principal

    async def sign_in(self, email: str, password: str) -> Principal:
        self.service.sign_in_calls += 1
        await asyncio.sleep(0)
        account = self.service.accounts.get(email)
        if account is None or account.password != password:
            raise AuthenticationException("No account is linked to this ArcGIS identity; sign up first.")
        principal = Principal(uid=account.uid, email=email, id_token=f"token-{account.uid}")
        self._set(principal)
        return principal

    async def delete_principal(self, principal: Principal) -> None:
        self.service.delete_calls += 1
        await asyncio.sleep(0)
        if self.service.fail_delete:
            raise AuthBackendError("delete_principal", "unavailable")
        self.service.accounts.pop(principal.email, None)
        if self._principal and self._principal.uid == principal.uid:
            self._set(None)

    def sign_out(self) -> None:
        self._set(None)

    def subscribe(self, listener: Callable) -> Callable[[], None]:
        self._listeners.append(listener)
        asyncio.get_running_loop().call_soon(self._dispatch, listener, self._principal)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _set(self, principal: Principal | None) -> None:
        self._principal = principal
        loop = asyncio.get_running_loop()
        for listener in list(self._listeners):
            loop.call_soon(self._dispatch, listener, principal)

    def _dispatch(self, listener: Callable, principal: Principal | None) -> None:
        if listener in self._listeners:
            listener(principal)


class FakeIdentityProvider:
    """Maps authorization codes to provider identities."""

    def __init__(self) -> None:
        self.identities: dict[str, ProviderIdentity] = {}
        self.complete_calls: list[tuple[str, str | None]] = []

    def authorization_url(self, state: str, mode: OAuthMode, client_id: str | None = None) -> str:
        return (
            f"https://arcgis.test/sharing/rest/oauth2/authorize"
            f"?client_id={client_id or 'portal-app'}&state={state}&mode={OAuthMode(mode).value}"
        )

    async def complete(self, code: str, client_id: str | None = None) -> ProviderIdentity:
        self.complete_calls.append((code, client_id))
        await asyncio.sleep(0)
        identity = self.identities.get(code)
        if identity is None:
            raise ProviderError("token_exchange", status_code=400)
        return identity


async def wait_until(predicate: Callable[[], bool], attempts: int = 200) -> None:
    """Yield to the event loop until predicate holds (fails the test otherwise)."""
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


JDOE = ProviderIdentity(
    username="jdoe",
    email="jdoe@acme.gov",
    full_name="Jane Doe",
    org_id="org_1",
    org_name="Acme County",
)
