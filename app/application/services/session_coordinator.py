"""Role resolver: the state machine an authenticated principal passes through.

LOADING -> UNAUTHENTICATED | PRINCIPAL_KNOWN
PRINCIPAL_KNOWN -> SUPER_ADMIN | ORG_ADMIN | ACCESS_DENIED

Resolution is driven by the authentication backend's principal-change
notifications, which fire independently of (and possibly before) a signup's
document writes. When the admin record is missing while a signup is in flight,
the resolver waits once for the provisioning outcome and re-reads exactly once.
"""

from __future__ import annotations

import asyncio
import logging

from app.application.dtos.session import SessionSnapshot
from app.application.interfaces.repositories import (
    IAdminRepository,
    IOrganizationRepository,
    Unsubscribe,
)
from app.application.interfaces.services import IAuthBackend
from app.application.services.provisioning_signal import ProvisioningSignal
from app.domain.entities import AdminRecord, Organization, Principal
from app.domain.enums import AdminRole, SessionState
from app.domain.exceptions import RoleNotFoundError

logger = logging.getLogger(__name__)

# Upper bound on the single race-recovery wait.
RACE_RECOVERY_DELAY_SECONDS = 3.0
# Upper bound on the first organization snapshot of an org admin.
ORGANIZATION_LOAD_TIMEOUT_SECONDS = 10.0


class SessionCoordinator:
    """Resolves one browser's principal into super admin, org admin or denied."""

    def __init__(
        self,
        auth: IAuthBackend,
        admins: IAdminRepository,
        organizations: IOrganizationRepository,
        signal: ProvisioningSignal,
    ) -> None:
        self.auth = auth
        self.admins = admins
        self.organizations = organizations
        self.signal = signal

        self._state = SessionState.LOADING
        self._principal: Principal | None = None
        self._admin: AdminRecord | None = None
        self._organization: Organization | None = None
        self._reason: str | None = None
        self._ready = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self._unsubscribe_auth: Unsubscribe | None = None
        self._unsubscribe_org: Unsubscribe | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def admin(self) -> AdminRecord | None:
        """Resolved admin record (SUPER_ADMIN or ORG_ADMIN states only)."""
        if self._state in (SessionState.SUPER_ADMIN, SessionState.ORG_ADMIN):
            return self._admin
        return None

    def start(self) -> None:
        """Subscribe to principal changes. The first notification leaves LOADING."""
        if self._unsubscribe_auth is None:
            self._unsubscribe_auth = self.auth.subscribe(self._on_principal_changed)

    async def wait_resolved(self, timeout: float) -> SessionState:
        """Wait up to timeout for a terminal state; return the current state either way."""
        if self._unsubscribe_auth is not None and _uid(self.auth.current_principal) != _uid(
            self._principal
        ):
            # A principal change is scheduled but not delivered yet.
            await asyncio.sleep(0)
        try:
            await asyncio.wait_for(self._ready.wait(), timeout)
        except asyncio.TimeoutError:
            logger.warning("Session not resolved within %.1fs (still %s)", timeout, self._state.value)
        return self._state

    async def snapshot(self, timeout: float) -> SessionSnapshot:
        """Wait for resolution, then return the session view.

        is_new_account is read once: only the first snapshot after a signup
        reports it.
        """
        state = await self.wait_resolved(timeout)
        principal = self._principal if state != SessionState.UNAUTHENTICATED else None
        admin = self.admin
        organization = self._organization if state == SessionState.ORG_ADMIN else None
        return SessionSnapshot(
            state=state,
            uid=principal.uid if principal else None,
            email=principal.email if principal else None,
            role=admin.role if admin else None,
            organization_id=admin.organization_id if admin else None,
            organization=_organization_view(organization),
            reason=self._reason if state == SessionState.ACCESS_DENIED else None,
            is_new_account=(
                state == SessionState.ORG_ADMIN and self.signal.consume_just_completed()
            ),
        )

    async def close(self) -> None:
        """Stop listening, cancel in-flight resolution and the organization subscription."""
        if self._unsubscribe_auth is not None:
            self._unsubscribe_auth()
            self._unsubscribe_auth = None
        await self._cancel_resolution()

    def _on_principal_changed(self, principal: Principal | None) -> None:
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()
        self._stop_organization_watch()
        self._principal = principal
        self._admin = None
        self._organization = None
        self._reason = None

        if principal is None:
            self._set_state(SessionState.UNAUTHENTICATED)
            return
        self._set_state(SessionState.PRINCIPAL_KNOWN)
        self._task = asyncio.create_task(self._resolve(principal))

    async def _resolve(self, principal: Principal) -> None:
        try:
            admin = await self._load_admin(principal.uid)
            self._admin = admin
            if admin.role == AdminRole.SUPER_ADMIN:
                self._set_state(SessionState.SUPER_ADMIN)
                return
            organization = await self._watch_organization(admin.organization_id or "")
            if organization is None:
                self._deny(principal.uid, "organization_missing")
            else:
                self._set_state(SessionState.ORG_ADMIN)
        except asyncio.TimeoutError:
            logger.warning(
                "Organization %s not loaded within %.1fs for uid %s",
                self._admin.organization_id if self._admin else None,
                ORGANIZATION_LOAD_TIMEOUT_SECONDS,
                principal.uid,
            )
            self._deny(principal.uid, "resolution_failed")
        except RoleNotFoundError as e:
            self._deny(principal.uid, e.details.get("reason", "no_admin_record"))
        except Exception:
            logger.exception("Role resolution failed for uid %s", principal.uid)
            self._deny(principal.uid, "resolution_failed")

    async def _load_admin(self, uid: str) -> AdminRecord:
        record = await self.admins.get(uid)
        if record is None and self.signal.in_flight:
            logger.info("No admin record for %s while a signup is in flight; waiting once", uid)
            await self.signal.wait(RACE_RECOVERY_DELAY_SECONDS)
            record = await self.admins.get(uid)
        if record is None:
            raise RoleNotFoundError(uid)
        if record.disabled:
            raise RoleNotFoundError(uid, reason="disabled")
        return record

    async def _watch_organization(self, organization_id: str) -> Organization | None:
        first: asyncio.Future[Organization | None] = (
            asyncio.get_running_loop().create_future()
        )

        def listener(organization: Organization | None) -> None:
            self._organization = organization
            if not first.done():
                first.set_result(organization)
            elif organization is None and self._state == SessionState.ORG_ADMIN:
                uid = self._principal.uid if self._principal else ""
                self._deny(uid, "organization_missing")

        self._unsubscribe_org = self.organizations.subscribe(organization_id, listener)
        return await asyncio.wait_for(first, ORGANIZATION_LOAD_TIMEOUT_SECONDS)

    def _deny(self, uid: str, reason: str) -> None:
        logger.info("Access denied for uid %s (%s)", uid, reason)
        self._stop_organization_watch()
        self._admin = None
        self._reason = reason
        self._set_state(SessionState.ACCESS_DENIED)

    def _set_state(self, state: SessionState) -> None:
        self._state = state
        if state.is_terminal:
            self._ready.set()
        else:
            self._ready.clear()

    def _stop_organization_watch(self) -> None:
        if self._unsubscribe_org is not None:
            self._unsubscribe_org()
            self._unsubscribe_org = None

    async def _cancel_resolution(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._stop_organization_watch()


def _uid(principal: Principal | None) -> str | None:
    return principal.uid if principal else None


def _organization_view(organization: Organization | None) -> dict | None:
    if organization is None:
        return None
    return {
        "id": organization.id,
        "name": organization.name,
        "arcgisOrgId": organization.arcgis_org_id,
        "notifications": list(organization.notifications),
    }
