"""Tenant provisioning: new organization + principal + admin record for a provider organization."""

from __future__ import annotations

import logging
from typing import Any

from app.application.dtos.identity import ProviderIdentity, ProvisioningResult
from app.application.interfaces.repositories import (
    IOrganizationRepository,
    ITenantWriter,
)
from app.application.interfaces.services import IAuthBackend
from app.application.services.credential_bridge import CredentialBridge
from app.application.services.provisioning_signal import ProvisioningSignal
from app.domain.entities import AdminRecord, Organization, Principal
from app.domain.enums import AdminRole
from app.domain.exceptions import (
    IdentityConflictError,
    ProvisioningPartialFailure,
    TenantDocumentConflict,
)
from app.domain.value_objects import TenantSlug
from app.shared.telemetry.tracing import add_span_event, traced
from app.shared.utils import sanitize_display_name, slugify, time_suffix, utc_now

logger = logging.getLogger(__name__)

_PERSONAL_ACCOUNT_MESSAGE = (
    "Personal ArcGIS accounts cannot create an organization. "
    "Sign up with an account that belongs to an ArcGIS organization."
)
_ALREADY_PROVISIONED_MESSAGE = (
    "Your ArcGIS organization already has an account. Sign in instead."
)


def suffixed_slug(slug: str) -> str:
    """Append a time-derived suffix, trimming the base so the result stays a valid slug."""
    suffix = time_suffix()
    base = slug[: TenantSlug.MAX_LENGTH - len(suffix) - 1].rstrip("-")
    return f"{base}-{suffix}" if base else suffix


class TenantProvisioner:
    """Creates the organization/profile/admin triad for a verified signup.

    Order: reject personal accounts, reject already-bound provider
    organizations, derive credentials, choose a slug, raise the provisioning
    signal, create the principal, commit all documents atomically. A commit
    that loses a race on the slug is retried once with a suffixed slug; one
    that loses on the provider binding becomes an identity conflict. When the
    principal was created but documents were not, the principal is deleted
    again (best effort) before the error surfaces.
    """

    def __init__(
        self,
        organizations: IOrganizationRepository,
        tenant_writer: ITenantWriter,
        auth: IAuthBackend,
        bridge: CredentialBridge,
        signal: ProvisioningSignal,
    ) -> None:
        self.organizations = organizations
        self.tenant_writer = tenant_writer
        self.auth = auth
        self.bridge = bridge
        self.signal = signal

    @traced("tenant.provision")
    async def provision(self, identity: ProviderIdentity) -> ProvisioningResult:
        """Provision a tenant for identity and leave its principal signed in.

        Raises:
            IdentityConflictError: personal account, provider organization
                already bound, or email already registered.
            ProvisioningPartialFailure: principal created, documents not committed.
        """
        if not identity.org_id:
            raise IdentityConflictError(
                _PERSONAL_ACCOUNT_MESSAGE, reason="personal_account"
            )
        if await self.organizations.find_by_arcgis_org_id(identity.org_id) is not None:
            logger.info("Signup rejected: provider organization already provisioned")
            raise IdentityConflictError(
                _ALREADY_PROVISIONED_MESSAGE, reason="organization_exists"
            )

        email, secret = self.bridge.credentials_for(identity)
        slug = await self._candidate_slug(identity)

        self.signal.begin()
        try:
            principal = await self.auth.create_principal(email, secret)
            add_span_event("principal.created")
            organization_id = await self._commit_documents(principal, identity, slug)
        except Exception:
            self.signal.fail()
            raise

        result = ProvisioningResult(
            uid=principal.uid,
            email=principal.email,
            organization_id=organization_id,
            arcgis_org_id=identity.org_id,
        )
        self.signal.complete(result)
        logger.info("Provisioned organization %s for uid %s", organization_id, principal.uid)
        return result

    async def _candidate_slug(self, identity: ProviderIdentity) -> str:
        slug = slugify(identity.org_name or identity.org_url_key or identity.org_id or "")
        if await self.organizations.exists(slug):
            slug = suffixed_slug(slug)
        return slug

    async def _commit_documents(
        self, principal: Principal, identity: ProviderIdentity, slug: str
    ) -> str:
        try:
            return await self._commit_with_retry(principal, identity, slug)
        except IdentityConflictError:
            await self._remove_principal(principal)
            raise
        except Exception as e:
            removed = await self._remove_principal(principal)
            raise ProvisioningPartialFailure(
                uid=principal.uid,
                organization_id=slug,
                principal_removed=removed,
            ) from e

    async def _commit_with_retry(
        self, principal: Principal, identity: ProviderIdentity, slug: str
    ) -> str:
        try:
            await self._commit(principal, identity, slug)
            return slug
        except TenantDocumentConflict:
            await self._reject_if_bound(identity.org_id)

        retry_slug = suffixed_slug(slug)
        logger.info("Slug %s taken at commit time; retrying as %s", slug, retry_slug)
        try:
            await self._commit(principal, identity, retry_slug)
        except TenantDocumentConflict:
            await self._reject_if_bound(identity.org_id)
            raise
        return retry_slug

    async def _commit(
        self, principal: Principal, identity: ProviderIdentity, slug: str
    ) -> None:
        organization, admin, profile = self._tenant_documents(principal, identity, slug)
        await self.tenant_writer.commit_tenant(organization, admin, profile)
        add_span_event("tenant.committed", {"slug": slug})

    async def _reject_if_bound(self, arcgis_org_id: str | None) -> None:
        if not arcgis_org_id:
            return
        if await self.organizations.find_by_arcgis_org_id(arcgis_org_id) is not None:
            logger.info("Provider organization was bound by a concurrent signup")
            raise IdentityConflictError(
                _ALREADY_PROVISIONED_MESSAGE, reason="organization_exists"
            )

    async def _remove_principal(self, principal: Principal) -> bool:
        """Delete the just-created principal. Returns False if that failed too."""
        try:
            await self.auth.delete_principal(principal)
        except Exception:
            logger.exception(
                "Could not remove principal %s after failed provisioning", principal.uid
            )
            return False
        logger.info("Removed principal %s after failed provisioning", principal.uid)
        return True

    @staticmethod
    def _tenant_documents(
        principal: Principal, identity: ProviderIdentity, slug: str
    ) -> tuple[Organization, AdminRecord, dict[str, Any]]:
        now = utc_now()
        extra: dict[str, Any] = {"createdAt": now}
        if identity.org_url_key:
            extra["arcgisUrlKey"] = identity.org_url_key
        organization = Organization(
            id=slug,
            name=sanitize_display_name(
                identity.org_name or identity.org_url_key or identity.org_id or slug
            )
            or slug,
            arcgis_org_id=identity.org_id,
            notifications=[],
            extra=extra,
        )
        admin = AdminRecord(
            uid=principal.uid,
            email=principal.email,
            role=AdminRole.ORG_ADMIN,
            organization_id=slug,
            disabled=False,
            created_at=now,
        )
        profile: dict[str, Any] = {
            "uid": principal.uid,
            "email": principal.email,
            "displayName": sanitize_display_name(identity.full_name or identity.username),
            "arcgisUsername": identity.username,
            "arcgisOrgId": identity.org_id,
            "organizationId": slug,
            "createdAt": now,
        }
        return organization, admin, profile
