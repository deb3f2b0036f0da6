"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference domain entities only; no infrastructure imports.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

from app.domain.entities import AdminRecord, Organization

Unsubscribe = Callable[[], None]
OrganizationListener = Callable[["Organization | None"], None]


# Admin record repository interface
class IAdminRepository(Protocol):
    """Protocol for admin records keyed by principal uid."""

    async def get(self, uid: str) -> AdminRecord | None:
        """Return the admin record for uid, or None when absent."""


# Organization repository interface
class IOrganizationRepository(Protocol):
    """Protocol for organizations keyed by tenant slug."""

    async def get(self, organization_id: str) -> Organization | None:
        """Return organization by slug, or None."""

    async def exists(self, organization_id: str) -> bool:
        """Return whether an organization document with this slug exists."""

    async def find_by_arcgis_org_id(self, arcgis_org_id: str) -> Organization | None:
        """Return the organization bound to a provider organization id, or None."""

    def subscribe(
        self, organization_id: str, listener: OrganizationListener
    ) -> Unsubscribe:
        """Deliver the current organization snapshot and every later change to listener.

        listener receives None while the document does not exist. Returns a
        callable that stops the subscription.
        """


# Tenant writer interface
class ITenantWriter(Protocol):
    """Protocol for committing the documents of a new tenant."""

    async def commit_tenant(
        self,
        organization: Organization,
        admin: AdminRecord,
        profile: dict[str, Any],
    ) -> None:
        """Atomically create profile, organization, admin record and provider binding.

        Raises TenantDocumentConflict if any of the documents already exists;
        in that case nothing is written.
        """
