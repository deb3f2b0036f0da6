"""Firestore-backed organization repository (implements IOrganizationRepository)."""

from __future__ import annotations

import logging
from typing import Any

from app.application.interfaces.repositories import OrganizationListener, Unsubscribe
from app.domain.entities import Organization
from app.domain.exceptions import ValidationException
from app.infrastructure.firebase._rest_client import (
    DocumentSnapshot,
    FirestoreRESTClient,
)
from app.infrastructure.firebase.collections import (
    COLLECTION_ORGANIZATION_BINDINGS,
    COLLECTION_ORGANIZATIONS,
)

logger = logging.getLogger(__name__)

_KNOWN_FIELDS = frozenset({"name", "arcgisOrgId", "notifications"})


def organization_to_document(organization: Organization) -> dict[str, Any]:
    """Firestore fields for an organization (document id is the slug)."""
    data: dict[str, Any] = dict(organization.extra)
    data["name"] = organization.name
    data["notifications"] = list(organization.notifications)
    if organization.arcgis_org_id:
        data["arcgisOrgId"] = organization.arcgis_org_id
    return data


def organization_from_document(org_id: str, data: dict[str, Any]) -> Organization:
    """Build an Organization from Firestore fields; unknown fields go to ``extra``."""
    return Organization(
        id=org_id,
        name=data.get("name") or org_id,
        arcgis_org_id=data.get("arcgisOrgId") or None,
        notifications=list(data.get("notifications") or []),
        extra={k: v for k, v in data.items() if k not in _KNOWN_FIELDS},
    )


class FirestoreOrganizationRepository:
    """Organizations in the ``organizations`` collection keyed by slug."""

    def __init__(
        self, client: FirestoreRESTClient, watch_interval: float = 5.0
    ) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_ORGANIZATIONS)
        self._bindings = client.collection(COLLECTION_ORGANIZATION_BINDINGS)
        self._watch_interval = watch_interval

    async def get(self, organization_id: str) -> Organization | None:
        """Return organization by slug, or None."""
        doc = await self._coll.document(organization_id).get()
        if not doc:
            return None
        return organization_from_document(doc.id, doc.to_dict())

    async def exists(self, organization_id: str) -> bool:
        """Return whether an organization document with this slug exists."""
        return await self._coll.document(organization_id).get() is not None

    async def find_by_arcgis_org_id(self, arcgis_org_id: str) -> Organization | None:
        """Return the organization bound to a provider organization id.

        Checks the binding guard document first, then falls back to a field
        query for organizations created without a binding (e.g. by hand).
        """
        binding = await self._bindings.document(arcgis_org_id).get()
        if binding is not None:
            slug = binding.to_dict().get("organizationId")
            organization = await self.get(slug) if slug else None
            if organization is not None:
                return organization
            logger.warning(
                "Binding for provider organization points at missing tenant %s", slug
            )
        query = self._coll.where_equal("arcgisOrgId", arcgis_org_id).limit(1)
        async for snapshot in query.stream():
            return organization_from_document(snapshot.id, snapshot.to_dict())
        return None

    def subscribe(
        self, organization_id: str, listener: OrganizationListener
    ) -> Unsubscribe:
        """Live view of one organization (polling watch); listener gets None while missing."""

        def _deliver(snapshot: DocumentSnapshot | None) -> None:
            if snapshot is None:
                listener(None)
                return
            try:
                organization = organization_from_document(snapshot.id, snapshot.to_dict())
            except ValidationException:
                logger.warning("Malformed organization document %s", organization_id)
                organization = None
            listener(organization)

        return self._coll.document(organization_id).watch(
            _deliver, interval=self._watch_interval
        )
