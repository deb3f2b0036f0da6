"""Firestore-backed tenant writer (implements ITenantWriter)."""

from __future__ import annotations

import logging
from typing import Any

from app.domain.entities import AdminRecord, Organization
from app.domain.exceptions import TenantDocumentConflict
from app.infrastructure.firebase._rest_client import (
    DocumentExistsError,
    FirestoreRESTClient,
)
from app.infrastructure.firebase.collections import (
    COLLECTION_ADMINS,
    COLLECTION_ORGANIZATION_BINDINGS,
    COLLECTION_ORGANIZATIONS,
    COLLECTION_USERS,
)
from app.infrastructure.firebase.repositories.admin_repo_firestore import (
    admin_to_document,
)
from app.infrastructure.firebase.repositories.organization_repo_firestore import (
    organization_to_document,
)

logger = logging.getLogger(__name__)


class FirestoreTenantWriter:
    """Writes a new tenant's documents in one atomic commit.

    The commit creates the user profile, the organization, the admin record
    and, when the organization is bound to a provider organization, the
    binding guard document. Every write carries an exists=false precondition,
    so a concurrent signup for the same slug or provider organization makes
    the whole commit fail with nothing written.
    """

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client

    async def commit_tenant(
        self,
        organization: Organization,
        admin: AdminRecord,
        profile: dict[str, Any],
    ) -> None:
        batch = self._client.batch()
        batch.create(
            self._client.collection(COLLECTION_USERS).document(admin.uid), profile
        )
        batch.create(
            self._client.collection(COLLECTION_ORGANIZATIONS).document(organization.id),
            organization_to_document(organization),
        )
        batch.create(
            self._client.collection(COLLECTION_ADMINS).document(admin.uid),
            admin_to_document(admin),
        )
        if organization.arcgis_org_id:
            batch.create(
                self._client.collection(COLLECTION_ORGANIZATION_BINDINGS).document(
                    organization.arcgis_org_id
                ),
                {"organizationId": organization.id, "uid": admin.uid},
            )
        try:
            await batch.commit()
        except DocumentExistsError:
            logger.info("Tenant commit for %s hit an existing document", organization.id)
            raise TenantDocumentConflict(organization.id) from None
        logger.info("Committed tenant documents for %s", organization.id)
