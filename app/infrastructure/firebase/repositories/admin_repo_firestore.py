"""Firestore-backed admin record repository (implements IAdminRepository)."""

from __future__ import annotations

import logging
from typing import Any

from app.domain.entities import AdminRecord
from app.domain.enums import AdminRole
from app.domain.exceptions import RoleNotFoundError, ValidationException
from app.infrastructure.firebase._rest_client import FirestoreRESTClient
from app.infrastructure.firebase.collections import COLLECTION_ADMINS
from app.shared.utils.datetime import ensure_utc

logger = logging.getLogger(__name__)


def admin_to_document(admin: AdminRecord) -> dict[str, Any]:
    """Firestore fields for an admin record (document id is the uid)."""
    data: dict[str, Any] = {
        "email": admin.email,
        "role": admin.role.value,
        "disabled": admin.disabled,
    }
    if admin.organization_id:
        data["organizationId"] = admin.organization_id
    if admin.created_at:
        data["createdAt"] = admin.created_at
    return data


def admin_from_document(uid: str, data: dict[str, Any]) -> AdminRecord:
    """Build an AdminRecord from Firestore fields.

    Raises:
        RoleNotFoundError: the stored record is malformed (unknown role, or an
            organization reference that contradicts the role).
    """
    try:
        return AdminRecord(
            uid=uid,
            email=data.get("email", ""),
            role=AdminRole(data.get("role")),
            organization_id=data.get("organizationId") or None,
            disabled=bool(data.get("disabled", False)),
            created_at=ensure_utc(data.get("createdAt")),
        )
    except (ValueError, ValidationException) as e:
        logger.warning("Malformed admin record for uid %s: %s", uid, e)
        raise RoleNotFoundError(uid, reason="invalid_admin_record") from e


class FirestoreAdminRepository:
    """Admin records in the ``admins`` collection keyed by principal uid."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_ADMINS)

    async def get(self, uid: str) -> AdminRecord | None:
        """Return the admin record for uid, or None when absent."""
        doc = await self._coll.document(uid).get()
        if not doc:
            return None
        return admin_from_document(doc.id, doc.to_dict())
