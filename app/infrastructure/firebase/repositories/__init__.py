"""Firestore-backed repository implementations."""

from app.infrastructure.firebase.repositories.admin_repo_firestore import (
    FirestoreAdminRepository,
)
from app.infrastructure.firebase.repositories.organization_repo_firestore import (
    FirestoreOrganizationRepository,
)

__all__ = [
    "FirestoreAdminRepository",
    "FirestoreOrganizationRepository",
]
