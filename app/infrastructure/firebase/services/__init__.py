"""Firestore-backed services."""

from app.infrastructure.firebase.services.tenant_writer_firestore import (
    FirestoreTenantWriter,
)

__all__ = ["FirestoreTenantWriter"]
