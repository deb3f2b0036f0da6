"""Firebase integration: Firestore (REST) and Identity Toolkit."""

from app.infrastructure.firebase.client import (
    FirebaseConfigError,
    close_firebase,
    get_firestore_client,
    init_firebase,
    load_service_account,
)
from app.infrastructure.firebase.identity_toolkit import FirebaseAuthClient

__all__ = [
    "FirebaseAuthClient",
    "FirebaseConfigError",
    "close_firebase",
    "get_firestore_client",
    "init_firebase",
    "load_service_account",
]
