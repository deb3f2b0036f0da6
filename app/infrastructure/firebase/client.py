"""Process-wide Firestore client.

The service account comes from FIREBASE_SERVICE_ACCOUNT_KEY (inline JSON) or
FIREBASE_SERVICE_ACCOUNT_PATH; the inline key wins when both are set. The
client shares the application's httpx pool and is closed at shutdown.
"""

import json
import logging
from pathlib import Path
from typing import Any

import httpx

from app.core.config import Settings
from app.infrastructure.firebase._rest_client import (
    FirestoreRESTClient,
    _get_credentials,
)

logger = logging.getLogger(__name__)

_firestore_client: FirestoreRESTClient | None = None


class FirebaseConfigError(RuntimeError):
    """The service account settings do not describe a usable Firebase project."""


def load_service_account(settings: Settings) -> dict[str, Any]:
    """Service account JSON as a dict, with project_id checked."""
    inline = settings.firebase_service_account_key
    if inline is not None and inline.get_secret_value():
        try:
            info = json.loads(inline.get_secret_value())
        except json.JSONDecodeError as e:
            raise FirebaseConfigError("FIREBASE_SERVICE_ACCOUNT_KEY is not valid JSON") from e
    elif settings.firebase_service_account_path:
        path = Path(settings.firebase_service_account_path).expanduser().resolve()
        if not path.is_file():
            raise FirebaseConfigError(f"Service account file not found: {path}")
        info = json.loads(path.read_text(encoding="utf-8"))
    else:
        raise FirebaseConfigError("No Firebase service account configured")

    if not isinstance(info, dict) or not info.get("project_id"):
        raise FirebaseConfigError("Service account JSON has no project_id")
    return info


def init_firebase(settings: Settings, http_client: httpx.AsyncClient | None = None) -> FirestoreRESTClient:
    """Create the Firestore client once; later calls return the same instance."""
    global _firestore_client
    if _firestore_client is None:
        info = load_service_account(settings)
        _firestore_client = FirestoreRESTClient(
            info["project_id"], _get_credentials(info), http_client=http_client
        )
        logger.info("Firestore client ready for project %s", info["project_id"])
    return _firestore_client


def get_firestore_client() -> FirestoreRESTClient | None:
    return _firestore_client


async def close_firebase() -> None:
    """Release the Firestore client (its own pool only; a shared pool is closed by its owner)."""
    global _firestore_client
    client, _firestore_client = _firestore_client, None
    if client is not None:
        await client.aclose()
