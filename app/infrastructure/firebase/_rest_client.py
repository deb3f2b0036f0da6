"""Thin Firestore REST API client (no firebase-admin).

Uses google-auth for service account tokens and Firestore REST v1.
All HTTP calls use httpx.AsyncClient so they do not block the event loop.
Multi-document creates go through a single ``:commit`` with
``currentDocument.exists=false`` preconditions, so they land all-or-nothing.
Live document subscriptions are emulated by polling (the REST surface has no
listen stream).
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx

from app.infrastructure.firebase._rest_encoding import (
    decode_document,
    encode_document,
    encode_value,
)

logger = logging.getLogger(__name__)

_FIRESTORE_SCOPE = "https://www.googleapis.com/auth/datastore"
_BASE = "https://firestore.googleapis.com/v1"

# Error statuses Firestore uses when a create precondition fails.
_CONFLICT_STATUSES = frozenset({"ALREADY_EXISTS", "FAILED_PRECONDITION"})


def _get_credentials(key_dict: dict):
    """Return google.oauth2.service_account.Credentials for Firestore."""
    from google.oauth2 import service_account

    return service_account.Credentials.from_service_account_info(
        key_dict, scopes=[_FIRESTORE_SCOPE]
    )


def _get_access_token(credentials) -> str:
    from google.auth.transport.requests import Request

    if not credentials.valid:
        credentials.refresh(Request())
    return credentials.token


def _error_status(resp: httpx.Response) -> str | None:
    """Return the google.rpc status name of an error response (e.g. 'ALREADY_EXISTS')."""
    try:
        payload = resp.json()
    except ValueError:
        return None
    if isinstance(payload, list):
        payload = payload[0] if payload else {}
    error = payload.get("error") if isinstance(payload, dict) else None
    return error.get("status") if isinstance(error, dict) else None


async def _request_async(
    client: httpx.AsyncClient,
    url: str,
    method: str = "GET",
    body: dict | None = None,
    access_token: str | None = None,
) -> Any:
    """Perform async HTTP request to Firestore REST API. 404 returns None.

    Raises:
        DocumentExistsError: a create precondition failed (409, or 400 FAILED_PRECONDITION).
        httpx.HTTPStatusError: any other error status.
    """
    headers = {"Content-Type": "application/json"}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    if method == "GET":
        resp = await client.get(url, headers=headers)
    elif method == "POST":
        resp = await client.post(url, headers=headers, json=body)
    elif method == "DELETE":
        resp = await client.delete(url, headers=headers)
    else:
        raise ValueError(f"Unsupported method: {method!r}")
    if resp.status_code == 404:
        return None
    if resp.status_code == 409 or (
        resp.status_code == 400 and _error_status(resp) in _CONFLICT_STATUSES
    ):
        raise DocumentExistsError("Document already exists")
    if resp.status_code not in (200, 204):
        resp.raise_for_status()
    if method == "DELETE":
        return {}
    raw = resp.content
    return json.loads(raw.decode()) if raw else {}


class DocumentExistsError(Exception):
    """Raised when a create (exists=false precondition) hits an existing document."""


class DocumentSnapshot:
    """Snapshot of a document (id + data)."""

    def __init__(self, id_: str, data: dict):
        self.id = id_
        self._data = data

    def to_dict(self) -> dict:
        return self._data


class DocumentReference:
    """Reference to a single document; matches firestore API style."""

    def __init__(self, client: "FirestoreRESTClient", path: str):
        self._client = client
        self._path = path

    @property
    def id(self) -> str:
        return self._path.split("/")[-1]

    @property
    def path(self) -> str:
        """Full resource name (projects/.../documents/<collection>/<id>)."""
        return self._path

    async def get(self) -> DocumentSnapshot | None:
        """Fetch the document; returns None if not found."""
        url = f"{_BASE}/{self._path}"
        out = await _request_async(
            self._client._http, url, access_token=await self._client.get_token()
        )
        if not out:
            return None
        return DocumentSnapshot(self.id, decode_document(out.get("fields")))

    async def delete(self) -> None:
        """Delete the document. Idempotent if document is already missing (404)."""
        url = f"{_BASE}/{self._path}"
        await _request_async(
            self._client._http,
            url,
            method="DELETE",
            access_token=await self._client.get_token(),
        )

    def watch(
        self,
        callback: Callable[[DocumentSnapshot | None], None],
        interval: float = 5.0,
    ) -> Callable[[], None]:
        """Call callback with the current snapshot, then again whenever it changes.

        Polls every ``interval`` seconds. A failed poll (HTTP error, token
        refresh failure) is logged and retried on the next tick; the loop only
        ends when stopped. Returns a callable that stops watching.
        """

        async def _poll() -> None:
            delivered = False
            last: dict | None = None
            while True:
                try:
                    snapshot = await self.get()
                except Exception:
                    logger.warning("Watch poll failed for %s", self._path, exc_info=True)
                else:
                    data = snapshot.to_dict() if snapshot else None
                    if not delivered or data != last:
                        delivered, last = True, data
                        callback(snapshot)
                await asyncio.sleep(interval)

        task = asyncio.create_task(_poll())

        def _stop() -> None:
            task.cancel()

        return _stop


class _Query:
    """Single-filter query on a collection; runs via runQuery."""

    def __init__(
        self,
        client: "FirestoreRESTClient",
        parent: str,
        collection_id: str,
        *,
        where_field: str,
        where_value: Any,
    ):
        self._client = client
        self._parent = parent
        self._collection_id = collection_id
        self._where_field = where_field
        self._where_value = where_value
        self._limit: int = 100

    def limit(self, n: int) -> "_Query":
        self._limit = n
        return self

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        """Execute the query and yield document snapshots."""
        structured: dict[str, Any] = {
            "from": [{"collectionId": self._collection_id}],
            "where": {
                "fieldFilter": {
                    "field": {"fieldPath": self._where_field},
                    "op": "EQUAL",
                    "value": encode_value(self._where_value),
                }
            },
            "limit": self._limit,
        }
        url = f"{_BASE}/{self._parent}:runQuery"
        resp = await _request_async(
            self._client._http,
            url,
            method="POST",
            body={"structuredQuery": structured},
            access_token=await self._client.get_token(),
        )
        items = resp if isinstance(resp, list) else ([resp] if resp else [])
        for item in items:
            if "document" not in item:
                continue
            doc = item["document"]
            name = doc.get("name", "")
            doc_id = name.split("/")[-1] if name else ""
            yield DocumentSnapshot(doc_id, decode_document(doc.get("fields")))


class CollectionReference:
    """Reference to a collection; matches firestore API style."""

    def __init__(self, client: "FirestoreRESTClient", path: str):
        self._client = client
        self._path = path.rstrip("/")

    def document(self, document_id: str) -> DocumentReference:
        return DocumentReference(self._client, f"{self._path}/{document_id}")

    def where_equal(self, field: str, value: Any) -> _Query:
        """Start an equality query. Use .limit(), then .stream()."""
        parent = self._path.rsplit("/", 1)[0]
        collection_id = self._path.split("/")[-1]
        return _Query(
            self._client,
            parent,
            collection_id,
            where_field=field,
            where_value=value,
        )


class WriteBatch:
    """Creates applied atomically by one ``:commit`` call."""

    def __init__(self, client: "FirestoreRESTClient"):
        self._client = client
        self._writes: list[dict[str, Any]] = []

    def create(self, ref: DocumentReference, data: dict[str, Any]) -> "WriteBatch":
        """Queue a create; the whole commit fails if the document already exists."""
        self._writes.append(
            {
                "update": {"name": ref.path, **encode_document(data)},
                "currentDocument": {"exists": False},
            }
        )
        return self

    async def commit(self) -> None:
        """Apply all queued writes atomically.

        Raises:
            DocumentExistsError: at least one document already existed; nothing was written.
        """
        if not self._writes:
            return
        url = f"{_BASE}/{self._client._prefix}:commit"
        await _request_async(
            self._client._http,
            url,
            method="POST",
            body={"writes": self._writes},
            access_token=await self._client.get_token(),
        )
        self._writes = []


class FirestoreRESTClient:
    """Lightweight Firestore client using REST API (no firebase-admin)."""

    def __init__(
        self,
        project_id: str,
        credentials,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._project_id = project_id
        self._credentials = credentials
        self._prefix = f"projects/{project_id}/databases/(default)/documents"
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=30.0)
        self._owns_http = http_client is None

    async def aclose(self) -> None:
        """Close the HTTP client only if we created it (do not close injected client)."""
        if self._owns_http:
            await self._http.aclose()

    async def get_token(self) -> str:
        """Return a valid access token; refreshes in thread pool to avoid blocking."""
        return await asyncio.to_thread(_get_access_token, self._credentials)

    def collection(self, collection_id: str) -> CollectionReference:
        return CollectionReference(self, f"{self._prefix}/{collection_id}")

    def batch(self) -> WriteBatch:
        return WriteBatch(self)
