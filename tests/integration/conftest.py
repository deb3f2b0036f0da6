"""Recording mock transport for the REST-backed infrastructure."""

import json
from collections.abc import Callable
from types import SimpleNamespace

import httpx
import pytest

from app.infrastructure.firebase._rest_client import FirestoreRESTClient

PREFIX = "projects/test-project/databases/(default)/documents"


class RecordingTransport:
    """Routes requests to a handler and keeps every request for assertions."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.handler: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(404)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def json_bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests if r.content]


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
async def http_client(transport: RecordingTransport):
    async with httpx.AsyncClient(transport=httpx.MockTransport(transport)) as client:
        yield client


@pytest.fixture
def firestore(http_client: httpx.AsyncClient) -> FirestoreRESTClient:
    credentials = SimpleNamespace(valid=True, token="test-token")
    return FirestoreRESTClient("test-project", credentials, http_client=http_client)


def document(path: str, fields: dict) -> dict:
    return {"name": f"{PREFIX}/{path}", "fields": fields}
