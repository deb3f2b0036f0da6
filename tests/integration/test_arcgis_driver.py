"""ArcGISOAuthDriver against a mocked ArcGIS portal."""

from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from app.domain.enums import OAuthMode
from app.domain.exceptions import ProviderError
from app.infrastructure.external.arcgis import ArcGISOAuthDriver

PORTAL = "https://www.arcgis.test"


@pytest.fixture
def driver(http_client) -> ArcGISOAuthDriver:
    return ArcGISOAuthDriver(
        http_client,
        portal_url=PORTAL + "/",
        client_id="portal-app",
        redirect_uri="http://portal.test/",
    )


def _portal(org_response: httpx.Response | None = None):
    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/sharing/rest/oauth2/token":
            return httpx.Response(
                200, json={"access_token": "at-1", "username": "jdoe", "expires_in": 7200}
            )
        if path == "/sharing/rest/community/users/jdoe":
            return httpx.Response(
                200,
                json={
                    "username": "jdoe",
                    "email": "jdoe@acme.gov",
                    "fullName": "Jane Doe",
                    "orgId": "org_1",
                },
            )
        if path == "/sharing/rest/portals/org_1":
            return org_response or httpx.Response(
                200, json={"id": "org_1", "name": "Acme County", "urlKey": "acme"}
            )
        return httpx.Response(404)

    return handler


def test_authorization_url(driver: ArcGISOAuthDriver) -> None:
    url = driver.authorization_url("state-1", OAuthMode.SIGNUP)
    parsed = urlparse(url)
    assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == (
        f"{PORTAL}/sharing/rest/oauth2/authorize"
    )
    query = parse_qs(parsed.query)
    assert query == {
        "client_id": ["portal-app"],
        "redirect_uri": ["http://portal.test/"],
        "response_type": ["code"],
        "state": ["state-1"],
        "expiration": ["20160"],
        "mode": ["signup"],
    }
    other = parse_qs(urlparse(driver.authorization_url("s", "signin", "county-app")).query)
    assert other["client_id"] == ["county-app"]


async def test_complete_builds_provider_identity(driver, transport) -> None:
    transport.handler = _portal()
    identity = await driver.complete("code-1")

    assert identity.username == "jdoe"
    assert identity.email == "jdoe@acme.gov"
    assert identity.full_name == "Jane Doe"
    assert identity.org_id == "org_1"
    assert identity.org_name == "Acme County"
    assert identity.org_url_key == "acme"

    token_request = transport.requests[0]
    assert token_request.method == "POST"
    form = parse_qs(token_request.content.decode())
    assert form["grant_type"] == ["authorization_code"]
    assert form["code"] == ["code-1"]
    assert form["redirect_uri"] == ["http://portal.test/"]
    assert "client_secret" not in form
    assert transport.requests[1].url.params["token"] == "at-1"


async def test_organization_lookup_failure_is_tolerated(driver, transport) -> None:
    transport.handler = _portal(httpx.Response(403))
    identity = await driver.complete("code-1")
    assert identity.org_id == "org_1"
    assert identity.org_name is None


async def test_error_in_token_body_is_provider_error(driver, transport) -> None:
    transport.handler = lambda request: httpx.Response(
        200, json={"error": {"code": 400, "error": "invalid_request", "message": "Invalid code"}}
    )
    with pytest.raises(ProviderError) as exc_info:
        await driver.complete("expired")
    assert exc_info.value.details == {"operation": "token_exchange", "status_code": 400}
    assert len(transport.requests) == 1


async def test_http_failure_is_provider_error(driver, transport) -> None:
    transport.handler = lambda request: httpx.Response(500)
    with pytest.raises(ProviderError):
        await driver.complete("code-1")


async def test_personal_account_skips_organization_lookup(driver, transport) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/token"):
            return httpx.Response(200, json={"access_token": "at-1", "username": "solo"})
        return httpx.Response(200, json={"username": "solo", "email": "solo@gmail.com"})

    transport.handler = handler
    identity = await driver.complete("code-1")
    assert identity.org_id is None
    assert len(transport.requests) == 2
