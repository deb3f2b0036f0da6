"""Helpers that drive the redirect/callback round trip like a browser would."""

from urllib.parse import parse_qs, urlparse

from httpx import AsyncClient, Response

AUTH = "/api/v1/auth"


async def start_redirect(client: AsyncClient, mode: str, **params: str) -> str:
    """GET the authorize endpoint and return the state placed in the provider URL."""
    response = await client.get(f"{AUTH}/arcgis/authorize", params={"mode": mode, **params})
    assert response.status_code == 307, response.text
    query = parse_qs(urlparse(response.headers["location"]).query)
    return query["state"][0]


async def return_from_provider(client: AsyncClient, code: str, state: str) -> Response:
    """Land on the redirect URI (the landing page) with code and state."""
    return await client.get("/", params={"code": code, "state": state})


async def session_state(client: AsyncClient) -> dict:
    response = await client.get(f"{AUTH}/session")
    assert response.status_code == 200, response.text
    return response.json()
