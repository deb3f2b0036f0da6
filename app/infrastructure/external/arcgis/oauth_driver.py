"""ArcGIS Online OAuth driver: authorization URL, token exchange, user and organization info."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, ClassVar
from urllib.parse import quote, urlencode

import httpx

from app.application.dtos.identity import ProviderIdentity
from app.domain.enums import OAuthMode
from app.domain.exceptions import ProviderError
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)


@dataclass
class OAuthTokens:
    """Normalized ArcGIS token response. The refresh token is not kept."""

    access_token: str
    username: str
    expires_in: int
    expires_at: datetime


class ArcGISOAuthDriver:
    """Authorization-code grant against an ArcGIS portal (public client, secret optional).

    ArcGIS reports most errors as HTTP 200 with an ``error`` object in the
    body; both forms are treated as failures.
    """

    PROVIDER_NAME: ClassVar[str] = "arcgis"
    AUTHORIZE_PATH: ClassVar[str] = "/sharing/rest/oauth2/authorize"
    TOKEN_PATH: ClassVar[str] = "/sharing/rest/oauth2/token"
    USER_PATH: ClassVar[str] = "/sharing/rest/community/users/{username}"
    PORTAL_PATH: ClassVar[str] = "/sharing/rest/portals/{org_id}"

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        portal_url: str,
        client_id: str,
        redirect_uri: str,
        client_secret: str | None = None,
        expiration_minutes: int = 20160,
    ) -> None:
        self._http = http_client
        self.portal_url = portal_url.rstrip("/")
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.expiration_minutes = expiration_minutes

    @property
    def authorization_endpoint(self) -> str:
        return f"{self.portal_url}{self.AUTHORIZE_PATH}"

    @property
    def token_endpoint(self) -> str:
        return f"{self.portal_url}{self.TOKEN_PATH}"

    def authorization_url(
        self, state: str, mode: OAuthMode, client_id: str | None = None
    ) -> str:
        """Build the authorize URL; ``mode`` travels as an application-defined parameter."""
        params = {
            "client_id": client_id or self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "state": state,
            "expiration": str(self.expiration_minutes),
            "mode": OAuthMode(mode).value,
        }
        return f"{self.authorization_endpoint}?{urlencode(params)}"

    async def complete(self, code: str, client_id: str | None = None) -> ProviderIdentity:
        """Exchange the code, then load the user profile and (best effort) the organization."""
        tokens = await self.exchange_code_for_tokens(code, client_id=client_id)
        profile = await self.get_user_info(tokens.access_token, tokens.username)
        org_id = profile.get("orgId") or None
        org: dict[str, Any] = {}
        if org_id:
            org = await self._get_organization(tokens.access_token, org_id)
        return ProviderIdentity(
            username=profile.get("username") or tokens.username,
            email=profile.get("email") or None,
            full_name=profile.get("fullName") or None,
            org_id=org_id,
            org_name=org.get("name") or None,
            org_url_key=org.get("urlKey") or None,
        )

    async def exchange_code_for_tokens(
        self, code: str, client_id: str | None = None
    ) -> OAuthTokens:
        """Exchange authorization code for an access token."""
        data = {
            "client_id": client_id or self.client_id,
            "code": code,
            "redirect_uri": self.redirect_uri,
            "grant_type": "authorization_code",
        }
        if self.client_secret:
            data["client_secret"] = self.client_secret
        token_data = await self._request("token_exchange", "POST", self.token_endpoint, data=data)
        if not token_data.get("access_token") or not token_data.get("username"):
            logger.error("%s token response missing access_token/username", self.PROVIDER_NAME)
            raise ProviderError("token_exchange")
        expires_in = int(token_data.get("expires_in", 1800))
        return OAuthTokens(
            access_token=token_data["access_token"],
            username=token_data["username"],
            expires_in=expires_in,
            expires_at=utc_now() + timedelta(seconds=expires_in),
        )

    async def get_user_info(self, access_token: str, username: str) -> dict[str, Any]:
        """Return the community user profile (username, email, fullName, orgId)."""
        url = f"{self.portal_url}{self.USER_PATH.format(username=quote(username, safe=''))}"
        return await self._request(
            "user_info", "GET", url, params={"f": "json", "token": access_token}
        )

    async def _get_organization(self, access_token: str, org_id: str) -> dict[str, Any]:
        url = f"{self.portal_url}{self.PORTAL_PATH.format(org_id=quote(org_id, safe=''))}"
        try:
            return await self._request(
                "organization_info", "GET", url, params={"f": "json", "token": access_token}
            )
        except ProviderError:
            logger.warning("%s organization lookup failed; continuing without name", self.PROVIDER_NAME)
            return {}

    async def _request(
        self,
        operation: str,
        method: str,
        url: str,
        *,
        params: dict[str, str] | None = None,
        data: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        try:
            if method == "POST":
                response = await self._http.post(url, data=data)
            else:
                response = await self._http.get(url, params=params)
        except httpx.HTTPError as e:
            logger.error("%s %s request failed: %s", self.PROVIDER_NAME, operation, type(e).__name__)
            raise ProviderError(operation) from e
        if response.status_code != 200:
            logger.error(
                "%s %s failed: status=%d",
                self.PROVIDER_NAME,
                operation,
                response.status_code,
            )
            raise ProviderError(operation, status_code=response.status_code)
        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderError(operation, status_code=response.status_code) from e
        if not isinstance(payload, dict) or "error" in payload:
            error = payload.get("error") if isinstance(payload, dict) else None
            code = error.get("code") if isinstance(error, dict) else None
            logger.error("%s %s returned error %s", self.PROVIDER_NAME, operation, code)
            raise ProviderError(operation, status_code=code if isinstance(code, int) else None)
        return payload
