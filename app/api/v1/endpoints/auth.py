"""Auth API: ArcGIS redirect, OAuth callback, session state, sign-out.

The callback never answers with an error page: failures are recorded for
the browser under ``last_auth_error`` and the browser is sent back to the
clean landing URL, so the OAuth parameters are not replayed on refresh.
"""

import json
import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import RedirectResponse

from app.api.v1.dependencies import (
    BrowserSessionDep,
    get_callback_handler,
    get_redirect_initiator,
)
from app.application.services import (
    OAuthCallbackHandler,
    RedirectInitiator,
    parse_callback,
)
from app.core.config import get_settings
from app.core.limiter import limit_authorize, limit_callback, limit_session
from app.domain.enums import OAuthMode
from app.domain.exceptions import PortalException
from app.schemas.auth import AuthErrorResponse, SessionResponse

logger = logging.getLogger(__name__)

router = APIRouter()

LAST_AUTH_ERROR_KEY = "last_auth_error"


async def complete_oauth_callback(
    request: Request,
    handler: OAuthCallbackHandler,
    session: BrowserSessionDep,
) -> RedirectResponse:
    """Run the callback for the current URL and redirect to the clean landing URL.

    Shared by GET / and GET /auth/arcgis/callback.
    """
    params = parse_callback(request.query_params)
    target: str | None = None
    try:
        outcome = await handler.handle(params)
        target = outcome.target_organization
    except PortalException as e:
        logger.info("OAuth callback failed: %s", e.error_code)
        session.store[LAST_AUTH_ERROR_KEY] = json.dumps(
            {"error": e.error_code, "message": e.message}
        )
    location = "/"
    if target:
        location = f"/?{urlencode({'org': target})}"
    return RedirectResponse(location, status_code=303)


@router.get("/arcgis/authorize", status_code=307)
@limit_authorize
async def arcgis_authorize(
    request: Request,
    mode: OAuthMode = Query(OAuthMode.SIGNIN),
    client_id: str | None = Query(None, max_length=128),
    org: str | None = Query(None, max_length=40),
    initiator: RedirectInitiator = Depends(get_redirect_initiator),
) -> RedirectResponse:
    """Send the browser to ArcGIS to sign in or sign up."""
    url = initiator.begin(mode, client_id=client_id, target_organization=org)
    return RedirectResponse(url, status_code=307)


@router.get("/arcgis/callback", status_code=303)
@limit_callback
async def arcgis_callback(
    request: Request,
    session: BrowserSessionDep,
    handler: OAuthCallbackHandler = Depends(get_callback_handler),
) -> RedirectResponse:
    """OAuth redirect URI for deployments that register a dedicated callback path."""
    return await complete_oauth_callback(request, handler, session)


@router.get("/session", response_model=SessionResponse)
@limit_session
async def get_session(request: Request, session: BrowserSessionDep) -> SessionResponse:
    """Resolve this browser's principal into a role.

    Waits (bounded) for the role resolver. ``is_new_account`` and ``error``
    are reported once.
    """
    timeout = get_settings().session_resolve_timeout_seconds
    snapshot = await session.coordinator.snapshot(timeout)
    error = None
    raw_error = session.store.pop(LAST_AUTH_ERROR_KEY, None)
    if raw_error:
        error = AuthErrorResponse(**json.loads(raw_error))
    return SessionResponse(
        state=snapshot.state,
        uid=snapshot.uid,
        email=snapshot.email,
        role=snapshot.role,
        organization_id=snapshot.organization_id,
        organization=snapshot.organization,
        reason=snapshot.reason,
        is_new_account=snapshot.is_new_account,
        error=error,
    )


@router.post("/sign-out", status_code=204)
async def sign_out(session: BrowserSessionDep) -> Response:
    """Sign the principal out; the resolver moves to UNAUTHENTICATED."""
    session.auth.sign_out()
    return Response(status_code=204)
