"""Presentation-layer dependency injection.

Resolves the service container from app state and the caller's browser
session from the session cookie. Routes depend only on these dependencies,
not on infrastructure directly.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from app.application.services import OAuthCallbackHandler, RedirectInitiator
from app.core.config import get_settings
from app.core.container import ServiceContainer
from app.domain.entities import AdminRecord
from app.domain.enums import SessionState
from app.domain.exceptions import AuthenticationException, AuthorizationException
from app.infrastructure.session.registry import BrowserSession


def get_container(request: Request) -> ServiceContainer:
    """Return the service container built at startup (503 if absent)."""
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return container


async def get_browser_session(
    request: Request,
    container: ServiceContainer = Depends(get_container),
) -> BrowserSession:
    """Return the context of the calling browser (created on first request)."""
    session_id = getattr(request.state, "browser_session_id", None)
    if not session_id:
        raise HTTPException(status_code=400, detail="Missing browser session")
    return await container.sessions.get_or_create(session_id)


def get_redirect_initiator(
    session: BrowserSession = Depends(get_browser_session),
    container: ServiceContainer = Depends(get_container),
) -> RedirectInitiator:
    return container.redirect_initiator(session)


def get_callback_handler(
    session: BrowserSession = Depends(get_browser_session),
    container: ServiceContainer = Depends(get_container),
) -> OAuthCallbackHandler:
    return container.callback_handler(session)


async def require_admin(
    session: BrowserSession = Depends(get_browser_session),
) -> AdminRecord:
    """Wait for role resolution; return the admin record or raise 401/403."""
    timeout = get_settings().session_resolve_timeout_seconds
    state = await session.coordinator.wait_resolved(timeout)
    if state in (SessionState.UNAUTHENTICATED, SessionState.LOADING):
        raise AuthenticationException("Sign in required")
    admin = session.coordinator.admin
    if admin is None:
        raise AuthorizationException(message="You don't have admin privileges.")
    return admin


BrowserSessionDep = Annotated[BrowserSession, Depends(get_browser_session)]
ContainerDep = Annotated[ServiceContainer, Depends(get_container)]
AdminDep = Annotated[AdminRecord, Depends(require_admin)]
