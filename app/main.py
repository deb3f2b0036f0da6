"""FastAPI application entry point.

Wiring only: lifespan, exception handlers, middleware, routers.
No business logic here (SRP). See app.core.lifespan and app.core.exception_handlers.

Settings are loaded inside create_app() so that tests can set env (and optionally
clear get_settings cache) before importing or calling create_app().
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, Response

from app.api.v1 import api_router
from app.api.v1.dependencies import get_browser_session, get_container
from app.api.v1.endpoints.auth import complete_oauth_callback
from app.application.services import parse_callback
from app.core.config import get_settings
from app.core.exception_handlers import register_exception_handlers
from app.core.lifespan import create_lifespan
from app.core.limiter import limit_page, limiter
from app.middleware import BrowserSessionMiddleware
from app.pages import render_root_page
from app.shared.telemetry.logging import setup_logging


def create_app() -> FastAPI:
    """Build and return the FastAPI application. Settings are resolved here (deferred from import)."""
    settings = get_settings()
    setup_logging()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    app.state.limiter = limiter

    register_exception_handlers(app)

    # Middleware: first added = innermost. Order: CORS -> browser session.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        BrowserSessionMiddleware,
        cookie_name=settings.session_cookie_name,
        max_age=settings.session_ttl_seconds,
        secure=settings.session_cookie_secure,
    )

    app.include_router(api_router, prefix="/api/v1")

    @app.get("/", response_class=HTMLResponse, include_in_schema=False)
    @limit_page
    async def root(request: Request) -> Response:
        """Landing page; also the OAuth redirect URI (processes code/state/error, then redirects)."""
        if parse_callback(request.query_params).is_callback:
            container = get_container(request)
            session = await get_browser_session(request, container)
            handler = container.callback_handler(session)
            return await complete_oauth_callback(request, handler, session)
        return HTMLResponse(content=render_root_page(settings.app_name))

    return app


app = create_app()
