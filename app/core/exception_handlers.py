"""Exception handlers for the JSON API.

Register with register_exception_handlers(app). Portal errors keep their
``{error, message, details}`` shape; upstream failures (502) drop the
details, which carry uids and slugs meant for the logs only. The OAuth
callback routes never reach these handlers for portal errors: they record
the error for the browser and redirect instead.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.domain.exceptions import PortalException

logger = logging.getLogger(__name__)

_ERROR_CODE_STATUS: dict[str, int] = {
    "OAUTH_PROTOCOL_ERROR": 400,
    "VALIDATION_ERROR": 400,
    "AUTHENTICATION_ERROR": 401,
    "PERMISSION_DENIED": 403,
    "ROLE_NOT_FOUND": 403,
    "IDENTITY_CONFLICT": 409,
    "DOCUMENT_CONFLICT": 409,
    "PROVISIONING_FAILED": 502,
    "PROVIDER_ERROR": 502,
    "AUTH_BACKEND_ERROR": 502,
}


def status_for(exc: PortalException) -> int:
    """HTTP status for a portal error (400 for codes without an entry)."""
    return _ERROR_CODE_STATUS.get(exc.error_code, 400)


def _portal_exception_handler(request: Request, exc: PortalException) -> JSONResponse:
    status = status_for(exc)
    body = exc.to_dict()
    if status >= 500:
        logger.warning(
            "%s on %s: %s %s", exc.error_code, request.url.path, exc.message, exc.details
        )
        body["details"] = {}
    return JSONResponse(status_code=status, content=body)


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": exc.errors(),
        },
    )


def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 in the portal error shape; the sign-in routes are limited per client address."""
    logger.info("Rate limit hit on %s: %s", request.url.path, exc.detail)
    return JSONResponse(
        status_code=429,
        content={
            "error": "RATE_LIMITED",
            "message": "Too many requests. Please wait and try again.",
            "details": {"limit": str(exc.detail)},
        },
    )


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception on %s", request.url.path)
    detail: Any = str(exc) if get_settings().debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": detail},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app (call once)."""
    app.add_exception_handler(PortalException, _portal_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
