"""Application lifespan.

Startup opens the shared HTTP pool, installs tracing when enabled and builds
the service container (tests inject their own container first). Shutdown
releases them in reverse: browser sessions stop their auth listeners and
organization watches before the connection pools they poll through close.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from app.core.config import Settings, get_settings
from app.infrastructure.firebase.client import close_firebase
from app.shared.telemetry.telemetry import TelemetryConfig, get_telemetry, set_telemetry

logger = logging.getLogger(__name__)


def _start_tracing(app: FastAPI, settings: Settings) -> None:
    telemetry = TelemetryConfig(
        service_name=settings.app_name,
        service_version=settings.app_version,
        environment=settings.telemetry_environment,
    )
    if telemetry.setup_telemetry(
        exporter_type=settings.telemetry_exporter,
        otlp_endpoint=settings.telemetry_otlp_endpoint,
        sample_rate=settings.telemetry_sample_rate,
    ):
        telemetry.instrument(app)
        set_telemetry(telemetry)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    app.state.http_client = httpx.AsyncClient(timeout=settings.http_timeout_seconds)
    if settings.telemetry_enabled:
        _start_tracing(app, settings)
    if getattr(app.state, "container", None) is None:
        from app.core.container import build_container

        app.state.container = build_container(settings, app.state.http_client)
        logger.info("Identity services ready (redirect URI %s)", settings.redirect_uri)

    try:
        yield
    finally:
        container = getattr(app.state, "container", None)
        if container is not None:
            await container.aclose()
        await close_firebase()
        await app.state.http_client.aclose()
        telemetry = get_telemetry()
        if telemetry is not None:
            telemetry.shutdown()
            set_telemetry(None)
        logger.info("Identity services stopped")
