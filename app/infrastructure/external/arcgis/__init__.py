"""ArcGIS Online identity provider."""

from app.infrastructure.external.arcgis.oauth_driver import (
    ArcGISOAuthDriver,
    OAuthTokens,
)

__all__ = ["ArcGISOAuthDriver", "OAuthTokens"]
