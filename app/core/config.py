"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Required fields (provider client id, Firebase keys,
credential bridge key) are validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings are optional with defaults except those validated in
    validate_required (arcgis_client_id, firebase_api_key, Firebase service
    account, credential_bridge_key).
    """

    # App
    app_name: str = "portal-identity"
    app_version: str = "1.0.0"
    debug: bool = False

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8000"

    # Public origin of the portal; the OAuth redirect URI defaults to "<portal_base_url>/".
    portal_base_url: str = "http://localhost:8000"
    oauth_redirect_uri: str | None = None

    # ArcGIS Online OAuth (public client: secret optional)
    arcgis_portal_url: str = "https://www.arcgis.com"
    arcgis_client_id: str = ""
    arcgis_client_secret: SecretStr | None = None
    arcgis_token_expiration_minutes: int = 20160  # 14 days

    # Firebase: Web API key for Identity Toolkit, service account for Firestore.
    firebase_api_key: SecretStr = SecretStr("")
    firebase_service_account_key: SecretStr | None = None
    firebase_service_account_path: str | None = None  # Path to JSON file

    # Credential bridge: rotating this key invalidates every bridged password.
    credential_bridge_key: SecretStr = SecretStr("")
    bridge_email_domain: str = "arcgis.users.invalid"

    # Browser sessions
    session_cookie_name: str = "portal_session"
    session_cookie_secure: bool = True
    session_ttl_seconds: int = 8 * 60 * 60
    session_resolve_timeout_seconds: float = 15.0
    organization_watch_interval_seconds: float = 5.0

    # Outbound HTTP
    http_timeout_seconds: float = 30.0

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def redirect_uri(self) -> str:
        """OAuth redirect URI registered with the provider."""
        if self.oauth_redirect_uri:
            return self.oauth_redirect_uri
        return self.portal_base_url.rstrip("/") + "/"

    @model_validator(mode="after")
    def validate_required(self) -> "Settings":
        """Validate required env.

        - ARCGIS_CLIENT_ID: provider OAuth application.
        - FIREBASE_API_KEY: Identity Toolkit calls.
        - FIREBASE_SERVICE_ACCOUNT_KEY or FIREBASE_SERVICE_ACCOUNT_PATH: Firestore.
        - CREDENTIAL_BRIDGE_KEY: bridged password derivation.
        """
        if not self.arcgis_client_id:
            raise ValueError(
                "ARCGIS_CLIENT_ID is required. Register an OAuth application "
                "in ArcGIS Online and set its client id."
            )
        if not self.firebase_api_key.get_secret_value():
            raise ValueError(
                "FIREBASE_API_KEY is required (Firebase project Web API key)."
            )
        has_key = (
            self.firebase_service_account_key
            and self.firebase_service_account_key.get_secret_value()
        )
        if not has_key and not self.firebase_service_account_path:
            raise ValueError(
                "Set FIREBASE_SERVICE_ACCOUNT_KEY (full JSON string) "
                "or FIREBASE_SERVICE_ACCOUNT_PATH (path to JSON file)."
            )
        if len(self.credential_bridge_key.get_secret_value()) < 32:
            raise ValueError(
                "CREDENTIAL_BRIDGE_KEY is required (at least 32 characters). "
                "Generate with: openssl rand -hex 32. Never rotate it in place."
            )
        if self.session_ttl_seconds <= 0:
            raise ValueError("SESSION_TTL_SECONDS must be positive")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
