"""Service container: long-lived collaborators shared by all browser sessions.

Built once in the lifespan from settings; tests assign ``app.state.container``
directly with in-memory implementations. Per-browser services (redirect
initiator, callback handler) are assembled from a BrowserSession on demand.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from app.application.interfaces import (
    IAdminRepository,
    IIdentityProvider,
    IOrganizationRepository,
    ITenantWriter,
)
from app.application.services import (
    CallbackVerifier,
    CredentialBridge,
    OAuthCallbackHandler,
    RedirectInitiator,
    TenantProvisioner,
)
from app.core.config import Settings
from app.infrastructure.session.registry import BrowserSession, BrowserSessionRegistry


@dataclass
class ServiceContainer:
    admins: IAdminRepository
    organizations: IOrganizationRepository
    tenant_writer: ITenantWriter
    identity_provider: IIdentityProvider
    bridge: CredentialBridge
    sessions: BrowserSessionRegistry

    def redirect_initiator(self, session: BrowserSession) -> RedirectInitiator:
        return RedirectInitiator(self.identity_provider, session.store)

    def callback_handler(self, session: BrowserSession) -> OAuthCallbackHandler:
        provisioner = TenantProvisioner(
            organizations=self.organizations,
            tenant_writer=self.tenant_writer,
            auth=session.auth,
            bridge=self.bridge,
            signal=session.signal,
        )
        return OAuthCallbackHandler(
            verifier=CallbackVerifier(session.store),
            provider=self.identity_provider,
            auth=session.auth,
            bridge=self.bridge,
            provisioner=provisioner,
        )

    async def aclose(self) -> None:
        await self.sessions.close_all()


def build_container(settings: Settings, http_client: httpx.AsyncClient) -> ServiceContainer:
    """Wire Firestore, Identity Toolkit and ArcGIS implementations.

    Raises:
        FirebaseConfigError: the service account settings are unusable.
    """
    from app.infrastructure.external.arcgis import ArcGISOAuthDriver
    from app.infrastructure.firebase import FirebaseAuthClient, init_firebase
    from app.infrastructure.firebase.repositories import (
        FirestoreAdminRepository,
        FirestoreOrganizationRepository,
    )
    from app.infrastructure.firebase.services import FirestoreTenantWriter

    db = init_firebase(settings, http_client)
    admins = FirestoreAdminRepository(db)
    organizations = FirestoreOrganizationRepository(
        db, watch_interval=settings.organization_watch_interval_seconds
    )
    api_key = settings.firebase_api_key.get_secret_value()

    def auth_factory() -> FirebaseAuthClient:
        return FirebaseAuthClient(api_key, http_client)

    provider = ArcGISOAuthDriver(
        http_client,
        portal_url=settings.arcgis_portal_url,
        client_id=settings.arcgis_client_id,
        redirect_uri=settings.redirect_uri,
        client_secret=(
            settings.arcgis_client_secret.get_secret_value()
            if settings.arcgis_client_secret
            else None
        ),
        expiration_minutes=settings.arcgis_token_expiration_minutes,
    )
    return ServiceContainer(
        admins=admins,
        organizations=organizations,
        tenant_writer=FirestoreTenantWriter(db),
        identity_provider=provider,
        bridge=CredentialBridge(
            settings.credential_bridge_key.get_secret_value(),
            settings.bridge_email_domain,
        ),
        sessions=BrowserSessionRegistry(
            auth_factory=auth_factory,
            admins=admins,
            organizations=organizations,
            ttl_seconds=settings.session_ttl_seconds,
        ),
    )
