"""Per-browser session contexts keyed by the browser session cookie.

Each BrowserSession bundles what a single browser profile would hold: the
browser-local key/value store, its authentication client, the provisioning
signal, and the role resolver subscribed to that client. Idle sessions are
evicted after a TTL; eviction closes the resolver.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from app.application.interfaces.repositories import (
    IAdminRepository,
    IOrganizationRepository,
)
from app.application.interfaces.services import IAuthBackend
from app.application.services.provisioning_signal import ProvisioningSignal
from app.application.services.session_coordinator import SessionCoordinator

logger = logging.getLogger(__name__)


@dataclass
class BrowserSession:
    """Context of one browser profile."""

    id: str
    store: dict[str, str]
    auth: IAuthBackend
    signal: ProvisioningSignal
    coordinator: SessionCoordinator
    last_seen: float = field(default=0.0)


class BrowserSessionRegistry:
    """In-process registry of browser sessions with idle eviction."""

    def __init__(
        self,
        auth_factory: Callable[[], IAuthBackend],
        admins: IAdminRepository,
        organizations: IOrganizationRepository,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._auth_factory = auth_factory
        self._admins = admins
        self._organizations = organizations
        self._ttl = ttl_seconds
        self._clock = clock
        self._sessions: dict[str, BrowserSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, session_id: str) -> BrowserSession | None:
        return self._sessions.get(session_id)

    async def get_or_create(self, session_id: str) -> BrowserSession:
        """Return the live session for session_id, creating it on first use."""
        await self.evict_expired()
        now = self._clock()
        session = self._sessions.get(session_id)
        if session is None:
            session = self._create(session_id)
            self._sessions[session_id] = session
            logger.debug("Browser session created (%d active)", len(self._sessions))
        session.last_seen = now
        return session

    async def evict_expired(self) -> int:
        """Close and drop sessions idle for longer than the TTL. Returns the count."""
        cutoff = self._clock() - self._ttl
        expired = [s for s in self._sessions.values() if s.last_seen < cutoff]
        for session in expired:
            del self._sessions[session.id]
        if expired:
            await asyncio.gather(*(s.coordinator.close() for s in expired))
            logger.info("Evicted %d idle browser sessions", len(expired))
        return len(expired)

    async def close_all(self) -> None:
        sessions = list(self._sessions.values())
        self._sessions.clear()
        await asyncio.gather(*(s.coordinator.close() for s in sessions))

    def _create(self, session_id: str) -> BrowserSession:
        store: dict[str, str] = {}
        auth = self._auth_factory()
        signal = ProvisioningSignal(store)
        coordinator = SessionCoordinator(auth, self._admins, self._organizations, signal)
        coordinator.start()
        return BrowserSession(
            id=session_id,
            store=store,
            auth=auth,
            signal=signal,
            coordinator=coordinator,
        )
