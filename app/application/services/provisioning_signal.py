"""Provisioning signal: handoff between the provisioning sequence and the role resolver.

Two browser-local flags record "a signup is in flight" and "a signup just
completed". While a provisioning sequence runs in this process it also owns a
future that resolves with its outcome, so the resolver can await the result
directly instead of sleeping. A flag left behind by an abandoned attempt (no
future) degrades to a plain fixed wait.
"""

from __future__ import annotations

import asyncio
import logging

from app.application.dtos.identity import ProvisioningResult
from app.application.interfaces.services import ClientStore

logger = logging.getLogger(__name__)

SIGNUP_IN_PROGRESS_KEY = "signup_in_progress"
SIGNUP_COMPLETED_KEY = "signup_completed"
_TRUE = "true"


class ProvisioningSignal:
    """Single-writer (provisioner), single-reader (resolver) mailbox for one browser."""

    def __init__(self, store: ClientStore) -> None:
        self._store = store
        self._pending: asyncio.Future[ProvisioningResult | None] | None = None

    @property
    def in_flight(self) -> bool:
        return self._store.get(SIGNUP_IN_PROGRESS_KEY) == _TRUE

    def begin(self) -> None:
        """Mark a signup as in flight. Must be called before any provisioning write."""
        self._store[SIGNUP_IN_PROGRESS_KEY] = _TRUE
        self._store.pop(SIGNUP_COMPLETED_KEY, None)
        self._pending = asyncio.get_running_loop().create_future()

    def complete(self, result: ProvisioningResult) -> None:
        """Clear the in-flight flag, set the just-completed flag, publish the result."""
        self._store.pop(SIGNUP_IN_PROGRESS_KEY, None)
        self._store[SIGNUP_COMPLETED_KEY] = _TRUE
        self._resolve(result)

    def fail(self) -> None:
        """Clear the in-flight flag so a later attempt is never blocked by this one."""
        self._store.pop(SIGNUP_IN_PROGRESS_KEY, None)
        self._resolve(None)

    def consume_just_completed(self) -> bool:
        """Return whether a signup just completed, clearing the flag (read once)."""
        return self._store.pop(SIGNUP_COMPLETED_KEY, None) == _TRUE

    async def wait(self, timeout: float) -> ProvisioningResult | None:
        """Wait at most timeout seconds for the in-flight provisioning outcome.

        Returns the result, or None on failure, timeout, or when no in-process
        provisioning owns the flag.
        """
        pending = self._pending
        if pending is None:
            logger.debug("No in-process provisioning for in-flight flag; fixed wait")
            await asyncio.sleep(timeout)
            return None
        try:
            return await asyncio.wait_for(asyncio.shield(pending), timeout)
        except asyncio.TimeoutError:
            logger.warning("Provisioning did not finish within %.1fs", timeout)
            return None

    def _resolve(self, result: ProvisioningResult | None) -> None:
        pending, self._pending = self._pending, None
        if pending is not None and not pending.done():
            pending.set_result(result)
