"""Browser session contexts."""

from app.infrastructure.session.registry import BrowserSession, BrowserSessionRegistry

__all__ = ["BrowserSession", "BrowserSessionRegistry"]
