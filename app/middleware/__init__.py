"""HTTP middleware. Applied in main app; order matters (first added = outermost)."""

from app.middleware.browser_session import BrowserSessionMiddleware

__all__ = ["BrowserSessionMiddleware"]
