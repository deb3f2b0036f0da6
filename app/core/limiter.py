"""SlowAPI limiter shared by main (app.state.limiter) and the auth routes.

Limits are per client address. The callback limit is the tightest: each
call costs a provider token exchange and possibly a tenant provisioning.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

AUTHORIZE_LIMIT = "20/minute"
CALLBACK_LIMIT = "10/minute"
SESSION_LIMIT = "120/minute"
PAGE_LIMIT = "60/minute"

limit_authorize = limiter.limit(AUTHORIZE_LIMIT)
limit_callback = limiter.limit(CALLBACK_LIMIT)
limit_session = limiter.limit(SESSION_LIMIT)
limit_page = limiter.limit(PAGE_LIMIT)
