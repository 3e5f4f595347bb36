"""Shared slowapi limiter, keyed by client address.

Routers decorate their endpoints with ``@limiter.limit(...)``; main.py mounts
the same instance on ``app.state`` so all routes share one counter store.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")
