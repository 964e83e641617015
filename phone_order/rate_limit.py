"""
Rate limiting for public endpoints.

Uses slowapi with in-memory storage keyed by client address. For
multi-worker deployments point slowapi at Redis instead.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import RATE_LIMIT_ENABLED

limiter = Limiter(key_func=get_remote_address, enabled=RATE_LIMIT_ENABLED)
