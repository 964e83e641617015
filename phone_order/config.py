"""
Configuration Module for the Phone Order Service
================================================

This module centralizes all configuration settings, environment variables, and
constants used throughout the service. Values are parsed and typed at module
load time so configuration errors surface at startup.

Configuration Categories:
-------------------------
- **Database**: Connection URL for the order/customer/catalog store.

- **Caching**: TTLs for the customer lookup cache and the dashboard stats
  cache. The stats cache is also invalidated on every order change.

- **Intake**: Worker pool size, per-submission timeout, customer resolution
  retries and the domain used for synthesized guest emails.

- **Rate Limiting**: Throttling for the public submission endpoint.

- **CORS / Admin**: Frontend origins and HTTP Basic credentials for the
  admin endpoints.

Environment Variables:
----------------------
- DATABASE_URL: SQLAlchemy URL (default: "sqlite:///./phone_order.db")
- CUSTOMER_CACHE_TTL_SECONDS: Customer lookup cache TTL (default: 3600)
- ANALYTICS_CACHE_TTL_SECONDS: Dashboard stats cache TTL (default: 300)
- SUBMISSION_TIMEOUT_SECONDS: Per-submission timeout (default: 10)
- INTAKE_WORKERS: Worker threads processing submissions (default: 8)
- CUSTOMER_RESOLVE_MAX_RETRIES: Attempts on duplicate-phone conflicts (default: 3)
- GUEST_EMAIL_DOMAIN: Domain of synthesized guest emails (default: "phone-order.local")
- RATE_LIMIT_SUBMIT: Submit endpoint rate limit (default: "10 per minute")
- RATE_LIMIT_ENABLED: Enable/disable rate limiting (default: "true")
- CORS_ORIGINS: Comma-separated allowed origins (default: "*")
- ADMIN_USERNAME: Admin username (default: "admin")
- ADMIN_PASSWORD: Admin password (required for admin access)

Usage:
------
    from phone_order.config import (
        CUSTOMER_CACHE_TTL_SECONDS,
        SUBMISSION_TIMEOUT_SECONDS,
    )
"""

import os
from typing import List


# =============================================================================
# Database Configuration
# =============================================================================

DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./phone_order.db")


# =============================================================================
# Cache Configuration
# =============================================================================
# Customer ids are cached per phone to avoid repeated lookups for repeat
# callers. Dashboard stats are cached briefly and push-invalidated.

CUSTOMER_CACHE_TTL_SECONDS: int = int(os.getenv("CUSTOMER_CACHE_TTL_SECONDS", "3600"))  # 1 hour
ANALYTICS_CACHE_TTL_SECONDS: int = int(os.getenv("ANALYTICS_CACHE_TTL_SECONDS", "300"))  # 5 minutes


# =============================================================================
# Intake Configuration
# =============================================================================

# Each submission runs in a worker thread with its own DB session
INTAKE_WORKERS: int = int(os.getenv("INTAKE_WORKERS", "8"))

# A submission that has not committed within this window is reported as failed
SUBMISSION_TIMEOUT_SECONDS: float = float(os.getenv("SUBMISSION_TIMEOUT_SECONDS", "10"))

# How many times to retry resolution after a duplicate-phone conflict
CUSTOMER_RESOLVE_MAX_RETRIES: int = int(os.getenv("CUSTOMER_RESOLVE_MAX_RETRIES", "3"))

# Guest customers get a synthesized address: guest_<digits>@<domain>
GUEST_EMAIL_DOMAIN: str = os.getenv("GUEST_EMAIL_DOMAIN", "phone-order.local")

# Provenance tag stored on every order created through phone intake
PHONE_ORDER_PROVENANCE: str = "phone_order"

# Statuses whose totals count as revenue
REVENUE_STATUSES: tuple = ("completed", "processing")

ORDER_STATUSES: tuple = (
    "pending",
    "processing",
    "on-hold",
    "completed",
    "cancelled",
    "refunded",
    "failed",
)


# =============================================================================
# Rate Limiting Configuration
# =============================================================================
# Format: "X per Y" where Y is second, minute, hour, or day

RATE_LIMIT_SUBMIT: str = os.getenv("RATE_LIMIT_SUBMIT", "10 per minute")
RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"


def get_rate_limit_submit() -> str:
    """
    Return the current submit rate limit.

    Allows dynamic override in tests without modifying the module-level constant.
    """
    return RATE_LIMIT_SUBMIT


# =============================================================================
# CORS Configuration
# =============================================================================

_cors_origins_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS: List[str] = [
    origin.strip()
    for origin in _cors_origins_env.split(",")
    if origin.strip()
] or ["*"]


# =============================================================================
# Admin Authentication Configuration
# =============================================================================
# ADMIN_PASSWORD must be set in production for admin access to work.

ADMIN_USERNAME: str = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "")
