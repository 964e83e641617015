"""
Authentication Module for the Phone Order Service
=================================================

HTTP Basic Authentication for the admin endpoints (dashboard stats, CSV
export, order status changes, settings).

Security Features:
------------------
- **Timing Attack Prevention**: credentials are compared with
  ``secrets.compare_digest()``.

- **Shared Realm**: all admin endpoints share one realm so browsers reuse
  credentials across admin pages.

- **Fail Closed**: if ADMIN_PASSWORD is not configured, admin endpoints
  return 503 rather than allowing unauthenticated access.

Configuration:
--------------
- ADMIN_USERNAME: Username for admin access (default: "admin")
- ADMIN_PASSWORD: Password for admin access (required, no default)

Usage:
------
    from phone_order.auth import verify_admin_credentials

    @router.get("/admin/phone-orders/stats")
    def stats(_admin: str = Depends(verify_admin_credentials)):
        ...
"""

import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from . import config


security = HTTPBasic(realm="Phone Order Admin")


def verify_admin_credentials(
    credentials: HTTPBasicCredentials = Depends(security),
) -> str:
    """
    Verify HTTP Basic Auth credentials for admin endpoints.

    Returns:
        str: The authenticated username if credentials are valid.

    Raises:
        HTTPException (503): ADMIN_PASSWORD is not set.
        HTTPException (401): Invalid credentials. Includes WWW-Authenticate
                             header to trigger the browser's auth prompt.
    """
    if not config.ADMIN_PASSWORD:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Admin authentication not configured. Set ADMIN_PASSWORD environment variable.",
        )

    username_correct = secrets.compare_digest(
        credentials.username.encode("utf-8"),
        config.ADMIN_USERNAME.encode("utf-8"),
    )
    password_correct = secrets.compare_digest(
        credentials.password.encode("utf-8"),
        config.ADMIN_PASSWORD.encode("utf-8"),
    )

    if not (username_correct and password_correct):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username
