"""
Routes Package for the Phone Order Service
==========================================

API route definitions organized by audience. Each module defines a FastAPI
APIRouter with related endpoints grouped together.

**Customer-Facing Routes:**
- phone_orders.py: Order submission, availability, capability description

**Admin Routes (require authentication):**
- admin_analytics.py: Dashboard stats and CSV export
- admin_orders.py: Phone order listing and status changes
- admin_settings.py: Settings read/update

Router Registration:
--------------------
All routers are registered in app_factory.py under two prefixes:
1. /api/v1/* - Versioned API (recommended)
2. /* - Root paths for backward compatibility

Route Dependencies:
-------------------
- get_db: Database session for queries
- verify_admin_credentials: Admin authentication
- get_dispatcher / get_analytics / ...: Services from app.state
- limiter.limit(): Rate limiting

Error Handling:
---------------
- 400: Shopper-correctable intake failure or bad request
- 401: Unauthorized (invalid credentials)
- 404: Not found
- 429: Too many requests (rate limited)
- 500: Internal intake failure (generic message)
- 503: Phone orders disabled / admin auth not configured
"""

from .admin_analytics import admin_analytics_router
from .admin_orders import admin_orders_router
from .admin_settings import admin_settings_router
from .phone_orders import phone_order_router

__all__ = [
    "admin_analytics_router",
    "admin_orders_router",
    "admin_settings_router",
    "phone_order_router",
]
