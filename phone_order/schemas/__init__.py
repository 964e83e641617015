"""
Schemas Package for the Phone Order Service
===========================================

Pydantic models used for API request validation and response serialization.

Schema Organization:
--------------------
- **intake.py**: Public order submission and availability
- **orders.py**: Admin order listing and status changes
- **analytics.py**: Dashboard stats
- **settings.py**: Settings read/update

Naming Conventions:
-------------------
- *Out: Response models - what the API returns
- *Create / *Update: Request bodies
- *Response: Composite responses (results, paginated lists)
"""

from .analytics import DashboardStatsOut, RecentOrderOut, TopProductOut
from .intake import AvailabilityOut, PhoneOrderCreate, PhoneOrderResponse
from .orders import (
    OrderItemOut,
    OrderStatusOut,
    OrderStatusUpdate,
    PhoneOrderListResponse,
    PhoneOrderOut,
)
from .settings import SettingsOut, SettingsUpdate

__all__ = [
    "AvailabilityOut",
    "DashboardStatsOut",
    "OrderItemOut",
    "OrderStatusOut",
    "OrderStatusUpdate",
    "PhoneOrderCreate",
    "PhoneOrderListResponse",
    "PhoneOrderOut",
    "PhoneOrderResponse",
    "RecentOrderOut",
    "SettingsOut",
    "SettingsUpdate",
    "TopProductOut",
]
