"""
Services Package for the Phone Order Service
============================================

Business logic, kept out of the route handlers so it can be exercised
directly with a database session.

Modules:
--------
- customers.py: Phone -> customer id resolution and guest creation
- intake.py: Order intake (validation, order creation, stock)
- dispatcher.py: Worker pool + timeout around intake submissions
- analytics.py: Per-order analytics, dashboard stats, CSV export
- settings.py: Settings store with legacy-key precedence
- orders.py: Order status changes

Services are constructed once in ``create_app`` and shared by all requests;
each call takes the request's ``Session``.
"""

from .analytics import AnalyticsAggregator
from .customers import CustomerResolutionError, CustomerResolver
from .dispatcher import IntakeDispatcher
from .intake import IntakeError, IntakeResult, OrderIntakeService
from .orders import change_order_status
from .settings import SettingsStore

__all__ = [
    "AnalyticsAggregator",
    "CustomerResolutionError",
    "CustomerResolver",
    "IntakeDispatcher",
    "IntakeError",
    "IntakeResult",
    "OrderIntakeService",
    "SettingsStore",
    "change_order_status",
]
