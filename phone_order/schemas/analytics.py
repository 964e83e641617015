"""
Analytics Schemas for the Phone Order Service
=============================================

Response models for the admin dashboard endpoint.

Endpoint Coverage:
------------------
- GET /admin/phone-orders/stats: Dashboard summary

Metrics:
--------
- total/today/month order counts (phone intake only)
- total revenue from orders in a revenue status (completed, processing)
- 10 most recent phone orders
- 5 top products by order count, then revenue
- conversion rate: phone orders as a percentage of all orders
- average order value: revenue / phone order count
"""

from typing import List, Optional

from pydantic import BaseModel


class RecentOrderOut(BaseModel):
    order_id: int
    created_at: Optional[str] = None
    phone: str
    products: List[str]
    total: float
    status: str


class TopProductOut(BaseModel):
    product_id: Optional[int] = None
    product_name: str
    order_count: int
    revenue: float


class DashboardStatsOut(BaseModel):
    """
    Phone order dashboard summary.

    Attributes:
        total_orders: All phone orders ever created
        today_orders: Phone orders created since midnight (UTC)
        month_orders: Phone orders created since the 1st of the month (UTC)
        total_revenue: Sum of totals for completed/processing phone orders
        recent_orders: Newest phone orders first
        top_products: Best-selling products via phone intake
        conversion_rate: Phone orders / all orders * 100
        average_order_value: total_revenue / total_orders
    """
    total_orders: int
    today_orders: int
    month_orders: int
    total_revenue: float
    recent_orders: List[RecentOrderOut]
    top_products: List[TopProductOut]
    conversion_rate: float
    average_order_value: float
