"""
Admin Analytics Routes for the Phone Order Service
==================================================

Dashboard metrics and reporting for orders placed through phone intake.

Endpoints:
----------
- GET /admin/phone-orders/stats: Dashboard summary
- GET /admin/phone-orders/export: CSV download for a date range

Authentication:
---------------
All endpoints require admin authentication via HTTP Basic Auth.

Caching:
--------
The counts/revenue/recent/top-products block is served from a short-lived
cache that is invalidated whenever an order is created or changes status.
Conversion rate and average order value are computed per request.

Usage:
------
    GET /admin/phone-orders/stats
    GET /admin/phone-orders/export?start_date=2026-10-01&end_date=2026-10-31
"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from ..auth import verify_admin_credentials
from ..db import get_db
from ..dependencies import get_analytics
from ..schemas.analytics import DashboardStatsOut
from ..services import AnalyticsAggregator


logger = logging.getLogger(__name__)

admin_analytics_router = APIRouter(
    prefix="/admin/phone-orders",
    tags=["Admin - Phone Order Analytics"],
)


@admin_analytics_router.get("/stats", response_model=DashboardStatsOut)
def get_stats(
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
    analytics: AnalyticsAggregator = Depends(get_analytics),
) -> DashboardStatsOut:
    """Return the phone order dashboard summary."""
    stats = analytics.get_dashboard_stats(db)
    return DashboardStatsOut(
        **stats,
        conversion_rate=round(analytics.get_conversion_rate(db), 2),
        average_order_value=round(analytics.get_average_order_value(db), 2),
    )


@admin_analytics_router.get("/export")
def export_orders(
    start_date: date = Query(..., description="First day to include (YYYY-MM-DD)"),
    end_date: date = Query(..., description="Last day to include (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
    analytics: AnalyticsAggregator = Depends(get_analytics),
) -> Response:
    """Download phone orders created between two dates (inclusive) as CSV."""
    if end_date < start_date:
        raise HTTPException(status_code=400, detail="end_date must not be before start_date")

    content = analytics.export_csv(db, start_date, end_date)
    filename = f"phone-orders-{start_date.isoformat()}-to-{end_date.isoformat()}.csv"
    logger.info("Exported phone orders %s to %s", start_date, end_date)

    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
