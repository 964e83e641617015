"""
Phone Order Analytics
=====================

Records per-order analytics and builds the admin dashboard summary for
orders created through phone intake.

Recording:
----------
``record_order`` writes one ``OrderAnalytics`` row per order (phone, product,
user agent, IP). It never raises: an analytics failure is logged as
AnalyticsWriteFailed and the already-committed order is left alone.

Dashboard Stats:
----------------
``get_dashboard_stats`` returns:
- total_orders / today_orders / month_orders: phone-intake orders only
- total_revenue: sum of totals for orders in a revenue status
  (completed, processing)
- recent_orders: the 10 newest phone orders
- top_products: the 5 best products by order count, then revenue

Caching:
--------
Stats are cached for a short window (default 5 minutes) and pushed out of
the cache whenever an order is created, an order's status changes, or an
analytics record is written. Invalidation bumps a generation counter; a
computation that started before an invalidation doesn't store its result,
so a slow recompute can't resurrect stale numbers.

Export:
-------
``export_csv`` serializes phone orders in a date range to CSV with columns
Order ID, Date, Phone, Product, Total, Status.
"""

import copy
import csv
import io
import logging
import threading
from datetime import date, datetime, time
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from .. import config
from ..cache import Cache
from ..events import ANALYTICS_TRACKED, ORDER_CREATED, ORDER_STATUS_CHANGED, EventBus
from ..models import Order, OrderAnalytics, utcnow
from ..repository import (
    OrderFilter,
    count_orders,
    get_orders_by_provenance,
    sum_order_totals,
)


logger = logging.getLogger(__name__)

STATS_CACHE_KEY = "phone_order_dashboard_stats"
RECENT_ORDERS_LIMIT = 10
TOP_PRODUCTS_LIMIT = 5

CSV_HEADER = ["Order ID", "Date", "Phone", "Product", "Total", "Status"]


class AnalyticsAggregator:
    def __init__(
        self,
        cache: Cache,
        events: Optional[EventBus] = None,
        cache_ttl: float = config.ANALYTICS_CACHE_TTL_SECONDS,
        provenance: str = config.PHONE_ORDER_PROVENANCE,
        revenue_statuses: tuple = config.REVENUE_STATUSES,
        now: Callable[[], datetime] = utcnow,
    ):
        self.cache = cache
        self.events = events
        self.cache_ttl = cache_ttl
        self.provenance = provenance
        self.revenue_statuses = revenue_statuses
        self._now = now
        self._lock = threading.Lock()
        self._generation = 0

        if events is not None:
            events.subscribe(ORDER_CREATED, self._on_order_changed)
            events.subscribe(ORDER_STATUS_CHANGED, self._on_order_changed)

    # -------------------------------------------------------------------------
    # Recording
    # -------------------------------------------------------------------------

    def record_order(
        self,
        db: Session,
        order_id: int,
        phone: str,
        product_id: int,
        client_meta: Optional[Dict[str, Any]] = None,
    ) -> Optional[OrderAnalytics]:
        """
        Attach an analytics record to an order.

        Returns:
            The stored record, or None if the write failed.
        """
        client_meta = client_meta or {}
        record = OrderAnalytics(
            order_id=order_id,
            phone=phone,
            product_id=product_id,
            user_agent=client_meta.get("user_agent") or "",
            ip_address=client_meta.get("ip_address") or "0.0.0.0",
            created_at=self._now(),
        )

        try:
            db.add(record)
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("AnalyticsWriteFailed: could not record analytics for order #%d", order_id)
            return None

        self.invalidate()

        if self.events is not None:
            self.events.publish(ANALYTICS_TRACKED, record={
                "order_id": order_id,
                "phone": phone,
                "product_id": product_id,
                "created_at": record.created_at.isoformat(),
                "user_agent": record.user_agent,
                "ip_address": record.ip_address,
            })
        return record

    # -------------------------------------------------------------------------
    # Cache control
    # -------------------------------------------------------------------------

    def invalidate(self) -> None:
        with self._lock:
            self._generation += 1
            self.cache.delete(STATS_CACHE_KEY)
        logger.debug("Dashboard stats cache invalidated")

    def _on_order_changed(self, **_payload: Any) -> None:
        self.invalidate()

    # -------------------------------------------------------------------------
    # Dashboard
    # -------------------------------------------------------------------------

    def get_dashboard_stats(self, db: Session) -> Dict[str, Any]:
        with self._lock:
            generation = self._generation
            cached = self.cache.get(STATS_CACHE_KEY)
        if cached is not None:
            return copy.deepcopy(cached)

        stats = {
            "total_orders": self.get_total_orders(db),
            "today_orders": self.get_today_orders(db),
            "month_orders": self.get_month_orders(db),
            "total_revenue": self.get_total_revenue(db),
            "recent_orders": self.get_recent_orders(db),
            "top_products": self.get_top_products(db),
        }

        with self._lock:
            if generation == self._generation:
                self.cache.set(STATS_CACHE_KEY, copy.deepcopy(stats), ttl=self.cache_ttl)
        return stats

    def get_total_orders(self, db: Session) -> int:
        return count_orders(db, OrderFilter(created_via=self.provenance))

    def get_today_orders(self, db: Session) -> int:
        start_of_day = datetime.combine(self._now().date(), time.min)
        return count_orders(db, OrderFilter(created_via=self.provenance, since=start_of_day))

    def get_month_orders(self, db: Session) -> int:
        start_of_month = datetime.combine(self._now().date().replace(day=1), time.min)
        return count_orders(db, OrderFilter(created_via=self.provenance, since=start_of_month))

    def get_total_revenue(self, db: Session) -> float:
        return sum_order_totals(
            db, OrderFilter(created_via=self.provenance, statuses=self.revenue_statuses)
        )

    def get_recent_orders(self, db: Session, limit: int = RECENT_ORDERS_LIMIT) -> List[Dict[str, Any]]:
        orders = get_orders_by_provenance(
            db, OrderFilter(created_via=self.provenance, limit=limit)
        )
        return [_order_summary(order) for order in orders]

    def get_top_products(self, db: Session, limit: int = TOP_PRODUCTS_LIMIT) -> List[Dict[str, Any]]:
        """
        Rank products by number of qualifying orders, ties broken by revenue.

        Only orders in a revenue status count.
        """
        orders = get_orders_by_provenance(
            db, OrderFilter(created_via=self.provenance, statuses=self.revenue_statuses)
        )

        totals: Dict[int, Dict[str, Any]] = {}
        for order in orders:
            seen = set()
            for item in order.items:
                entry = totals.setdefault(item.product_id, {
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "order_count": 0,
                    "revenue": 0.0,
                })
                if item.product_id not in seen:
                    entry["order_count"] += 1
                    seen.add(item.product_id)
                entry["revenue"] += float(item.line_total or 0.0)

        ranked = sorted(
            totals.values(),
            key=lambda p: (-p["order_count"], -p["revenue"]),
        )
        for entry in ranked:
            entry["revenue"] = round(entry["revenue"], 2)
        return ranked[:limit]

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    def get_orders_by_date_range(self, db: Session, start_date: date, end_date: date) -> List[Order]:
        """Phone orders created on or between the two dates (inclusive)."""
        return get_orders_by_provenance(db, OrderFilter(
            created_via=self.provenance,
            since=datetime.combine(start_date, time.min),
            until=datetime.combine(end_date, time.max),
        ))

    def get_conversion_rate(self, db: Session) -> float:
        """Phone orders as a percentage of all orders."""
        total = count_orders(db, OrderFilter())
        if total == 0:
            return 0.0
        return self.get_total_orders(db) / total * 100

    def get_average_order_value(self, db: Session) -> float:
        total_orders = self.get_total_orders(db)
        if total_orders == 0:
            return 0.0
        return self.get_total_revenue(db) / total_orders

    def export_csv(self, db: Session, start_date: date, end_date: date) -> str:
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(CSV_HEADER)

        for order in self.get_orders_by_date_range(db, start_date, end_date):
            writer.writerow([
                order.id,
                order.created_at.strftime("%Y-%m-%d %H:%M:%S"),
                order.billing_phone,
                ", ".join(item.product_name for item in order.items),
                f"{order.total:.2f}",
                order.status,
            ])

        return output.getvalue()


def _order_summary(order: Order) -> Dict[str, Any]:
    return {
        "order_id": order.id,
        "created_at": order.created_at.isoformat() if order.created_at else None,
        "phone": order.billing_phone,
        "products": [item.product_name for item in order.items],
        "total": float(order.total or 0.0),
        "status": order.status,
    }
