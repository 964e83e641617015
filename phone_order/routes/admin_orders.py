"""
Admin Order Routes for the Phone Order Service
==============================================

Endpoints for viewing phone orders and moving them through their lifecycle.

Endpoints:
----------
- GET /admin/phone-orders: List phone orders with pagination and filtering
- PATCH /admin/phone-orders/{id}/status: Change an order's status

Authentication:
---------------
All endpoints require admin authentication via HTTP Basic Auth.

Filtering:
----------
- ?status=processing - Only orders in that status ("wc-" prefix accepted)
- ?status=<unknown> - 400
- No status parameter - All phone orders

Status Changes:
---------------
A status change publishes ``order.status_changed``, which invalidates the
dashboard stats cache.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session, selectinload

from .. import config
from ..auth import verify_admin_credentials
from ..db import get_db
from ..dependencies import get_event_bus
from ..events import EventBus
from ..models import Order
from ..schemas.orders import (
    OrderStatusOut,
    OrderStatusUpdate,
    PhoneOrderListResponse,
    PhoneOrderOut,
    normalize_order_status,
)
from ..services import change_order_status


logger = logging.getLogger(__name__)

admin_orders_router = APIRouter(prefix="/admin/phone-orders", tags=["Admin - Phone Orders"])


@admin_orders_router.get("", response_model=PhoneOrderListResponse)
def list_phone_orders(
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
    status: Optional[str] = Query(None, description="Filter by order status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> PhoneOrderListResponse:
    """
    Return a paginated list of phone orders, newest first.
    """
    query = db.query(Order).filter(Order.created_via == config.PHONE_ORDER_PROVENANCE)

    if status is not None:
        try:
            status = normalize_order_status(status)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        query = query.filter(Order.status == status)

    total = query.count()
    offset = (page - 1) * page_size

    orders = (
        query.options(selectinload(Order.items))
        .order_by(Order.created_at.desc(), Order.id.desc())
        .offset(offset)
        .limit(page_size)
        .all()
    )

    items = [PhoneOrderOut.model_validate(o) for o in orders]

    return PhoneOrderListResponse(
        items=items,
        page=page,
        page_size=page_size,
        total=total,
        has_next=offset + len(items) < total,
    )


@admin_orders_router.patch("/{order_id}/status", response_model=OrderStatusOut)
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
    events: EventBus = Depends(get_event_bus),
) -> OrderStatusOut:
    """Change the status of an order."""
    change = change_order_status(db, events, order_id, payload.status)
    if change is None:
        raise HTTPException(status_code=404, detail="Order not found")

    old_status, new_status = change
    return OrderStatusOut(order_id=order_id, old_status=old_status, status=new_status)
