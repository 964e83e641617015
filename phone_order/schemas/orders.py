"""
Order Schemas for the Phone Order Service
=========================================

Pydantic models for the admin order endpoints.

Endpoint Coverage:
------------------
- GET /admin/phone-orders: List phone orders with pagination
- PATCH /admin/phone-orders/{id}/status: Change an order's status

Order Lifecycle:
----------------
Phone orders are created directly in ``processing``; there is no cart or
pending-payment state. Staff move them on to ``completed`` (or
``cancelled``, ``refunded`` ...) after calling the shopper back.

Usage:
------
    orders = PhoneOrderListResponse(
        items=[PhoneOrderOut.model_validate(o) for o in db_orders],
        page=1,
        page_size=20,
        total=100,
        has_next=True,
    )
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ..config import ORDER_STATUSES


class OrderItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: Optional[int] = None
    product_name: str
    quantity: int
    unit_price: float
    line_total: float


class PhoneOrderOut(BaseModel):
    """
    Response model for a phone order.

    Attributes:
        id: Order id
        customer_id: Owning (guest) customer
        status: Current status
        billing_phone: Phone the order was placed with
        total: Order total
        payment_method: Always "phone_order" for intake orders
        created_at: Creation time (UTC)
        items: The single product line
    """
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_id: int
    status: str
    billing_phone: str
    total: float
    payment_method: Optional[str] = None
    created_at: datetime
    items: List[OrderItemOut] = []


class PhoneOrderListResponse(BaseModel):
    items: List[PhoneOrderOut]
    page: int
    page_size: int
    total: int
    has_next: bool


def normalize_order_status(value: str) -> str:
    """
    Lowercase a status and drop an optional "wc-" prefix.

    Raises:
        ValueError: not one of the known order statuses.
    """
    value = value.strip().lower()
    if value.startswith("wc-"):
        value = value[3:]
    if value not in ORDER_STATUSES:
        raise ValueError(f"status must be one of: {', '.join(ORDER_STATUSES)}")
    return value


class OrderStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def check_status(cls, v: str) -> str:
        return normalize_order_status(v)


class OrderStatusOut(BaseModel):
    order_id: int
    old_status: str
    status: str
