"""
Intake Schemas for the Phone Order Service
==========================================

Request/response models for the public phone order endpoints.

Endpoint Coverage:
------------------
- POST /phone-order/create: Place an order with a phone number
- GET /phone-order/check-availability/{product_id}: Product availability

Validation Notes:
-----------------
The phone and quantity are deliberately NOT constrained here. The intake
service owns those rules and answers with a typed error kind and a
shopper-friendly message instead of a 422 validation dump.
"""

from typing import Optional

from pydantic import BaseModel


class PhoneOrderCreate(BaseModel):
    """
    Request body for placing a phone order.

    Attributes:
        phone: Phone number as typed by the shopper
        product_id: Catalog product id
        quantity: Units to order (default 1)
    """
    phone: str
    product_id: int
    quantity: int = 1


class PhoneOrderResponse(BaseModel):
    """
    Result of a phone order submission.

    Attributes:
        success: Whether the order was created
        order_id: New order id on success
        message: Message safe to show to the shopper
        error: Error kind on failure (e.g. "OutOfStock")
    """
    success: bool
    order_id: Optional[int] = None
    message: str
    error: Optional[str] = None


class AvailabilityOut(BaseModel):
    product_id: int
    available: bool
    in_stock: bool
    purchasable: bool
    product_name: Optional[str] = None
    price: Optional[str] = None
