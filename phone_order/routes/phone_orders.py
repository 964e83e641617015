"""
Public Phone Order Routes
=========================

Customer-facing endpoints for placing an order with just a phone number.

Endpoints:
----------
- POST /phone-order/create: Place a phone order
- GET /phone-order/check-availability/{product_id}: Can this product be ordered?
- GET /phone-order/abilities: Machine-readable description of these endpoints
  for automation tools and agents

No Authentication:
------------------
These endpoints are public. Order creation is rate limited per client
address (see RATE_LIMIT_SUBMIT).

Response Codes (create):
------------------------
- 200: Order created
- 400: Shopper-correctable problem (invalid phone, product unavailable ...)
- 500: Internal failure; the message is generic, the detail is in the logs
- 503: Phone orders are disabled in settings

Usage:
------
    POST /phone-order/create
    {"phone": "555-1234", "product_id": 42, "quantity": 1}

    200 {"success": true, "order_id": 17, "message": "Thank you! ..."}
    400 {"success": false, "message": "This product is currently out of stock",
         "error": "OutOfStock"}
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..config import get_rate_limit_submit
from ..db import get_db
from ..dependencies import (
    get_client_meta,
    get_dispatcher,
    get_intake_service,
    get_settings_store,
)
from ..phone import PHONE_PATTERN
from ..rate_limit import limiter
from ..schemas.intake import AvailabilityOut, PhoneOrderCreate, PhoneOrderResponse
from ..services import IntakeDispatcher, IntakeError, OrderIntakeService, SettingsStore


logger = logging.getLogger(__name__)

phone_order_router = APIRouter(prefix="/phone-order", tags=["Phone Order"])

ABILITIES_VERSION = "2.0.0"


def _status_for(error: IntakeError) -> int:
    if error == IntakeError.ORDERS_DISABLED:
        return status.HTTP_503_SERVICE_UNAVAILABLE
    if error.is_internal:
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status.HTTP_400_BAD_REQUEST


# =============================================================================
# Order Endpoints
# =============================================================================

@phone_order_router.post("/create", response_model=PhoneOrderResponse)
@limiter.limit(get_rate_limit_submit)
def create_phone_order(
    request: Request,
    payload: PhoneOrderCreate,
    dispatcher: IntakeDispatcher = Depends(get_dispatcher),
):
    """
    Place an order for a single product using only a phone number.

    The shopper is contacted on that number to confirm; no cart, account
    or payment step is involved.
    """
    result = dispatcher.submit(
        payload.phone,
        payload.product_id,
        quantity=payload.quantity,
        client_meta=get_client_meta(request),
    )

    body = PhoneOrderResponse(
        success=result.success,
        order_id=result.order_id,
        message=result.message,
        error=result.error.value if result.error else None,
    )

    if result.success:
        return body
    return JSONResponse(status_code=_status_for(result.error), content=body.model_dump())


@phone_order_router.get("/check-availability/{product_id}", response_model=AvailabilityOut)
def check_availability(
    product_id: int,
    db: Session = Depends(get_db),
    service: OrderIntakeService = Depends(get_intake_service),
) -> AvailabilityOut:
    """Report whether a product can currently be ordered by phone."""
    return AvailabilityOut(**service.check_availability(db, product_id))


# =============================================================================
# Capability Description
# =============================================================================

@phone_order_router.get("/abilities")
def get_abilities(
    settings: SettingsStore = Depends(get_settings_store),
) -> Dict[str, Any]:
    """
    Describe the phone order capabilities for automation tools.

    Returns 404 when the abilities description is turned off in settings.
    """
    if not settings.is_enabled("enable_abilities_api"):
        raise HTTPException(status_code=404, detail="Abilities description is disabled")

    return {
        "name": "Phone Order",
        "version": ABILITIES_VERSION,
        "description": "Enables quick order creation using just a customer phone number",
        "capabilities": [
            {
                "id": "create_phone_order",
                "name": "Create Phone Order",
                "type": "action",
                "method": "POST",
                "endpoint": "/phone-order/create",
                "parameters": [
                    {
                        "name": "phone",
                        "type": "string",
                        "required": True,
                        "description": "Customer phone number (5-20 characters, digits, +, spaces, parentheses, hyphens)",
                        "validation": {"pattern": PHONE_PATTERN.pattern},
                    },
                    {"name": "product_id", "type": "integer", "required": True},
                    {"name": "quantity", "type": "integer", "required": False, "default": 1},
                ],
                "returns": {"success": "boolean", "order_id": "integer", "message": "string"},
            },
            {
                "id": "check_product_availability",
                "name": "Check Product Availability",
                "type": "query",
                "method": "GET",
                "endpoint": "/phone-order/check-availability/{product_id}",
                "parameters": [
                    {"name": "product_id", "type": "integer", "required": True},
                ],
                "returns": {
                    "available": "boolean",
                    "in_stock": "boolean",
                    "purchasable": "boolean",
                    "product_name": "string",
                    "price": "string",
                },
            },
            {
                "id": "get_phone_order_stats",
                "name": "Get Phone Order Statistics",
                "type": "query",
                "method": "GET",
                "endpoint": "/admin/phone-orders/stats",
                "permission": "admin",
                "parameters": [],
                "returns": {
                    "total_orders": "integer",
                    "today_orders": "integer",
                    "month_orders": "integer",
                    "total_revenue": "number",
                },
            },
        ],
    }
