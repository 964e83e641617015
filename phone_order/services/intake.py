"""
Phone Order Intake Service
==========================

Turns a (phone, product, quantity) submission into a real order without a
cart or checkout.

Submission Steps:
-----------------
Each step short-circuits with an error kind on failure:

1. Phone orders enabled, quantity >= 1
2. Phone validation                         -> InvalidPhone
3. Product lookup                           -> ProductNotFound
4. Product purchasable                      -> ProductNotPurchasable
5. Product in stock                         -> OutOfStock
6. Customer resolution (find or create)     -> CustomerResolutionFailed
7. Order + product line + note, stock
   decrement, single commit                 -> OrderCreationFailed / OutOfStock
8. Analytics record (if enabled; never fails the order)
9. ``phone_order.created`` event

Error Reporting:
----------------
Validation and availability problems come back with a specific user-safe
message. Resolution and persistence problems are logged with full detail
and the caller only sees a generic message, so store internals never reach
shoppers.

Expected failures are returned as ``IntakeResult`` values; ``submit`` does
not raise for them.

Usage:
------
    service = OrderIntakeService(settings, resolver, analytics, events)
    result = service.submit(db, "555-1234", product_id=42)
    if result.success:
        print(result.order_id, result.message)
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import config
from ..events import ORDER_CREATED, EventBus
from ..phone import clean_phone, validate_phone
from ..repository import create_order, decrement_stock, get_product
from .analytics import AnalyticsAggregator
from .customers import CustomerResolutionError, CustomerResolver
from .settings import SettingsStore


logger = logging.getLogger(__name__)

PAYMENT_METHOD = "phone_order"
PAYMENT_METHOD_TITLE = "Phone Order"
INITIAL_STATUS = "processing"
ORDER_NOTE = "Order placed via Phone Order form"

SUCCESS_MESSAGE = "Thank you! Your order has been placed. We'll contact you shortly to confirm."
GENERIC_FAILURE_MESSAGE = "An error occurred. Please try again or contact us directly."


class IntakeError(str, Enum):
    ORDERS_DISABLED = "OrdersDisabled"
    INVALID_QUANTITY = "InvalidQuantity"
    INVALID_PHONE = "InvalidPhone"
    PRODUCT_NOT_FOUND = "ProductNotFound"
    PRODUCT_NOT_PURCHASABLE = "ProductNotPurchasable"
    OUT_OF_STOCK = "OutOfStock"
    CUSTOMER_RESOLUTION_FAILED = "CustomerResolutionFailed"
    ORDER_CREATION_FAILED = "OrderCreationFailed"

    @property
    def is_internal(self) -> bool:
        """Internal failures are logged server-side and shown generically."""
        return self in (IntakeError.CUSTOMER_RESOLUTION_FAILED, IntakeError.ORDER_CREATION_FAILED)


USER_MESSAGES: Dict[IntakeError, str] = {
    IntakeError.ORDERS_DISABLED: "Phone orders are currently unavailable",
    IntakeError.INVALID_QUANTITY: "Please choose a quantity of at least 1",
    IntakeError.INVALID_PHONE: "Please enter a valid phone number",
    IntakeError.PRODUCT_NOT_FOUND: "Invalid product",
    IntakeError.PRODUCT_NOT_PURCHASABLE: "This product cannot be purchased",
    IntakeError.OUT_OF_STOCK: "This product is currently out of stock",
    IntakeError.CUSTOMER_RESOLUTION_FAILED: GENERIC_FAILURE_MESSAGE,
    IntakeError.ORDER_CREATION_FAILED: GENERIC_FAILURE_MESSAGE,
}


@dataclass
class IntakeResult:
    success: bool
    message: str
    order_id: Optional[int] = None
    customer_id: Optional[int] = None
    error: Optional[IntakeError] = None

    @classmethod
    def ok(cls, order_id: int, customer_id: int) -> "IntakeResult":
        return cls(success=True, message=SUCCESS_MESSAGE, order_id=order_id, customer_id=customer_id)

    @classmethod
    def fail(cls, error: IntakeError) -> "IntakeResult":
        return cls(success=False, message=USER_MESSAGES[error], error=error)


class OrderIntakeService:
    def __init__(
        self,
        settings: SettingsStore,
        resolver: CustomerResolver,
        analytics: AnalyticsAggregator,
        events: EventBus,
        provenance: str = config.PHONE_ORDER_PROVENANCE,
    ):
        self.settings = settings
        self.resolver = resolver
        self.analytics = analytics
        self.events = events
        self.provenance = provenance

    def submit(
        self,
        db: Session,
        phone: str,
        product_id: int,
        quantity: int = 1,
        client_meta: Optional[Dict[str, Any]] = None,
        deadline: Optional[float] = None,
    ) -> IntakeResult:
        """
        Place a phone order.

        Args:
            db: Database session owned by this submission
            phone: Raw phone string as submitted
            product_id: Catalog product id
            quantity: Units to order
            client_meta: Optional {"user_agent", "ip_address"} for analytics
            deadline: ``time.monotonic()`` value after which nothing may be
                written. The check runs before customer resolution and again
                right before the commit; a commit already in flight when the
                deadline passes still completes, so callers should pass a
                deadline that ends before their own timeout

        Returns:
            IntakeResult with the new order id, or the failure kind.
        """
        if not self.settings.is_enabled("enabled"):
            return IntakeResult.fail(IntakeError.ORDERS_DISABLED)

        if quantity is None or quantity < 1:
            return IntakeResult.fail(IntakeError.INVALID_QUANTITY)

        if not validate_phone(phone):
            return IntakeResult.fail(IntakeError.INVALID_PHONE)
        phone = clean_phone(phone)

        try:
            product = get_product(db, product_id)
        except SQLAlchemyError:
            logger.exception("Phone order error: product lookup failed for #%s", product_id)
            return IntakeResult.fail(IntakeError.ORDER_CREATION_FAILED)

        if product is None:
            return IntakeResult.fail(IntakeError.PRODUCT_NOT_FOUND)
        if not product.is_purchasable:
            return IntakeResult.fail(IntakeError.PRODUCT_NOT_PURCHASABLE)
        if not product.has_stock_for(quantity):
            return IntakeResult.fail(IntakeError.OUT_OF_STOCK)

        # Nothing has been written yet; a late worker stops before creating a guest
        if _deadline_passed(deadline):
            logger.error("Phone order error: submission deadline passed before customer resolution")
            return IntakeResult.fail(IntakeError.ORDER_CREATION_FAILED)

        try:
            customer_id = self.resolver.resolve(db, phone)
        except CustomerResolutionError:
            logger.exception("Phone order error: customer resolution failed")
            return IntakeResult.fail(IntakeError.CUSTOMER_RESOLUTION_FAILED)

        try:
            order = create_order(
                db,
                customer_id=customer_id,
                product=product,
                quantity=quantity,
                phone=phone,
                status=INITIAL_STATUS,
                created_via=self.provenance,
                payment_method=PAYMENT_METHOD,
                payment_method_title=PAYMENT_METHOD_TITLE,
                note=ORDER_NOTE,
            )

            if not decrement_stock(db, product.id, quantity):
                db.rollback()
                logger.info("Product #%d sold out while placing phone order", product_id)
                return IntakeResult.fail(IntakeError.OUT_OF_STOCK)

            if _deadline_passed(deadline):
                db.rollback()
                logger.error("Phone order error: submission deadline passed before commit")
                return IntakeResult.fail(IntakeError.ORDER_CREATION_FAILED)

            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Phone order error: failed to create order")
            return IntakeResult.fail(IntakeError.ORDER_CREATION_FAILED)

        order_id = order.id
        logger.info("Phone order #%d created for customer #%d", order_id, customer_id)

        if self.settings.is_enabled("enable_analytics"):
            self.analytics.record_order(db, order_id, phone, product_id, client_meta)

        self.events.publish(ORDER_CREATED, order_id=order_id, phone=phone, product_id=product_id)

        return IntakeResult.ok(order_id, customer_id)

    def check_availability(self, db: Session, product_id: int) -> Dict[str, Any]:
        """Whether a product can currently be ordered by phone."""
        product = get_product(db, product_id)
        if product is None:
            return {
                "product_id": product_id,
                "available": False,
                "in_stock": False,
                "purchasable": False,
                "product_name": None,
                "price": None,
            }

        return {
            "product_id": product.id,
            "available": bool(product.is_purchasable and product.is_in_stock),
            "in_stock": product.is_in_stock,
            "purchasable": bool(product.is_purchasable),
            "product_name": product.name,
            "price": f"{product.price:.2f}",
        }


def _deadline_passed(deadline: Optional[float]) -> bool:
    return deadline is not None and time.monotonic() > deadline
