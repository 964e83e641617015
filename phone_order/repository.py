"""
Persistence Functions for the Phone Order Service
=================================================

SQLAlchemy-backed implementations of the three stores the intake core talks
to. Every function takes the request's ``Session`` as its first argument;
transaction boundaries are owned by the caller except where noted.

Catalog:
--------
- get_product: Load a product by id
- decrement_stock: Atomic decrement with a floor check

Identity Store:
---------------
- find_customer_by_phone: Exact (byte-for-byte) phone match
- email_exists: Whether a customer already uses an email
- create_customer: Insert and COMMIT a guest customer

Order Store:
------------
- create_order: Insert an order, its single line and a note (flush only)
- set_order_status: Change status and COMMIT
- get_orders_by_provenance / count_orders / sum_order_totals: Filtered reads
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from .models import Customer, Order, OrderItem, OrderNote, Product


logger = logging.getLogger(__name__)


class CustomerConflictError(Exception):
    """Raised when a customer insert violates a uniqueness constraint."""

    def __init__(self, phone: str):
        self.phone = phone
        super().__init__(f"Customer with phone {phone!r} conflicts with an existing record")


@dataclass
class OrderFilter:
    """Selection criteria for order queries. None means "don't filter"."""
    created_via: Optional[str] = None
    statuses: Optional[Sequence[str]] = None
    since: Optional[datetime] = None
    until: Optional[datetime] = None
    limit: Optional[int] = None
    newest_first: bool = True


# =============================================================================
# Catalog
# =============================================================================

def get_product(db: Session, product_id: int) -> Optional[Product]:
    return db.get(Product, product_id)


def decrement_stock(db: Session, product_id: int, quantity: int) -> bool:
    """
    Atomically take ``quantity`` units of stock.

    The decrement is a single conditional UPDATE, so two concurrent
    submissions can never both take the last unit. Products that don't manage
    stock are left untouched.

    Returns:
        True if stock was taken (or isn't managed), False if not enough stock.
    """
    result = db.execute(
        update(Product)
        .where(
            Product.id == product_id,
            Product.stock_quantity.isnot(None),
            Product.stock_quantity >= quantity,
        )
        .values(stock_quantity=Product.stock_quantity - quantity)
    )

    if result.rowcount == 1:
        db.execute(
            update(Product)
            .where(Product.id == product_id, Product.stock_quantity <= 0)
            .values(stock_status="outofstock")
        )
        return True

    remaining = db.query(Product.stock_quantity).filter(Product.id == product_id).scalar()
    return remaining is None


# =============================================================================
# Identity Store
# =============================================================================

def find_customer_by_phone(db: Session, phone: str) -> Optional[int]:
    return db.query(Customer.id).filter(Customer.phone == phone).limit(1).scalar()


def email_exists(db: Session, email: str) -> bool:
    return db.query(Customer.id).filter(Customer.email == email).first() is not None


def create_customer(db: Session, phone: str, email: str, username: str) -> int:
    """
    Insert a guest customer and commit immediately.

    Resolution runs before any order rows are written, so committing (or
    rolling back on conflict) here never discards intake work.

    Raises:
        CustomerConflictError: phone, email or username already taken.
    """
    customer = Customer(phone=phone, email=email, username=username, role="customer")
    db.add(customer)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise CustomerConflictError(phone)

    logger.info("Created guest customer #%d", customer.id)
    return customer.id


# =============================================================================
# Order Store
# =============================================================================

def create_order(
    db: Session,
    customer_id: int,
    product: Product,
    quantity: int,
    phone: str,
    status: str,
    created_via: str,
    payment_method: Optional[str] = None,
    payment_method_title: Optional[str] = None,
    note: Optional[str] = None,
) -> Order:
    """
    Build an order with a single product line and flush it to get an id.

    Totals are computed from the product's current price. The caller commits.
    """
    unit_price = float(product.price or 0.0)
    line_total = unit_price * quantity

    order = Order(
        customer_id=customer_id,
        status=status,
        billing_phone=phone,
        total=line_total,
        created_via=created_via,
        payment_method=payment_method,
        payment_method_title=payment_method_title,
    )
    order.items.append(OrderItem(
        product_id=product.id,
        product_name=product.name,
        quantity=quantity,
        unit_price=unit_price,
        line_total=line_total,
    ))
    if note:
        order.notes.append(OrderNote(content=note))

    db.add(order)
    db.flush()
    return order


def set_order_status(db: Session, order_id: int, status: str) -> Optional[Tuple[str, str]]:
    """
    Change an order's status and commit.

    Returns:
        (old_status, new_status), or None if the order doesn't exist.
    """
    order = db.get(Order, order_id)
    if order is None:
        return None

    old_status = order.status
    order.status = status
    db.commit()
    return old_status, status


def _apply_filter(query, filt: OrderFilter):
    if filt.created_via is not None:
        query = query.filter(Order.created_via == filt.created_via)
    if filt.statuses is not None:
        query = query.filter(Order.status.in_(list(filt.statuses)))
    if filt.since is not None:
        query = query.filter(Order.created_at >= filt.since)
    if filt.until is not None:
        query = query.filter(Order.created_at <= filt.until)
    return query


def get_orders_by_provenance(db: Session, filt: OrderFilter) -> List[Order]:
    query = _apply_filter(
        db.query(Order).options(selectinload(Order.items)),
        filt,
    )
    if filt.newest_first:
        query = query.order_by(Order.created_at.desc(), Order.id.desc())
    else:
        query = query.order_by(Order.created_at.asc(), Order.id.asc())
    if filt.limit is not None:
        query = query.limit(filt.limit)
    return query.all()


def count_orders(db: Session, filt: OrderFilter) -> int:
    return _apply_filter(db.query(func.count(Order.id)), filt).scalar() or 0


def sum_order_totals(db: Session, filt: OrderFilter) -> float:
    return float(_apply_filter(db.query(func.sum(Order.total)), filt).scalar() or 0.0)
