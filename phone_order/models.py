from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    Boolean,
    JSON,
    DateTime,
    ForeignKey,
    Text,
    Index,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp; all timestamps are stored as naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    price = Column(Float, nullable=False, default=0.0)
    is_purchasable = Column(Boolean, nullable=False, default=True)
    stock_status = Column(String, nullable=False, default="instock")  # instock / outofstock
    # None = stock not managed (never decremented, never runs out)
    stock_quantity = Column(Integer, nullable=True)

    order_items = relationship("OrderItem", back_populates="product")

    @property
    def manages_stock(self) -> bool:
        return self.stock_quantity is not None

    @property
    def is_in_stock(self) -> bool:
        if self.stock_status != "instock":
            return False
        if self.manages_stock:
            return self.stock_quantity > 0
        return True

    def has_stock_for(self, quantity: int) -> bool:
        if not self.is_in_stock:
            return False
        return not self.manages_stock or self.stock_quantity >= quantity


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    # Unique: closes the duplicate-guest race on concurrent submissions
    phone = Column(String, nullable=False, unique=True, index=True)
    username = Column(String, nullable=False, unique=True)
    email = Column(String, nullable=False, unique=True, index=True)
    role = Column(String, nullable=False, default="customer")
    created_at = Column(DateTime, nullable=False, default=utcnow)

    orders = relationship("Order", back_populates="customer")


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    status = Column(String, nullable=False, default="processing", index=True)
    billing_phone = Column(String, nullable=False)
    total = Column(Float, nullable=False, default=0.0)
    created_via = Column(String, nullable=False, default="checkout", index=True)
    payment_method = Column(String, nullable=True)
    payment_method_title = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    customer = relationship("Customer", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")
    notes = relationship("OrderNote", back_populates="order", cascade="all, delete-orphan")
    analytics = relationship(
        "OrderAnalytics",
        back_populates="order",
        uselist=False,
        cascade="all, delete-orphan",
    )

    # Dashboard queries filter by provenance and sort by date
    __table_args__ = (
        Index("ix_orders_created_via_created_at", "created_via", "created_at"),
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True, index=True)

    product_name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    line_total = Column(Float, nullable=False)

    order = relationship("Order", back_populates="items")
    product = relationship("Product", back_populates="order_items")


class OrderNote(Base):
    __tablename__ = "order_notes"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    order = relationship("Order", back_populates="notes")


class OrderAnalytics(Base):
    """
    One analytics record per phone order. Append-only; the unique order_id
    guarantees a single record and the foreign key guarantees the order exists.
    """
    __tablename__ = "order_analytics"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, unique=True)
    phone = Column(String, nullable=False)
    product_id = Column(Integer, nullable=False)
    user_agent = Column(String, nullable=True)
    ip_address = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    order = relationship("Order", back_populates="analytics")


class Option(Base):
    """Named configuration value (combined settings object or a legacy flat key)."""
    __tablename__ = "options"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, unique=True, index=True)
    value = Column(JSON, nullable=True)
