"""
Tests for the phone order intake service.

Covers every failure kind, stock handling and the post-commit steps
(analytics and the created event).
"""
import logging
import time
from types import SimpleNamespace

import pytest

from phone_order.events import ANALYTICS_TRACKED, ORDER_CREATED
from phone_order.models import Customer, Order, OrderAnalytics, Product
from phone_order.services import IntakeError
from phone_order.services.intake import (
    GENERIC_FAILURE_MESSAGE,
    ORDER_NOTE,
    PAYMENT_METHOD_TITLE,
    SUCCESS_MESSAGE,
)

from conftest import GADGET_ID, LOW_STOCK_ID, SOLD_OUT_ID, UNMANAGED_ID, WIDGET_ID


def _stock(db, product_id):
    db.expire_all()
    return db.get(Product, product_id).stock_quantity


class TestSuccessfulSubmission:

    def test_creates_order_for_new_phone(self, db, intake_service):
        result = intake_service.submit(db, "555-1234", WIDGET_ID)

        assert result.success is True
        assert result.message == SUCCESS_MESSAGE
        assert result.error is None

        order = db.get(Order, result.order_id)
        assert order.created_via == "phone_order"
        assert order.status == "processing"
        assert order.billing_phone == "555-1234"
        assert order.payment_method_title == PAYMENT_METHOD_TITLE
        assert order.total == pytest.approx(19.99)
        assert len(order.items) == 1
        assert order.items[0].product_id == WIDGET_ID
        assert order.items[0].quantity == 1
        assert [n.content for n in order.notes] == [ORDER_NOTE]

        customer = db.get(Customer, result.customer_id)
        assert customer.phone == "555-1234"
        assert customer.email == "guest_5551234@phone-order.local"

    def test_phone_is_trimmed_before_storage(self, db, intake_service):
        result = intake_service.submit(db, "  555-1234  ", WIDGET_ID)

        assert result.success
        assert db.get(Order, result.order_id).billing_phone == "555-1234"

    def test_repeat_phone_reuses_customer(self, db, intake_service):
        first = intake_service.submit(db, "555-1234", WIDGET_ID)
        second = intake_service.submit(db, "555-1234", UNMANAGED_ID)

        assert first.customer_id == second.customer_id
        assert first.order_id != second.order_id
        assert db.query(Customer).count() == 1

    def test_quantity_sets_totals_and_decrements_stock(self, db, intake_service):
        result = intake_service.submit(db, "555-1234", WIDGET_ID, quantity=3)

        assert result.success
        order = db.get(Order, result.order_id)
        assert order.items[0].quantity == 3
        assert order.total == pytest.approx(59.97)
        assert _stock(db, WIDGET_ID) == 7

    def test_last_unit_marks_product_out_of_stock(self, db, intake_service):
        result = intake_service.submit(db, "555-1234", LOW_STOCK_ID, quantity=2)

        assert result.success
        db.expire_all()
        product = db.get(Product, LOW_STOCK_ID)
        assert product.stock_quantity == 0
        assert product.stock_status == "outofstock"

    def test_unmanaged_stock_is_not_touched(self, db, intake_service):
        result = intake_service.submit(db, "555-1234", UNMANAGED_ID, quantity=5)

        assert result.success
        assert _stock(db, UNMANAGED_ID) is None

    def test_records_analytics_and_publishes_events(self, db, intake_service, events):
        created, tracked = [], []
        events.subscribe(ORDER_CREATED, lambda **kw: created.append(kw))
        events.subscribe(ANALYTICS_TRACKED, lambda **kw: tracked.append(kw))

        meta = {"user_agent": "pytest-agent", "ip_address": "203.0.113.9"}
        result = intake_service.submit(db, "555-1234", WIDGET_ID, client_meta=meta)

        record = db.query(OrderAnalytics).filter_by(order_id=result.order_id).one()
        assert record.phone == "555-1234"
        assert record.product_id == WIDGET_ID
        assert record.user_agent == "pytest-agent"
        assert record.ip_address == "203.0.113.9"

        assert created == [{"order_id": result.order_id, "phone": "555-1234", "product_id": WIDGET_ID}]
        assert tracked[0]["record"]["order_id"] == result.order_id

    def test_analytics_disabled_skips_record(self, db, intake_service, settings_store):
        settings_store.set("enable_analytics", False)

        result = intake_service.submit(db, "555-1234", WIDGET_ID)

        assert result.success
        assert db.query(OrderAnalytics).count() == 0

    def test_analytics_failure_keeps_order(self, db, intake_service, analytics, monkeypatch, caplog):
        real_record = analytics.record_order

        def broken_add(_obj):
            raise RuntimeError("analytics store unavailable")

        def record_with_failing_write(session, *args, **kwargs):
            session.add = broken_add
            try:
                return real_record(session, *args, **kwargs)
            finally:
                del session.add

        monkeypatch.setattr(analytics, "record_order", record_with_failing_write)

        with caplog.at_level(logging.ERROR):
            result = intake_service.submit(db, "555-1234", WIDGET_ID)

        assert result.success
        db.expire_all()
        assert db.get(Order, result.order_id) is not None
        assert db.query(OrderAnalytics).count() == 0
        assert any("AnalyticsWriteFailed" in r.getMessage() for r in caplog.records)


class TestRejectedSubmission:

    def test_orders_disabled(self, db, intake_service, settings_store):
        settings_store.set("enabled", False)

        result = intake_service.submit(db, "555-1234", WIDGET_ID)

        assert result.success is False
        assert result.error == IntakeError.ORDERS_DISABLED
        assert db.query(Order).count() == 0

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_invalid_quantity(self, db, intake_service, quantity):
        result = intake_service.submit(db, "555-1234", WIDGET_ID, quantity=quantity)
        assert result.error == IntakeError.INVALID_QUANTITY

    @pytest.mark.parametrize("phone", ["", "1234", "call me maybe", "1" * 21])
    def test_invalid_phone(self, db, intake_service, phone):
        result = intake_service.submit(db, phone, WIDGET_ID)

        assert result.error == IntakeError.INVALID_PHONE
        assert result.message == "Please enter a valid phone number"
        assert db.query(Customer).count() == 0

    def test_product_not_found(self, db, intake_service):
        result = intake_service.submit(db, "555-1234", 9999)
        assert result.error == IntakeError.PRODUCT_NOT_FOUND
        assert result.message == "Invalid product"

    def test_product_not_purchasable(self, db, intake_service):
        result = intake_service.submit(db, "555-1234", GADGET_ID)
        assert result.error == IntakeError.PRODUCT_NOT_PURCHASABLE

    def test_out_of_stock(self, db, intake_service):
        result = intake_service.submit(db, "555-1234", SOLD_OUT_ID)

        assert result.error == IntakeError.OUT_OF_STOCK
        assert db.query(Customer).count() == 0

    def test_quantity_above_stock(self, db, intake_service):
        result = intake_service.submit(db, "555-1234", LOW_STOCK_ID, quantity=3)

        assert result.error == IntakeError.OUT_OF_STOCK
        assert _stock(db, LOW_STOCK_ID) == 2

    def test_stock_taken_concurrently_rolls_back_order(self, db, intake_service, monkeypatch):
        import phone_order.services.intake as intake_mod

        monkeypatch.setattr(intake_mod, "decrement_stock", lambda *_args: False)

        result = intake_service.submit(db, "555-1234", WIDGET_ID)

        assert result.error == IntakeError.OUT_OF_STOCK
        db.expire_all()
        assert db.query(Order).count() == 0

    def test_customer_resolution_failure_is_generic(self, db, intake_service, resolver, monkeypatch):
        from phone_order.services import CustomerResolutionError

        def fail(*_args):
            raise CustomerResolutionError("identity store down")

        monkeypatch.setattr(resolver, "resolve", fail)

        result = intake_service.submit(db, "555-1234", WIDGET_ID)

        assert result.error == IntakeError.CUSTOMER_RESOLUTION_FAILED
        assert result.message == GENERIC_FAILURE_MESSAGE
        assert "identity" not in result.message

    def test_expired_deadline_writes_nothing(self, db, intake_service):
        result = intake_service.submit(db, "555-1234", WIDGET_ID, deadline=time.monotonic() - 1)

        assert result.error == IntakeError.ORDER_CREATION_FAILED
        assert result.message == GENERIC_FAILURE_MESSAGE
        db.expire_all()
        assert db.query(Order).count() == 0
        assert db.query(Customer).count() == 0
        assert _stock(db, WIDGET_ID) == 10

    def test_deadline_passing_during_resolution_rolls_back_order(self, db, intake_service, resolver, monkeypatch):
        real_resolve = resolver.resolve
        deadline = time.monotonic() + 60
        clock = {"now": None}

        def resolve_then_expire(session, phone):
            customer_id = real_resolve(session, phone)
            clock["now"] = deadline + 1
            return customer_id

        import phone_order.services.intake as intake_mod

        monkeypatch.setattr(resolver, "resolve", resolve_then_expire)
        monkeypatch.setattr(intake_mod, "time", SimpleNamespace(
            monotonic=lambda: clock["now"] if clock["now"] is not None else deadline - 30,
        ))

        result = intake_service.submit(db, "555-1234", WIDGET_ID, deadline=deadline)

        assert result.error == IntakeError.ORDER_CREATION_FAILED
        db.expire_all()
        assert db.query(Order).count() == 0
        assert _stock(db, WIDGET_ID) == 10

    def test_no_event_on_failure(self, db, intake_service, events):
        created = []
        events.subscribe(ORDER_CREATED, lambda **kw: created.append(kw))

        intake_service.submit(db, "555-1234", SOLD_OUT_ID)
        assert created == []


class TestCheckAvailability:

    def test_available_product(self, db, intake_service):
        info = intake_service.check_availability(db, WIDGET_ID)
        assert info == {
            "product_id": WIDGET_ID,
            "available": True,
            "in_stock": True,
            "purchasable": True,
            "product_name": "Widget",
            "price": "19.99",
        }

    def test_not_purchasable(self, db, intake_service):
        info = intake_service.check_availability(db, GADGET_ID)
        assert info["available"] is False
        assert info["in_stock"] is True
        assert info["purchasable"] is False

    def test_sold_out(self, db, intake_service):
        info = intake_service.check_availability(db, SOLD_OUT_ID)
        assert info["available"] is False
        assert info["in_stock"] is False

    def test_missing_product(self, db, intake_service):
        info = intake_service.check_availability(db, 9999)
        assert info["available"] is False
        assert info["product_name"] is None
