import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import phone_order.config as config_mod
from phone_order.app_factory import create_app
from phone_order.cache import InMemoryCache
from phone_order.events import EventBus
from phone_order.models import Base, Product
from phone_order.rate_limit import limiter
from phone_order.services import (
    AnalyticsAggregator,
    CustomerResolver,
    OrderIntakeService,
    SettingsStore,
)

# Test admin credentials
TEST_ADMIN_USERNAME = "testadmin"
TEST_ADMIN_PASSWORD = "testpassword123"

WIDGET_ID = 42
GADGET_ID = 7
SOLD_OUT_ID = 8
UNMANAGED_ID = 9
LOW_STOCK_ID = 10


@pytest.fixture
def session_factory():
    """Session factory bound to a fresh in-memory SQLite DB with a small catalog.

    Uses StaticPool so all connections share the same in-memory database.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    session.add(Product(id=WIDGET_ID, name="Widget", price=19.99, stock_quantity=10))
    session.add(Product(id=GADGET_ID, name="Gadget", price=5.0, stock_quantity=3, is_purchasable=False))
    session.add(Product(id=SOLD_OUT_ID, name="Sold Out Lamp", price=30.0, stock_quantity=0, stock_status="outofstock"))
    session.add(Product(id=UNMANAGED_ID, name="Gift Wrap", price=12.5, stock_quantity=None))
    session.add(Product(id=LOW_STOCK_ID, name="Last Kettle", price=50.0, stock_quantity=2))
    session.commit()
    session.close()

    yield TestingSessionLocal

    engine.dispose()


@pytest.fixture
def db(session_factory):
    s = session_factory()
    yield s
    s.close()


@pytest.fixture
def cache():
    return InMemoryCache()


@pytest.fixture
def events():
    return EventBus()


@pytest.fixture
def settings_store(session_factory):
    return SettingsStore(session_factory)


@pytest.fixture
def resolver(cache):
    return CustomerResolver(cache)


@pytest.fixture
def analytics(cache, events):
    return AnalyticsAggregator(cache, events=events)


@pytest.fixture
def intake_service(settings_store, resolver, analytics, events):
    return OrderIntakeService(settings_store, resolver, analytics, events)


@pytest.fixture
def client(session_factory, cache, events, monkeypatch):
    """Shared FastAPI TestClient wired to the in-memory catalog.

    Sets up test admin credentials and turns rate limiting off.
    """
    monkeypatch.setattr(config_mod, "ADMIN_USERNAME", TEST_ADMIN_USERNAME)
    monkeypatch.setattr(config_mod, "ADMIN_PASSWORD", TEST_ADMIN_PASSWORD)
    monkeypatch.setattr(limiter, "enabled", False)

    app = create_app(session_factory=session_factory, cache=cache, events=events)

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_auth():
    """Returns HTTP Basic Auth tuple for admin endpoints."""
    return (TEST_ADMIN_USERNAME, TEST_ADMIN_PASSWORD)
