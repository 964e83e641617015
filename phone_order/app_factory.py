"""
Application factory for the phone order service.

Builds every long-lived service once (settings store, customer resolver,
analytics aggregator, intake service, dispatcher), wires them together
explicitly and stores them on ``app.state`` for the route dependencies.
"""

import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.orm import Session

from . import config
from .cache import Cache, InMemoryCache
from .events import EventBus
from .rate_limit import limiter
from .routes import (
    admin_analytics_router,
    admin_orders_router,
    admin_settings_router,
    phone_order_router,
)
from .services import (
    AnalyticsAggregator,
    CustomerResolver,
    IntakeDispatcher,
    OrderIntakeService,
    SettingsStore,
)

logger = logging.getLogger(__name__)

ROUTERS = (
    phone_order_router,
    admin_analytics_router,
    admin_orders_router,
    admin_settings_router,
)


def create_app(
    session_factory: Optional[Callable[[], Session]] = None,
    cache: Optional[Cache] = None,
    events: Optional[EventBus] = None,
) -> FastAPI:
    """
    Create a FastAPI application.

    Args:
        session_factory: Callable returning a new SQLAlchemy Session. Defaults
                         to the configured database (tables are created).
        cache: Cache backend shared by the resolver and analytics. Defaults
               to a process-local in-memory cache.
        events: Event bus for domain events. A new bus is created if omitted.

    Returns:
        Configured FastAPI application
    """
    if session_factory is None:
        from .db import SessionLocal, init_db

        init_db()
        session_factory = SessionLocal

    cache = cache if cache is not None else InMemoryCache()
    events = events if events is not None else EventBus()

    settings_store = SettingsStore(session_factory)
    resolver = CustomerResolver(cache)
    analytics = AnalyticsAggregator(cache, events=events)
    intake_service = OrderIntakeService(settings_store, resolver, analytics, events)
    dispatcher = IntakeDispatcher(intake_service, session_factory)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        logger.info("Shutting down phone order dispatcher")
        dispatcher.shutdown(wait=True)

    app = FastAPI(
        title="Phone Order API",
        description="Place orders with just a phone number",
        version="2.0.0",
        lifespan=lifespan,
    )

    app.state.session_factory = session_factory
    app.state.cache = cache
    app.state.events = events
    app.state.settings_store = settings_store
    app.state.resolver = resolver
    app.state.analytics = analytics
    app.state.intake_service = intake_service
    app.state.dispatcher = dispatcher

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Include routers with API version prefix
    api_v1 = APIRouter(prefix="/api/v1")
    for router in ROUTERS:
        api_v1.include_router(router)
    app.include_router(api_v1)

    # Also mount at root for backward compatibility
    for router in ROUTERS:
        app.include_router(router)

    @app.get("/health")
    def health_check():
        return {"status": "healthy"}

    logger.info("Phone order application created")
    return app
