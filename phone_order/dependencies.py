"""
FastAPI dependencies for the services built in ``create_app``.

Services are created once per application and stored on ``app.state``;
route handlers receive them through these functions instead of importing
module-level singletons.
"""

import ipaddress
from typing import Any, Dict

from fastapi import Request

from .events import EventBus
from .services import (
    AnalyticsAggregator,
    IntakeDispatcher,
    OrderIntakeService,
    SettingsStore,
)

# Checked in order; the first header holding a valid IP wins
CLIENT_IP_HEADERS = (
    "client-ip",
    "x-forwarded-for",
    "x-forwarded",
    "x-cluster-client-ip",
    "forwarded-for",
    "forwarded",
)


def get_settings_store(request: Request) -> SettingsStore:
    return request.app.state.settings_store


def get_intake_service(request: Request) -> OrderIntakeService:
    return request.app.state.intake_service


def get_dispatcher(request: Request) -> IntakeDispatcher:
    return request.app.state.dispatcher


def get_analytics(request: Request) -> AnalyticsAggregator:
    return request.app.state.analytics


def get_event_bus(request: Request) -> EventBus:
    return request.app.state.events


def _valid_ip(value: str) -> bool:
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def get_client_ip(request: Request) -> str:
    for header in CLIENT_IP_HEADERS:
        raw = request.headers.get(header)
        if not raw:
            continue
        # X-Forwarded-For may carry a proxy chain; the client is first
        candidate = raw.split(",")[0].strip()
        if _valid_ip(candidate):
            return candidate

    if request.client and request.client.host and _valid_ip(request.client.host):
        return request.client.host
    return "0.0.0.0"


def get_client_meta(request: Request) -> Dict[str, Any]:
    return {
        "user_agent": request.headers.get("user-agent", ""),
        "ip_address": get_client_ip(request),
    }
