"""
Admin Settings Routes for the Phone Order Service
=================================================

Read and update the phone order settings (form copy, display position,
out-of-stock behavior, feature flags).

Endpoints:
----------
- GET /admin/phone-order-settings: Effective settings
- PUT /admin/phone-order-settings: Update any subset of settings

Authentication:
---------------
All endpoints require admin authentication via HTTP Basic Auth.

Effective Values:
-----------------
GET reports what the service will actually use: a legacy flat key overrides
the stored settings, which override the built-in defaults.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..auth import verify_admin_credentials
from ..dependencies import get_settings_store
from ..schemas.settings import SettingsOut, SettingsUpdate
from ..services import SettingsStore
from ..services.settings import as_flag


logger = logging.getLogger(__name__)

admin_settings_router = APIRouter(
    prefix="/admin/phone-order-settings",
    tags=["Admin - Phone Order Settings"],
)

FLAG_KEYS = ("enabled", "enable_analytics", "enable_abilities_api")


def _effective_settings(settings: SettingsStore) -> SettingsOut:
    values = {key: settings.get(key) for key in settings.defaults}
    for key in FLAG_KEYS:
        values[key] = as_flag(values[key])
    return SettingsOut(**values)


@admin_settings_router.get("", response_model=SettingsOut)
def get_settings(
    _admin: str = Depends(verify_admin_credentials),
    settings: SettingsStore = Depends(get_settings_store),
) -> SettingsOut:
    return _effective_settings(settings)


@admin_settings_router.put("", response_model=SettingsOut)
def update_settings(
    payload: SettingsUpdate,
    _admin: str = Depends(verify_admin_credentials),
    settings: SettingsStore = Depends(get_settings_store),
) -> SettingsOut:
    """Write the fields present in the request body."""
    changes = payload.model_dump(exclude_unset=True)
    if changes and not settings.set_multiple(changes):
        raise HTTPException(status_code=500, detail="Failed to save settings")
    return _effective_settings(settings)
