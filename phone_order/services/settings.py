"""
Settings Store for the Phone Order Service
==========================================

Holds the display/behavior configuration read by the intake service and the
API layer. Settings live in the ``options`` table:

- ``phone_order_settings``: the combined settings object (JSON dict)
- ``phone_order_<key>``: legacy flat per-key values from older installs

Lookup Precedence:
------------------
1. A legacy flat key ``phone_order_<key>`` if present
2. The stored combined settings object (merged over the built-in defaults)
3. The caller's default
4. The built-in default

Older installs stored flags as ``"yes"``/``"no"`` strings; ``is_enabled``
understands both those and real booleans.

The combined object is cached in memory after first load and replaced on
every write. Flat override keys are read on each ``get`` since they can be
written by migration tooling outside this process.

Usage:
------
    settings = SettingsStore(SessionLocal)
    settings.get("form_title")                 # "Order by Phone"
    settings.set("form_button_text", "Call me")
    settings.is_enabled("enable_analytics")    # True
"""

import logging
import threading
from typing import Any, Callable, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import Option


logger = logging.getLogger(__name__)

OPTION_NAME = "phone_order_settings"
LEGACY_KEY_PREFIX = "phone_order_"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "enabled": True,
    "display_position": "after_summary",
    "form_title": "Order by Phone",
    "form_subtitle": "Quick order with just your phone number",
    "form_description": "Enter your phone number and we'll call you to complete your order",
    "form_button_text": "Order Now",
    "out_of_stock_behavior": "hide",
    "enable_analytics": True,
    "enable_abilities_api": True,
}

DISPLAY_POSITIONS = ("after_summary", "after_add_to_cart", "disabled")
OUT_OF_STOCK_BEHAVIORS = ("hide", "disabled", "show")

_TRUTHY = {"yes", "true", "1", "on"}


def as_flag(value: Any) -> bool:
    """Interpret a stored flag: True, "yes", "1", "true", "on" are on."""
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return bool(value)


class SettingsStore:
    def __init__(self, session_factory: Callable[[], Session], defaults: Optional[Dict[str, Any]] = None):
        self._session_factory = session_factory
        self.defaults = dict(defaults if defaults is not None else DEFAULT_SETTINGS)
        self._settings: Optional[Dict[str, Any]] = None
        self._lock = threading.Lock()

    def get_all(self) -> Dict[str, Any]:
        """Stored combined settings merged over the defaults."""
        with self._lock:
            if self._settings is None:
                stored = self._read_option(OPTION_NAME) or {}
                self._settings = {**self.defaults, **stored}
            return dict(self._settings)

    def get(self, key: str, default: Any = None) -> Any:
        override = self._read_option(LEGACY_KEY_PREFIX + key)
        if override is not None:
            return override

        settings = self.get_all()
        if settings.get(key) is not None:
            return settings[key]
        if default is not None:
            return default
        return self.defaults.get(key)

    def is_enabled(self, key: str) -> bool:
        return as_flag(self.get(key))

    def set(self, key: str, value: Any) -> bool:
        return self.set_multiple({key: value})

    def set_multiple(self, values: Dict[str, Any]) -> bool:
        """
        Merge ``values`` into the combined settings object and persist it.

        Returns:
            True if the write succeeded, False if the store rejected it.
        """
        settings = {**self.get_all(), **values}
        if not self._write_option(OPTION_NAME, settings):
            return False

        with self._lock:
            self._settings = settings
        logger.info("Updated phone order settings: %s", ", ".join(sorted(values)))
        return True

    def reload(self) -> None:
        with self._lock:
            self._settings = None

    def _read_option(self, name: str) -> Any:
        db = self._session_factory()
        try:
            return db.query(Option.value).filter(Option.name == name).scalar()
        finally:
            db.close()

    def _write_option(self, name: str, value: Any) -> bool:
        db = self._session_factory()
        try:
            option = db.query(Option).filter(Option.name == name).one_or_none()
            if option is None:
                db.add(Option(name=name, value=value))
            else:
                option.value = value
            db.commit()
            return True
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to save option %s", name)
            return False
        finally:
            db.close()
