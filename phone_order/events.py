"""
In-process domain event bus.

Services publish named events after state changes; subscribers (the analytics
aggregator, integrations) react to them. Publishing never fails because of a
subscriber: handler errors are logged and the remaining handlers still run.

Event names used by the service:
    - phone_order.created: order_id, phone, product_id
    - phone_order.analytics_tracked: the analytics record as a dict
    - order.status_changed: order_id, old_status, new_status
"""

import logging
import threading
from collections import defaultdict
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

ORDER_CREATED = "phone_order.created"
ANALYTICS_TRACKED = "phone_order.analytics_tracked"
ORDER_STATUS_CHANGED = "order.status_changed"

Handler = Callable[..., Any]


class EventBus:
    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, event: str, handler: Handler) -> None:
        with self._lock:
            self._handlers[event].append(handler)

    def unsubscribe(self, event: str, handler: Handler) -> None:
        with self._lock:
            if handler in self._handlers.get(event, []):
                self._handlers[event].remove(handler)

    def publish(self, event: str, **payload: Any) -> int:
        """Call every handler for ``event``. Returns how many succeeded."""
        with self._lock:
            handlers = list(self._handlers.get(event, []))

        delivered = 0
        for handler in handlers:
            try:
                handler(**payload)
                delivered += 1
            except Exception:
                logger.exception("Event handler %r failed for %s", handler, event)
        return delivered
