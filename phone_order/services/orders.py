"""
Order status changes.

Status changes happen outside intake (staff confirming a callback, cancelling
a no-show). Every effective change publishes ``order.status_changed`` so the
dashboard cache is invalidated and integrations can react.
"""

import logging
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from ..events import ORDER_STATUS_CHANGED, EventBus
from ..repository import set_order_status

logger = logging.getLogger(__name__)


def change_order_status(
    db: Session,
    events: EventBus,
    order_id: int,
    status: str,
) -> Optional[Tuple[str, str]]:
    """
    Set an order's status.

    Returns:
        (old_status, new_status), or None if the order doesn't exist.
    """
    change = set_order_status(db, order_id, status)
    if change is None:
        return None

    old_status, new_status = change
    if old_status != new_status:
        logger.info("Order #%d status %s -> %s", order_id, old_status, new_status)
        events.publish(
            ORDER_STATUS_CHANGED,
            order_id=order_id,
            old_status=old_status,
            new_status=new_status,
        )
    return change
