"""
Submission dispatcher: runs each phone order on a worker thread with its own
database session and a per-submission timeout.

A submission that doesn't finish in time is reported to the caller as
OrderCreationFailed. A submission still queued at that point is cancelled;
one already running sees its deadline in the intake service (before customer
resolution and again before commit) and rolls back instead. The deadline
ends slightly before the caller-facing timeout so a commit that has begun
can finish before the caller stops waiting.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from typing import Any, Callable, Dict, Optional

from sqlalchemy.orm import Session

from .. import config
from .intake import IntakeError, IntakeResult, OrderIntakeService

logger = logging.getLogger(__name__)

# The commit deadline ends this much before the caller-facing timeout
COMMIT_MARGIN_SECONDS = 0.5
COMMIT_MARGIN_FRACTION = 0.1


class IntakeDispatcher:
    def __init__(
        self,
        service: OrderIntakeService,
        session_factory: Callable[[], Session],
        max_workers: int = config.INTAKE_WORKERS,
        timeout: float = config.SUBMISSION_TIMEOUT_SECONDS,
    ):
        self.service = service
        self.session_factory = session_factory
        self.timeout = timeout
        self.commit_margin = min(COMMIT_MARGIN_SECONDS, timeout * COMMIT_MARGIN_FRACTION)
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="phone-intake")

    def submit(
        self,
        phone: str,
        product_id: int,
        quantity: int = 1,
        client_meta: Optional[Dict[str, Any]] = None,
    ) -> IntakeResult:
        started = time.monotonic()
        # Commits must start early enough to finish before the caller gives up
        deadline = started + self.timeout - self.commit_margin
        future = self._executor.submit(
            self._run, phone, product_id, quantity, client_meta, deadline
        )
        try:
            return future.result(timeout=self.timeout)
        except FuturesTimeoutError:
            # Still queued behind busy workers: never let it start
            future.cancel()
            logger.error(
                "Phone order error: submission for product #%s timed out after %.1fs",
                product_id, self.timeout,
            )
            return IntakeResult.fail(IntakeError.ORDER_CREATION_FAILED)

    def _run(
        self,
        phone: str,
        product_id: int,
        quantity: int,
        client_meta: Optional[Dict[str, Any]],
        deadline: float,
    ) -> IntakeResult:
        if time.monotonic() > deadline:
            logger.error("Phone order error: submission for product #%s expired while queued", product_id)
            return IntakeResult.fail(IntakeError.ORDER_CREATION_FAILED)

        db = self.session_factory()
        try:
            return self.service.submit(
                db, phone, product_id, quantity=quantity, client_meta=client_meta, deadline=deadline
            )
        except Exception:
            logger.exception("Phone order error: unexpected failure")
            return IntakeResult.fail(IntakeError.ORDER_CREATION_FAILED)
        finally:
            db.close()

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
