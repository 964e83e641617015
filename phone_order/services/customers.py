"""
Customer Resolution Service
===========================

Maps a phone number to a stable customer id, creating a guest customer the
first time a phone is seen.

Resolution Order:
-----------------
1. Cache lookup keyed by ``phone_order_customer_<md5(phone)>``
2. Exact phone match in the identity store (hit is cached for 1 hour)
3. Guest creation with a synthesized username and email

Only positive results are cached. Caching "not found" would make every
repeat caller within the TTL create a new guest.

Guest Identity:
---------------
- username: ``guest_<digits>_<unix timestamp>_<4 hex chars>``
- email: ``guest_<digits>@<domain>``; if taken (two raw phones that reduce to
  the same digits), ``guest_<digits>_<6 random chars>@<domain>`` until free
- phone: stored exactly as submitted (trimmed), not the digit string

Concurrency:
------------
Two simultaneous first submissions for the same phone can both miss the
lookup. The unique constraint on ``customers.phone`` makes the second insert
fail; the resolver then retries the lookup, which now finds the winner's
row. After ``max_retries`` conflicting attempts it gives up.
"""

import hashlib
import logging
import secrets
import string
import time
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import config
from ..cache import Cache
from ..phone import digits_only
from ..repository import (
    CustomerConflictError,
    create_customer,
    email_exists,
    find_customer_by_phone,
)


logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "phone_order_customer_"
EMAIL_SUFFIX_LENGTH = 6
_SUFFIX_ALPHABET = string.ascii_letters + string.digits


class CustomerResolutionError(Exception):
    """Raised when a phone can't be mapped to a customer."""


def customer_cache_key(phone: str) -> str:
    return CACHE_KEY_PREFIX + hashlib.md5(phone.encode("utf-8")).hexdigest()


class CustomerResolver:
    def __init__(
        self,
        cache: Cache,
        cache_ttl: float = config.CUSTOMER_CACHE_TTL_SECONDS,
        email_domain: str = config.GUEST_EMAIL_DOMAIN,
        max_retries: int = config.CUSTOMER_RESOLVE_MAX_RETRIES,
    ):
        self.cache = cache
        self.cache_ttl = cache_ttl
        self.email_domain = email_domain
        self.max_retries = max(1, max_retries)

    def resolve(self, db: Session, phone: str) -> int:
        """
        Return the id of the customer owning ``phone``, creating one if needed.

        Args:
            db: Database session
            phone: Validated, trimmed phone string

        Raises:
            CustomerResolutionError: store failure, or conflicts persisted
                past the retry budget.
        """
        cached = self.cache.get(customer_cache_key(phone))
        if cached:
            return int(cached)

        for attempt in range(1, self.max_retries + 1):
            try:
                customer_id = self.find(db, phone)
                if customer_id is not None:
                    return customer_id
                return self._create_guest(db, phone)
            except CustomerConflictError:
                logger.warning(
                    "Customer creation conflict (attempt %d/%d), retrying lookup",
                    attempt, self.max_retries,
                )
            except SQLAlchemyError as e:
                raise CustomerResolutionError(f"Identity store error: {e}") from e

        raise CustomerResolutionError(
            f"Could not resolve customer after {self.max_retries} conflicting attempts"
        )

    def find(self, db: Session, phone: str) -> Optional[int]:
        customer_id = find_customer_by_phone(db, phone)
        if customer_id is not None:
            self.cache.set(customer_cache_key(phone), customer_id, ttl=self.cache_ttl)
        return customer_id

    def generate_unique_email(self, db: Session, clean_phone: str) -> str:
        email = f"guest_{clean_phone}@{self.email_domain}"
        while email_exists(db, email):
            suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(EMAIL_SUFFIX_LENGTH))
            email = f"guest_{clean_phone}_{suffix}@{self.email_domain}"
        return email

    def _create_guest(self, db: Session, phone: str) -> int:
        clean_phone = digits_only(phone)
        username = f"guest_{clean_phone}_{int(time.time())}_{secrets.token_hex(2)}"
        email = self.generate_unique_email(db, clean_phone)

        customer_id = create_customer(db, phone=phone, email=email, username=username)
        self.cache.set(customer_cache_key(phone), customer_id, ttl=self.cache_ttl)
        return customer_id
