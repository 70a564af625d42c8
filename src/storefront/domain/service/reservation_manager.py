"""Domain service: Reservation Manager.

Prevents two shoppers from both believing they can check out the last
unit of a product.  A shopper who puts a single-unit product in the
cart gets an exclusive lease on it for ``RESERVATION_TTL``; every cart
mutation renews the lease (sliding expiry).

Expiry is enforced lazily: callers run ``remove_expired_reservations()``
at the top of every cart read, cart write and checkout, and a periodic
sweeper reclaims leases nobody touches again.  A lease is therefore only
guaranteed to be treated as expired by the next operation after
``expires_at``, not exactly at it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from storefront.domain.exceptions import ReservationConflictError
from storefront.domain.model.cart import RESERVATION_TTL
from storefront.domain.model.product import Product
from storefront.domain.repository.cart_repository import CartRepository
from storefront.domain.repository.reservation_repository import (
    ReservationRepository,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExpiredReservation:
    holder_id: str
    product_id: str


class ReservationManager:

    def __init__(
        self,
        reservations: ReservationRepository,
        cart: CartRepository,
        ttl: timedelta = RESERVATION_TTL,
    ) -> None:
        self._reservations = reservations
        self._cart = cart
        self._ttl = ttl

    def has_active_reservation(
        self,
        product_id: str,
        excluding_holder_id: str | None,
        now: datetime,
    ) -> bool:
        """True if someone other than ``excluding_holder_id`` holds the product."""
        lease = self._reservations.get(product_id)
        if lease is None or not lease.is_active(now):
            return False
        return lease.holder_id != excluding_holder_id

    def holds_reservation(self, holder_id: str, product_id: str, now: datetime) -> bool:
        lease = self._reservations.get(product_id)
        return lease is not None and lease.is_held_by(holder_id, now)

    def create_or_update_reservation(
        self,
        holder_id: str,
        product: Product,
        quantity: int,
        now: datetime,
    ) -> datetime | None:
        """Grant or renew the holder's lease on a single-unit product.

        Returns the new expiry, or None when the product does not need a
        lease (more than one unit, or nothing requested).  Raises
        ReservationConflictError when another shopper's lease is active.
        """
        if not product.is_scarce or quantity < 1:
            return None

        expires_at = now + self._ttl
        if not self._reservations.try_acquire(product.id, holder_id, expires_at, now):
            logger.info(
                "Reservation conflict on product %s for holder %s", product.id, holder_id
            )
            raise ReservationConflictError(
                f"{product.name} is temporarily reserved by another customer. "
                "Please try again later.",
                product_id=product.id,
                product_name=product.name,
            )
        logger.debug(
            "Reservation on product %s held by %s until %s",
            product.id, holder_id, expires_at.isoformat(),
        )
        return expires_at

    def release(self, holder_id: str, product_id: str) -> None:
        if self._reservations.release(product_id, holder_id):
            logger.debug("Released reservation on %s held by %s", product_id, holder_id)

    def release_product(self, product_id: str) -> None:
        """Drop any lease on the product and the expiry mirrored on cart lines."""
        released = self._reservations.release_product(product_id)
        self._cart.clear_reservation_expiry(product_id)
        if released:
            logger.info("Released reservation on restocked product %s", product_id)

    def remove_expired_reservations(self, now: datetime) -> list[ExpiredReservation]:
        """Delete lapsed leases and the cart lines that carried them.

        Idempotent: a second call with the same ``now`` finds nothing.
        """
        expired: dict[tuple[str, str], ExpiredReservation] = {}
        for lease in self._reservations.delete_expired(now):
            key = (lease.holder_id, lease.product_id)
            expired[key] = ExpiredReservation(*key)
        for line in self._cart.delete_lapsed(now):
            key = (line.holder_id, line.product_id)
            expired[key] = ExpiredReservation(*key)

        if expired:
            logger.info("Removed %d expired reservation(s)", len(expired))
        return list(expired.values())
