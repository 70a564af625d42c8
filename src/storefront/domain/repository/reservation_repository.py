"""Abstract repository for reservation leases (one row per product)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from storefront.domain.model.cart import Reservation


class ReservationRepository(ABC):

    @abstractmethod
    def get(self, product_id: str) -> Reservation | None:
        """Return the lease on a product (active or not), or None."""

    @abstractmethod
    def try_acquire(
        self,
        product_id: str,
        holder_id: str,
        expires_at: datetime,
        now: datetime,
    ) -> bool:
        """Create or renew the lease for ``holder_id`` in one conditional write.

        Succeeds when there is no lease, when the lease already belongs
        to ``holder_id``, or when the existing lease expired before
        ``now``.  Returns False, without writing, when another holder's
        lease is still active.
        """

    @abstractmethod
    def release(self, product_id: str, holder_id: str) -> bool:
        """Drop the lease if ``holder_id`` owns it."""

    @abstractmethod
    def release_product(self, product_id: str) -> bool:
        """Drop whatever lease exists on the product."""

    @abstractmethod
    def delete_expired(self, now: datetime) -> list[Reservation]:
        """Delete and return every lease that expired before ``now``."""
