"""Abstract repository for coupons."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from storefront.domain.model.coupon import Coupon


class CouponRepository(ABC):

    @abstractmethod
    def get_by_code(self, code: str) -> Coupon | None:
        """Return a coupon by normalised code, or None."""

    @abstractmethod
    def add(self, coupon: Coupon) -> None:
        """Insert a freshly issued coupon."""

    @abstractmethod
    def mark_used(
        self,
        coupon_id: int,
        order_id: int,
        holder_id: str,
        now: datetime,
    ) -> bool:
        """Flip ``is_used`` to True only if it is still False.

        Returns False when another order consumed the coupon first.
        """
