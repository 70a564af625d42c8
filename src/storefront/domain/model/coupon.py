"""Coupon: a one-shot percentage discount."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.value_objects import Money


def normalize_code(code: str) -> str:
    return code.strip().upper()


@dataclass
class Coupon:
    """Invariant: ``is_used`` goes from False to True exactly once, in the
    same transaction as the order that consumed it.
    """

    code: str
    discount_percent: Decimal
    is_used: bool = False
    used_at: datetime | None = None
    used_by_order_id: int | None = None
    used_by_holder_id: str | None = None
    id: int | None = None

    def __post_init__(self) -> None:
        self.code = normalize_code(self.code)
        if not self.code:
            raise ValidationError("Coupon code is required")
        if not Decimal("1") <= Decimal(self.discount_percent) <= Decimal("100"):
            raise ValidationError(
                f"Discount percent must be between 1 and 100, got {self.discount_percent}"
            )

    def discount_for(self, subtotal: Money) -> Money:
        return subtotal.percent(self.discount_percent)
