"""Cart lines and reservation leases.

A cart is the set of CartLines sharing a ``holder_id``.  Lines for a
product with a single unit left also carry a Reservation: an exclusive,
time-boxed lease on that unit.  The lease lives in its own store keyed
by product (so there can only ever be one), and its expiry is mirrored
onto the holder's line for display.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.value_objects import Money

RESERVATION_TTL = timedelta(minutes=20)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CartLine:
    holder_id: str
    product_id: str
    quantity: int
    snapshot_price: Money | None = None  # what the shopper saw when adding
    reservation_expires_at: datetime | None = None
    id: int | None = None
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValidationError("Cart quantity must be at least 1")

    def reservation_lapsed(self, now: datetime) -> bool:
        return (
            self.reservation_expires_at is not None
            and self.reservation_expires_at < now
        )


@dataclass(frozen=True)
class Reservation:
    """Exclusive lease on the last unit of ``product_id``."""

    product_id: str
    holder_id: str
    expires_at: datetime

    def is_active(self, now: datetime) -> bool:
        # expires_at == now still counts as held; the sweep removes < now
        return self.expires_at >= now

    def is_held_by(self, holder_id: str, now: datetime) -> bool:
        return self.holder_id == holder_id and self.is_active(now)
