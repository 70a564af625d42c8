"""Domain service: Order Status Resolver.

The customer-facing status is a pure function of stored facts: payment
outcome, shipment and delivery timestamps.  ``Order.status`` is only a
cache of this function's result, so the resolver is re-applied after
every mutation and on every read.  CANCELLED and REFUNDED are the only
values set by hand (explicit admin actions) and are never overridden.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from storefront.domain.model.order import (
    DEFAULT_DELAY_THRESHOLD_DAYS,
    TERMINAL_STATUSES,
    OrderStatus,
    PaymentStatus,
)

if TYPE_CHECKING:
    from storefront.domain.model.order import Order


def resolve_status(
    order: Order,
    now: datetime,
    delay_threshold_days: int = DEFAULT_DELAY_THRESHOLD_DAYS,
) -> OrderStatus:
    if order.status in TERMINAL_STATUSES:
        return order.status

    if order.delivered_at is not None:
        return OrderStatus.DELIVERED

    if order.shipped_at is not None:
        # whole days, so "more than 3 days" means the 4th day has started
        if (now - order.shipped_at).days > delay_threshold_days:
            return OrderStatus.DELAYED
        return OrderStatus.SHIPPED

    if order.payment_status is PaymentStatus.PAID:
        return OrderStatus.CONFIRMED

    return OrderStatus.PENDING
