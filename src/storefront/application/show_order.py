"""Application service: Show / List Orders use cases (queries).

Reads are also where the cached status is reconciled: the resolver is
re-applied with the current time and any difference (typically an order
that has become DELAYED in transit) is written back.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from storefront.application.dto import OrderDTO
from storefront.application.unit_of_work import UnitOfWork
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.cart import utcnow
from storefront.domain.model.order import DEFAULT_DELAY_THRESHOLD_DAYS, Order

logger = logging.getLogger(__name__)


def reconcile_status(
    uow: UnitOfWork,
    order: Order,
    now: datetime,
    delay_threshold_days: int,
) -> None:
    previous = order.status
    if order.refresh_status(now, delay_threshold_days):
        uow.orders.save(order)
        logger.info(
            "Order %s status %s -> %s",
            order.order_number, previous.value, order.status.value,
        )


class ShowOrderHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Callable[[], datetime] = utcnow,
        delay_threshold_days: int = DEFAULT_DELAY_THRESHOLD_DAYS,
    ) -> None:
        self._uow = uow
        self._clock = clock
        self._delay_threshold_days = delay_threshold_days

    def handle(self, order_id: int, holder_id: str | None = None) -> OrderDTO:
        """Return one order.  With ``holder_id`` only the owner may see it."""
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None or (holder_id is not None and order.holder_id != holder_id):
                raise EntityNotFoundError(f"Order #{order_id} not found")
            reconcile_status(uow, order, self._clock(), self._delay_threshold_days)
            uow.commit()
        return OrderDTO.from_domain(order)


class ListOrdersHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Callable[[], datetime] = utcnow,
        delay_threshold_days: int = DEFAULT_DELAY_THRESHOLD_DAYS,
    ) -> None:
        self._uow = uow
        self._clock = clock
        self._delay_threshold_days = delay_threshold_days

    def handle(self, holder_id: str) -> list[OrderDTO]:
        now = self._clock()
        with self._uow as uow:
            orders = uow.orders.list_for_holder(holder_id)
            for order in orders:
                reconcile_status(uow, order, now, self._delay_threshold_days)
            uow.commit()
        return [OrderDTO.from_domain(o) for o in orders]
