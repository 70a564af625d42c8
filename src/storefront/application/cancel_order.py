"""Application service: Cancel / Refund Order use cases.

These are the only hand-set statuses; the resolver treats both as
terminal.  Stock is not returned here: putting parts back on the shelf
is an explicit stock adjustment with its own ledger row.
"""

from __future__ import annotations

import logging

from storefront.application.dto import OrderDTO
from storefront.application.unit_of_work import UnitOfWork
from storefront.domain.exceptions import EntityNotFoundError

logger = logging.getLogger(__name__)


class CancelOrderHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, order_id: int) -> OrderDTO:
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            order.cancel()
            uow.orders.save(order)
            uow.commit()

        logger.info("Order %s cancelled", order.order_number)
        return OrderDTO.from_domain(order)


class RefundOrderHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, order_id: int) -> OrderDTO:
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            order.refund()
            uow.orders.save(order)
            uow.commit()

        logger.info("Order %s refunded", order.order_number)
        return OrderDTO.from_domain(order)
