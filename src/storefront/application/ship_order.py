"""Application service: shipping use cases (attach tracking, mark delivered)."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from storefront.application.dto import OrderDTO
from storefront.application.show_order import reconcile_status
from storefront.application.unit_of_work import UnitOfWork
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.cart import utcnow
from storefront.domain.model.order import DEFAULT_DELAY_THRESHOLD_DAYS

logger = logging.getLogger(__name__)


class AttachTrackingHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Callable[[], datetime] = utcnow,
        delay_threshold_days: int = DEFAULT_DELAY_THRESHOLD_DAYS,
    ) -> None:
        self._uow = uow
        self._clock = clock
        self._delay_threshold_days = delay_threshold_days

    def handle(
        self,
        order_id: int,
        tracking_number: str,
        carrier: str | None = None,
    ) -> OrderDTO:
        """Attach tracking.  The first tracking number marks the order shipped."""
        now = self._clock()
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            order.attach_tracking(tracking_number, now, carrier=carrier)
            uow.orders.save(order)
            reconcile_status(uow, order, now, self._delay_threshold_days)
            uow.commit()

        logger.info("Order %s shipped with tracking %s", order.order_number, order.tracking_number)
        return OrderDTO.from_domain(order)


class MarkDeliveredHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._uow = uow
        self._clock = clock

    def handle(self, order_id: int) -> OrderDTO:
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            order.mark_delivered(self._clock())
            uow.orders.save(order)
            uow.commit()

        logger.info("Order %s delivered", order.order_number)
        return OrderDTO.from_domain(order)
