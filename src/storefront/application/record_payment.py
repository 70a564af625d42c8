"""Application service: Record Payment use case.

The payment gateway is a black box; this handler only applies the
outcome it reports.  PAID confirms a pending order, FAILED cancels an
order that has not shipped.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from storefront.application.dto import OrderDTO
from storefront.application.show_order import reconcile_status
from storefront.application.unit_of_work import UnitOfWork
from storefront.domain.exceptions import EntityNotFoundError, ValidationError
from storefront.domain.model.cart import utcnow
from storefront.domain.model.order import DEFAULT_DELAY_THRESHOLD_DAYS, PaymentStatus

logger = logging.getLogger(__name__)


class RecordPaymentHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Callable[[], datetime] = utcnow,
        delay_threshold_days: int = DEFAULT_DELAY_THRESHOLD_DAYS,
    ) -> None:
        self._uow = uow
        self._clock = clock
        self._delay_threshold_days = delay_threshold_days

    def handle(self, order_id: int, payment_status: PaymentStatus) -> OrderDTO:
        if payment_status not in (PaymentStatus.PAID, PaymentStatus.FAILED):
            raise ValidationError(
                f"Payment outcome must be PAID or FAILED, got {payment_status.value}"
            )
        now = self._clock()
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            order.record_payment(payment_status, now)
            uow.orders.save(order)
            reconcile_status(uow, order, now, self._delay_threshold_days)
            uow.commit()

        logger.info(
            "Payment %s recorded for order %s (status %s)",
            payment_status.value, order.order_number, order.status.value,
        )
        return OrderDTO.from_domain(order)
