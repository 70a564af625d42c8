"""Application service: Sweep Expired Reservations.

Run on demand (cleanup endpoint, CLI) and periodically by the sweeper so
leases on products nobody touches again are still reclaimed.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from storefront.application.dto import SweepResultDTO
from storefront.application.unit_of_work import UnitOfWork
from storefront.domain.model.cart import utcnow
from storefront.domain.service.reservation_manager import ReservationManager


class SweepReservationsHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._uow = uow
        self._clock = clock

    def handle(self) -> SweepResultDTO:
        with self._uow as uow:
            manager = ReservationManager(uow.reservations, uow.cart)
            expired = manager.remove_expired_reservations(self._clock())
            uow.commit()
        return SweepResultDTO(
            removed=len(expired),
            items=[(e.holder_id, e.product_id) for e in expired],
        )
