"""Background reservation sweeper.

Lazy expiry only runs when someone touches a cart; the sweeper reclaims
leases on products nobody looks at again.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from storefront.application.sweep_reservations import SweepReservationsHandler
from storefront.application.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class ReservationSweeper:
    """Runs the reservation sweep on a fixed interval."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        interval_seconds: float = 60,
    ) -> None:
        self.uow_factory = uow_factory
        self.interval_seconds = interval_seconds
        self._running = False
        self._task: asyncio.Task | None = None

    async def start(self) -> None:
        """Start the sweeper."""
        if self._running:
            logger.warning("Reservation sweeper already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run())
        logger.info("Reservation sweeper started (every %ss)", self.interval_seconds)

    async def stop(self) -> None:
        """Stop the sweeper."""
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

        logger.info("Reservation sweeper stopped")

    async def _run(self) -> None:
        while self._running:
            try:
                # sync SQLAlchemy; keep it off the event loop
                await asyncio.to_thread(self.sweep_once)
            except Exception:
                logger.error("Error in reservation sweeper", exc_info=True)

            await asyncio.sleep(self.interval_seconds)

    def sweep_once(self) -> int:
        result = SweepReservationsHandler(self.uow_factory()).handle()
        return result.removed
