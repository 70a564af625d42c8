"""SQLAlchemy-backed implementation of ReservationRepository.

The table's primary key is ``product_id``, so the database itself
guarantees at most one lease per product.  Acquiring is a conditional
UPDATE (renew own lease, or take over a lapsed one) falling back to an
INSERT that loses cleanly to a concurrent insert.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, insert, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.domain.model.cart import Reservation
from storefront.domain.repository.reservation_repository import (
    ReservationRepository,
)
from storefront.infrastructure.persistence.models import ReservationRow


class SqlReservationRepository(ReservationRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, product_id: str) -> Reservation | None:
        row = self._session.execute(
            select(ReservationRow.product_id, ReservationRow.holder_id, ReservationRow.expires_at)
            .where(ReservationRow.product_id == product_id)
        ).first()
        if row is None:
            return None
        return Reservation(product_id=row.product_id, holder_id=row.holder_id, expires_at=row.expires_at)

    def try_acquire(
        self,
        product_id: str,
        holder_id: str,
        expires_at: datetime,
        now: datetime,
    ) -> bool:
        renewed = self._session.execute(
            update(ReservationRow)
            .where(
                ReservationRow.product_id == product_id,
                or_(ReservationRow.holder_id == holder_id, ReservationRow.expires_at < now),
            )
            .values(holder_id=holder_id, expires_at=expires_at)
            .execution_options(synchronize_session=False)
        )
        if renewed.rowcount == 1:
            return True

        taken = self._session.scalar(
            select(ReservationRow.product_id).where(ReservationRow.product_id == product_id)
        )
        if taken is not None:
            return False

        try:
            self._session.execute(
                insert(ReservationRow).values(
                    product_id=product_id, holder_id=holder_id, expires_at=expires_at
                )
            )
        except IntegrityError:
            # a concurrent holder inserted first; the caller aborts the unit
            return False
        return True

    def release(self, product_id: str, holder_id: str) -> bool:
        result = self._session.execute(
            delete(ReservationRow)
            .where(
                ReservationRow.product_id == product_id,
                ReservationRow.holder_id == holder_id,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    def release_product(self, product_id: str) -> bool:
        result = self._session.execute(
            delete(ReservationRow)
            .where(ReservationRow.product_id == product_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    def delete_expired(self, now: datetime) -> list[Reservation]:
        expired = ReservationRow.expires_at < now
        leases = [
            Reservation(product_id=row.product_id, holder_id=row.holder_id, expires_at=row.expires_at)
            for row in self._session.execute(
                select(ReservationRow.product_id, ReservationRow.holder_id, ReservationRow.expires_at)
                .where(expired)
            )
        ]
        if leases:
            self._session.execute(
                delete(ReservationRow)
                .where(expired)
                .execution_options(synchronize_session=False)
            )
        return leases
