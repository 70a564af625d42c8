"""SQLAlchemy-backed implementation of CartRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from storefront.domain.model.cart import CartLine
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.cart_repository import CartRepository
from storefront.infrastructure.persistence.models import CartLineRow


class SqlCartRepository(CartRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_for_holder(self, holder_id: str) -> list[CartLine]:
        rows = self._session.scalars(
            select(CartLineRow)
            .where(CartLineRow.holder_id == holder_id)
            .order_by(CartLineRow.created_at.desc(), CartLineRow.id.desc())
        )
        return [self._to_domain(row) for row in rows]

    def get_line(self, holder_id: str, product_id: str) -> CartLine | None:
        row = self._find(holder_id, product_id)
        return self._to_domain(row) if row is not None else None

    def save_line(self, line: CartLine) -> None:
        row = self._find(line.holder_id, line.product_id)
        if row is None:
            row = CartLineRow(
                holder_id=line.holder_id,
                product_id=line.product_id,
                created_at=line.created_at,
            )
            self._session.add(row)
        row.quantity = line.quantity
        row.snapshot_price = line.snapshot_price.amount if line.snapshot_price else None
        row.reservation_expires_at = line.reservation_expires_at
        self._session.flush()
        line.id = row.id

    def delete_line(self, holder_id: str, product_id: str) -> bool:
        row = self._find(holder_id, product_id)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True

    def clear(self, holder_id: str) -> int:
        result = self._session.execute(
            delete(CartLineRow)
            .where(CartLineRow.holder_id == holder_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def delete_lapsed(self, now: datetime) -> list[CartLine]:
        lapsed = CartLineRow.reservation_expires_at < now
        lines = [
            self._to_domain(row)
            for row in self._session.scalars(select(CartLineRow).where(lapsed))
        ]
        if lines:
            self._session.execute(
                delete(CartLineRow)
                .where(lapsed)
                .execution_options(synchronize_session=False)
            )
        return lines

    def clear_reservation_expiry(self, product_id: str) -> int:
        result = self._session.execute(
            update(CartLineRow)
            .where(
                CartLineRow.product_id == product_id,
                CartLineRow.reservation_expires_at.is_not(None),
            )
            .values(reservation_expires_at=None)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    # --- Helpers --------------------------------------------------------------

    def _find(self, holder_id: str, product_id: str) -> CartLineRow | None:
        return self._session.scalars(
            select(CartLineRow).where(
                CartLineRow.holder_id == holder_id,
                CartLineRow.product_id == product_id,
            )
        ).first()

    @staticmethod
    def _to_domain(row: CartLineRow) -> CartLine:
        return CartLine(
            holder_id=row.holder_id,
            product_id=row.product_id,
            quantity=row.quantity,
            snapshot_price=(
                Money(Decimal(row.snapshot_price)) if row.snapshot_price is not None else None
            ),
            reservation_expires_at=row.reservation_expires_at,
            id=row.id,
            created_at=row.created_at,
        )
