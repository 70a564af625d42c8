"""SQLAlchemy-backed implementation of CouponRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.domain.model.coupon import Coupon, normalize_code
from storefront.domain.repository.coupon_repository import CouponRepository
from storefront.infrastructure.persistence.models import CouponRow


class SqlCouponRepository(CouponRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_code(self, code: str) -> Coupon | None:
        row = self._session.scalars(
            select(CouponRow)
            .where(CouponRow.code == normalize_code(code))
            .execution_options(populate_existing=True)
        ).first()
        return self._to_domain(row) if row is not None else None

    def add(self, coupon: Coupon) -> None:
        row = CouponRow(
            code=coupon.code,
            discount_percent=coupon.discount_percent,
            is_used=coupon.is_used,
            used_at=coupon.used_at,
            used_by_order_id=coupon.used_by_order_id,
            used_by_holder_id=coupon.used_by_holder_id,
        )
        self._session.add(row)
        self._session.flush()
        coupon.id = row.id

    def mark_used(
        self,
        coupon_id: int,
        order_id: int,
        holder_id: str,
        now: datetime,
    ) -> bool:
        result = self._session.execute(
            update(CouponRow)
            .where(CouponRow.id == coupon_id, CouponRow.is_used.is_(False))
            .values(
                is_used=True,
                used_at=now,
                used_by_order_id=order_id,
                used_by_holder_id=holder_id,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @staticmethod
    def _to_domain(row: CouponRow) -> Coupon:
        return Coupon(
            code=row.code,
            discount_percent=Decimal(row.discount_percent),
            is_used=row.is_used,
            used_at=row.used_at,
            used_by_order_id=row.used_by_order_id,
            used_by_holder_id=row.used_by_holder_id,
            id=row.id,
        )
