"""SQLAlchemy-backed implementation of MovementRepository."""

from __future__ import annotations

import dataclasses

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from storefront.domain.model.inventory import InventoryMovement, MovementType
from storefront.domain.repository.movement_repository import (
    MovementFilter,
    MovementRepository,
    MovementStats,
)
from storefront.infrastructure.persistence.models import MovementRow


class SqlMovementRepository(MovementRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def append(self, movement: InventoryMovement) -> InventoryMovement:
        row = MovementRow(
            product_id=movement.product_id,
            type=movement.type.value,
            quantity=movement.quantity,
            quantity_after=movement.quantity_after,
            reason=movement.reason,
            order_id=movement.order_id,
            holder_id=movement.holder_id,
            created_at=movement.created_at,
        )
        self._session.add(row)
        self._session.flush()
        return dataclasses.replace(movement, id=row.id)

    def list(
        self,
        criteria: MovementFilter,
        limit: int = 100,
        skip: int = 0,
    ) -> list[InventoryMovement]:
        query = (
            self._filtered(select(MovementRow), criteria)
            .order_by(MovementRow.created_at.desc(), MovementRow.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return [self._to_domain(row) for row in self._session.scalars(query)]

    def count(self, criteria: MovementFilter) -> int:
        query = self._filtered(select(func.count(MovementRow.id)), criteria)
        return self._session.scalar(query) or 0

    def stats_by_type(self, criteria: MovementFilter) -> list[MovementStats]:
        query = self._filtered(
            select(
                MovementRow.type,
                func.sum(MovementRow.quantity),
                func.count(MovementRow.id),
            ),
            criteria,
        ).group_by(MovementRow.type).order_by(MovementRow.type)
        return [
            MovementStats(type=MovementType(type_), total_quantity=int(total), count=count)
            for type_, total, count in self._session.execute(query)
        ]

    # --- Helpers --------------------------------------------------------------

    @staticmethod
    def _filtered(query: Select, criteria: MovementFilter) -> Select:
        if criteria.product_id is not None:
            query = query.where(MovementRow.product_id == criteria.product_id)
        if criteria.type is not None:
            query = query.where(MovementRow.type == criteria.type.value)
        if criteria.start is not None:
            query = query.where(MovementRow.created_at >= criteria.start)
        if criteria.end is not None:
            query = query.where(MovementRow.created_at <= criteria.end)
        return query

    @staticmethod
    def _to_domain(row: MovementRow) -> InventoryMovement:
        return InventoryMovement(
            product_id=row.product_id,
            type=MovementType(row.type),
            quantity=row.quantity,
            quantity_after=row.quantity_after,
            reason=row.reason,
            order_id=row.order_id,
            holder_id=row.holder_id,
            id=row.id,
            created_at=row.created_at,
        )
