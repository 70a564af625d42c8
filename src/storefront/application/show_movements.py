"""Application service: Show Movements use case (query)."""

from __future__ import annotations

from datetime import datetime

from storefront.application.dto import MovementDTO, MovementPageDTO, MovementStatsDTO
from storefront.application.unit_of_work import UnitOfWork
from storefront.domain.exceptions import ValidationError
from storefront.domain.model.inventory import MovementType
from storefront.domain.repository.movement_repository import MovementFilter

MAX_PAGE_SIZE = 500


class ShowMovementsHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        product_id: str | None = None,
        movement_type: MovementType | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int = 100,
        skip: int = 0,
    ) -> MovementPageDTO:
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"Limit must be between 1 and {MAX_PAGE_SIZE}")
        if skip < 0:
            raise ValidationError("Skip cannot be negative")
        if start is not None and end is not None and start > end:
            raise ValidationError("Start date must not be after end date")

        criteria = MovementFilter(
            product_id=product_id, type=movement_type, start=start, end=end
        )
        with self._uow as uow:
            movements = uow.movements.list(criteria, limit=limit, skip=skip)
            total = uow.movements.count(criteria)
            stats = uow.movements.stats_by_type(criteria)

        return MovementPageDTO(
            movements=[MovementDTO.from_domain(m) for m in movements],
            total=total,
            limit=limit,
            skip=skip,
            statistics=[
                MovementStatsDTO(
                    type=s.type.value,
                    total_quantity=s.total_quantity,
                    count=s.count,
                )
                for s in stats
            ],
        )
