"""Abstract repository for the append-only inventory ledger.

Movements are never updated or deleted, so there is no save or delete.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from storefront.domain.model.inventory import InventoryMovement, MovementType


@dataclass(frozen=True)
class MovementFilter:
    product_id: str | None = None
    type: MovementType | None = None
    start: datetime | None = None
    end: datetime | None = None


@dataclass(frozen=True)
class MovementStats:
    type: MovementType
    total_quantity: int
    count: int


class MovementRepository(ABC):

    @abstractmethod
    def append(self, movement: InventoryMovement) -> InventoryMovement:
        """Record a movement; returns it with ``id`` assigned."""

    @abstractmethod
    def list(
        self,
        criteria: MovementFilter,
        limit: int = 100,
        skip: int = 0,
    ) -> list[InventoryMovement]:
        """Return matching movements, newest first."""

    @abstractmethod
    def count(self, criteria: MovementFilter) -> int:
        """Number of movements matching the filter."""

    @abstractmethod
    def stats_by_type(self, criteria: MovementFilter) -> list[MovementStats]:
        """Sum of deltas and row count per movement type."""
