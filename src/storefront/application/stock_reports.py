"""Application services: low-stock alerts and stock-out predictions.

Both are read-only views over the catalog and the inventory ledger.
Predictions use sales velocity: the units sold over the last
``average_days`` days (SALE movements) divided by that window.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from datetime import datetime, timedelta

from storefront.application.dto import StockAlertDTO, StockPredictionDTO
from storefront.application.unit_of_work import UnitOfWork
from storefront.domain.model.cart import utcnow
from storefront.domain.model.inventory import MovementType
from storefront.domain.repository.movement_repository import MovementFilter

DEFAULT_LOW_STOCK_THRESHOLD = 10
DEFAULT_CRITICAL_STOCK_THRESHOLD = 5
DEFAULT_SALES_AVERAGE_DAYS = 30
DEFAULT_PREDICTION_HORIZON_DAYS = 60

# (upper bound in days, level), checked in order
RISK_LEVELS = (
    (7, "CRITICAL"),
    (14, "HIGH"),
    (30, "MEDIUM"),
)
RISK_ORDER = {"CRITICAL": 0, "HIGH": 1, "MEDIUM": 2, "LOW": 3}


def risk_level(days_until_out_of_stock: int) -> str:
    for bound, level in RISK_LEVELS:
        if days_until_out_of_stock <= bound:
            return level
    return "LOW"


class StockAlertsHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        low_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
        critical_threshold: int = DEFAULT_CRITICAL_STOCK_THRESHOLD,
    ) -> None:
        self._uow = uow
        self._low_threshold = low_threshold
        self._critical_threshold = critical_threshold

    def handle(self) -> list[StockAlertDTO]:
        """Active products running low, most urgent first."""
        with self._uow as uow:
            products = uow.products.list_all()

        alerts: list[StockAlertDTO] = []
        for product in products:
            if not product.active:
                continue
            threshold = product.low_stock_threshold or self._low_threshold
            if product.stock_quantity <= self._critical_threshold:
                level, limit = "CRITICAL", self._critical_threshold
            elif product.stock_quantity <= threshold:
                level, limit = "LOW", threshold
            else:
                continue
            alerts.append(
                StockAlertDTO(
                    product_id=product.id,
                    product_name=product.name,
                    stock_quantity=product.stock_quantity,
                    threshold=limit,
                    level=level,
                )
            )
        alerts.sort(key=lambda a: (a.level != "CRITICAL", a.stock_quantity, a.product_name))
        return alerts


class StockPredictionsHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Callable[[], datetime] = utcnow,
        average_days: int = DEFAULT_SALES_AVERAGE_DAYS,
        horizon_days: int = DEFAULT_PREDICTION_HORIZON_DAYS,
    ) -> None:
        self._uow = uow
        self._clock = clock
        self._average_days = average_days
        self._horizon_days = horizon_days

    def handle(self) -> list[StockPredictionDTO]:
        """Products expected to sell out within the horizon."""
        now = self._clock()
        since = now - timedelta(days=self._average_days)
        predictions: list[StockPredictionDTO] = []

        with self._uow as uow:
            for product in uow.products.list_all():
                if not product.active:
                    continue
                stats = uow.movements.stats_by_type(
                    MovementFilter(product_id=product.id, type=MovementType.SALE, start=since)
                )
                total_sold = -sum(s.total_quantity for s in stats)
                if total_sold <= 0:
                    continue

                daily_average = total_sold / self._average_days
                days_left = math.floor(product.stock_quantity / daily_average)
                if days_left > self._horizon_days:
                    continue
                predictions.append(
                    StockPredictionDTO(
                        product_id=product.id,
                        product_name=product.name,
                        sku=product.sku,
                        current_stock=product.stock_quantity,
                        total_sold=total_sold,
                        daily_average=round(daily_average, 2),
                        days_until_out_of_stock=days_left,
                        predicted_out_of_stock_date=(
                            now + timedelta(days=days_left)
                        ).date().isoformat(),
                        risk_level=risk_level(days_left),
                    )
                )

        predictions.sort(
            key=lambda p: (RISK_ORDER[p.risk_level], p.days_until_out_of_stock)
        )
        return predictions
