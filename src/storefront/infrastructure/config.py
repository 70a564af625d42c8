"""Runtime configuration.

Values come from ``STOREFRONT_*`` environment variables or a ``.env``
file in the working directory.
"""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for the CLI and the HTTP service."""

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite:///./data/storefront.db"
    sql_echo: bool = False

    # Logging
    log_level: str = "INFO"

    # Reservations
    reservation_ttl_minutes: int = 20
    reservation_sweep_interval_seconds: int = 60  # 0 disables the sweeper

    # Orders
    delay_threshold_days: int = 3
    order_number_max_attempts: int = 10

    # Inventory reports
    low_stock_threshold: int = 10
    critical_stock_threshold: int = 5
    sales_average_days: int = 30
    prediction_horizon_days: int = 60

    @property
    def reservation_ttl(self) -> timedelta:
        return timedelta(minutes=self.reservation_ttl_minutes)


@lru_cache
def get_settings() -> Settings:
    return Settings()
