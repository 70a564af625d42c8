"""Database configuration and utilities."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import DateTime, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.types import TypeDecorator

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class UTCDateTime(TypeDecorator):
    """Timezone-aware UTC datetimes on every backend.

    Values are stored as naive UTC (SQLite has no timezone support) and
    come back with ``tzinfo=timezone.utc`` attached.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError(f"Naive datetime {value!r} cannot be stored as UTC")
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def process_result_value(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        return value.replace(tzinfo=timezone.utc)


class Database:
    """Database connection manager."""

    def __init__(self, database_url: str, echo: bool = False) -> None:
        """
        Initialize database connection.

        Args:
            database_url: SQLAlchemy connection URL
            echo: Whether to echo SQL queries
        """
        url = make_url(database_url)
        engine_args: dict = {"echo": echo}
        if url.get_backend_name() == "sqlite":
            engine_args["connect_args"] = {"check_same_thread": False}
            if url.database in (None, "", ":memory:"):
                # one shared connection, or every session sees an empty database
                engine_args["poolclass"] = StaticPool
            else:
                Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        else:
            engine_args["pool_pre_ping"] = True

        self.engine = create_engine(url, **engine_args)
        self.session_factory = sessionmaker(
            bind=self.engine,
            class_=Session,
            autoflush=True,
            expire_on_commit=False,
        )

    def create_tables(self) -> None:
        """Create all database tables."""
        # registers the mapped classes on Base.metadata
        from storefront.infrastructure.persistence import models  # noqa: F401

        Base.metadata.create_all(self.engine)
        logger.info("Database tables created")

    def drop_tables(self) -> None:
        """Drop all database tables."""
        Base.metadata.drop_all(self.engine)
        logger.info("Database tables dropped")

    def close(self) -> None:
        """Close database connections."""
        self.engine.dispose()
        logger.info("Database connections closed")
