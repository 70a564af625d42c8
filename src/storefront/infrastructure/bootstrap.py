"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from functools import lru_cache

from storefront.application.unit_of_work import UnitOfWork
from storefront.infrastructure.config import Settings, get_settings
from storefront.infrastructure.persistence.database import Database
from storefront.infrastructure.persistence.unit_of_work import SqlUnitOfWork


@lru_cache
def database() -> Database:
    settings = get_settings()
    db = Database(settings.database_url, echo=settings.sql_echo)
    db.create_tables()
    return db


def settings() -> Settings:
    return get_settings()


def unit_of_work() -> UnitOfWork:
    return SqlUnitOfWork(database().session_factory)
