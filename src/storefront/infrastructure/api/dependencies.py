"""FastAPI dependencies: unit of work, clock, settings and the caller."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from fastapi import Header, Request

from storefront.application.unit_of_work import UnitOfWork
from storefront.infrastructure.config import Settings


def get_uow(request: Request) -> UnitOfWork:
    return request.app.state.uow_factory()


def get_clock(request: Request) -> Callable[[], datetime]:
    return request.app.state.clock


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_holder_id(x_user_id: str = Header(..., alias="X-User-Id", min_length=1)) -> str:
    """The cart holder: a user id, or a session id for guests."""
    return x_user_id
