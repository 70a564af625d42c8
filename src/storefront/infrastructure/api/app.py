"""Storefront HTTP service (FastAPI application factory)."""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from storefront.application.unit_of_work import UnitOfWork
from storefront.domain.exceptions import DomainException
from storefront.domain.model.cart import utcnow
from storefront.infrastructure.api.cart_router import router as cart_router
from storefront.infrastructure.api.order_router import router as order_router
from storefront.infrastructure.api.sweeper import ReservationSweeper
from storefront.infrastructure.config import Settings, get_settings
from storefront.infrastructure.logging_config import configure_logging
from storefront.infrastructure.persistence.database import Database
from storefront.infrastructure.persistence.unit_of_work import SqlUnitOfWork

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    uow_factory: Callable[[], UnitOfWork] | None = None,
    clock: Callable[[], datetime] = utcnow,
) -> FastAPI:
    settings = settings or get_settings()

    if uow_factory is None:
        database = Database(settings.database_url, echo=settings.sql_echo)
        database.create_tables()

        def uow_factory() -> UnitOfWork:
            return SqlUnitOfWork(database.session_factory)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifecycle manager for the application."""
        configure_logging(settings.log_level)
        logger.info("Starting storefront service...")

        sweeper: ReservationSweeper | None = None
        if settings.reservation_sweep_interval_seconds > 0:
            sweeper = ReservationSweeper(
                uow_factory, settings.reservation_sweep_interval_seconds
            )
            await sweeper.start()

        yield

        logger.info("Shutting down storefront service...")
        if sweeper:
            await sweeper.stop()

    app = FastAPI(title="Storefront", lifespan=lifespan)
    app.state.settings = settings
    app.state.uow_factory = uow_factory
    app.state.clock = clock

    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException):
        return JSONResponse(
            status_code=exc.http_status,
            content={
                "error": exc.code,
                "detail": exc.message,
                **jsonable_encoder(exc.details),
            },
        )

    @app.get("/health")
    async def health():
        return {"status": "healthy", "service": "storefront"}

    app.include_router(cart_router)
    app.include_router(order_router)
    return app
