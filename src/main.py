"""
Production FastAPI Application

Box office API with the background task runner and the reservation sweeper.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio
from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig
from src.service.box_office.app.command.release_expired_reservations_use_case import (
    ReleaseExpiredReservationsUseCase,
)
from src.service.box_office.driving_adapter.scheduler.reservation_sweeper import (
    run_reservation_sweeper,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Box Office] Starting up...')

    tracing = TracingConfig(service_name='box-office')
    tracing.setup()
    Logger.base.info('📊 [Box Office] OpenTelemetry tracing configured')

    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Box Office] Dependency injection wired')

    database = container.database()
    tracing.instrument_sqlalchemy(engine=database.engine)
    if settings.DEBUG:
        # Local development only; deployed schemas are managed by Alembic
        await database.create_tables()
        Logger.base.info('🗄️  [Box Office] Tables ensured (DEBUG)')

    task_runner = container.task_runner()
    sweeper = ReleaseExpiredReservationsUseCase(
        show_seat_command_repo=container.show_seat_command_repo(),
        reservation_command_repo=container.reservation_command_repo(),
    )

    async with anyio.create_task_group() as tg:
        task_runner.attach(tg)
        tg.start_soon(
            lambda: run_reservation_sweeper(
                use_case=sweeper,
                interval_seconds=settings.RESERVATION_SWEEP_INTERVAL_SECONDS,
            )
        )
        Logger.base.info('✅ [Box Office] Ready to serve requests')

        yield

        Logger.base.info('🛑 [Box Office] Shutting down...')
        task_runner.detach()
        tg.cancel_scope.cancel()

    await database.dispose()
    Logger.base.info('🗄️  [Box Office] Database engine disposed')

    tracing.shutdown()
    container.unwire()

    Logger.base.info('👋 [Box Office] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
