import anyio

from src.platform.logging.loguru_io import Logger
from src.service.box_office.app.command.release_expired_reservations_use_case import (
    ReleaseExpiredReservationsUseCase,
)


async def run_reservation_sweeper(
    *, use_case: ReleaseExpiredReservationsUseCase, interval_seconds: float
) -> None:
    """Runs until the owning task group is cancelled."""
    Logger.base.info(f'🧹 [SWEEP] Reservation sweeper started (every {interval_seconds}s)')
    while True:
        try:
            await use_case.release_expired()
        except Exception as e:
            # Keep sweeping; a crash here would take the whole task group down
            Logger.base.opt(exception=e).error(f'❌ [SWEEP] Sweep failed: {e}')
        await anyio.sleep(interval_seconds)
