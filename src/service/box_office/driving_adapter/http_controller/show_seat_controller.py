from uuid import UUID

from fastapi import APIRouter, Depends

from src.platform.logging.loguru_io import Logger
from src.service.box_office.app.query.list_show_seats_use_case import ListShowSeatsUseCase
from src.service.box_office.driving_adapter.http_controller.schema.show_seat_schema import (
    SeatMapResponse,
)


router = APIRouter()


@router.get('/{show_id}/seats')
@Logger.io
async def list_show_seats(
    show_id: UUID,
    use_case: ListShowSeatsUseCase = Depends(ListShowSeatsUseCase.depends),
) -> SeatMapResponse:
    return SeatMapResponse.from_dto(await use_case.list_show_seats(show_id=show_id))
