from datetime import datetime, timezone
from typing import Dict, Self
from uuid import UUID

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.box_office.app.dto.box_office_dto import (
    SeatLine,
    SeatMap,
    SeatMapEntry,
    SectionStats,
)
from src.service.box_office.app.interface.i_box_office_query_repo import IBoxOfficeQueryRepo
from src.service.box_office.domain.entity.show_seat_entity import SeatStatus


class ListShowSeatsUseCase:
    def __init__(self, *, box_office_query_repo: IBoxOfficeQueryRepo) -> None:
        self.box_office_query_repo = box_office_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        box_office_query_repo: IBoxOfficeQueryRepo = Depends(
            Provide[Container.box_office_query_repo]
        ),
    ) -> Self:
        return cls(box_office_query_repo=box_office_query_repo)

    @Logger.io
    async def list_show_seats(self, *, show_id: UUID) -> SeatMap:
        show = await self.box_office_query_repo.get_show(show_id=show_id)
        if not show:
            raise NotFoundError('Show not found')

        now = datetime.now(timezone.utc)
        show_seats = await self.box_office_query_repo.list_show_seats(show_id=show_id)

        entries = []
        sections: Dict[str, SectionStats] = {}
        for show_seat in show_seats:
            # A lapsed hold is sellable even before the sweeper resets the row
            status = show_seat.effective_status(now=now)
            line = SeatLine.from_show_seat(show_seat)
            entries.append(
                SeatMapEntry(
                    show_seat_id=show_seat.id,
                    seat=line,
                    status=status,
                    is_handicap_accessible=bool(
                        show_seat.seat and show_seat.seat.is_handicap_accessible
                    ),
                )
            )

            stats = sections.get(line.section, SectionStats())
            sections[line.section] = attrs.evolve(
                stats,
                available=stats.available + (status == SeatStatus.AVAILABLE),
                reserved=stats.reserved + (status == SeatStatus.RESERVED),
                sold=stats.sold + (status == SeatStatus.SOLD),
            )

        return SeatMap(show=show, seats=entries, sections=sections, generated_at=now)
