from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel

from src.service.box_office.app.dto.box_office_dto import SeatMap
from src.service.box_office.driving_adapter.http_controller.schema.order_schema import (
    ShowSummaryResponse,
)


class SeatMapSeatResponse(BaseModel):
    show_seat_id: UUID
    section: str
    row: str
    number: int
    seat_type: str
    price_in_cents: int
    status: str
    is_handicap_accessible: bool


class SectionStatsResponse(BaseModel):
    available: int
    reserved: int
    sold: int
    total: int


class SeatMapResponse(BaseModel):
    show: ShowSummaryResponse
    seats: List[SeatMapSeatResponse]
    sections: Dict[str, SectionStatsResponse]
    generated_at: Optional[datetime] = None

    @classmethod
    def from_dto(cls, seat_map: SeatMap) -> 'SeatMapResponse':
        show = seat_map.show
        return cls(
            show=ShowSummaryResponse(
                id=show.id,
                name=show.name,
                show_date=show.show_date,
                start_time=show.start_time,
                venue_name=show.venue_name,
                venue_address=show.venue_address,
            ),
            seats=[
                SeatMapSeatResponse(
                    show_seat_id=entry.show_seat_id,
                    section=entry.seat.section,
                    row=entry.seat.row,
                    number=entry.seat.number,
                    seat_type=entry.seat.seat_type,
                    price_in_cents=entry.seat.price_in_cents,
                    status=entry.status.value,
                    is_handicap_accessible=entry.is_handicap_accessible,
                )
                for entry in seat_map.seats
            ],
            sections={
                section: SectionStatsResponse(
                    available=stats.available,
                    reserved=stats.reserved,
                    sold=stats.sold,
                    total=stats.total,
                )
                for section, stats in seat_map.sections.items()
            },
            generated_at=seat_map.generated_at,
        )
