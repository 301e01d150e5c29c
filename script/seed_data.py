#!/usr/bin/env python3
"""
Database Seed Script
Create one recital show with a priced seat map for local development

Features:
1. Venue seats - sections x rows x seats, first two seats of row A wheelchair accessible
2. Show - a single recital night with one show_seat per venue seat (all available)

Notes:
- Run after `alembic upgrade head`, or against a DEBUG database (tables are ensured here too)
- SEED_SECTIONS / SEED_ROWS / SEED_SEATS_PER_ROW override the default 2 x 5 x 10 layout
"""

import asyncio
from datetime import date
import os
from string import ascii_uppercase

from uuid_utils.compat import uuid7

from src.platform.config.di import container
from src.platform.logging.loguru_io import Logger
from src.service.box_office.driven_adapter.model.show_model import (
    ShowModel,
    ShowSeatModel,
    VenueSeatModel,
)

VENUE_NAME = 'Lincoln Auditorium'
VENUE_ADDRESS = '12 Main St'

# Price by section, in cents
SECTION_PRICES = {
    'Orchestra': 2500,
    'Balcony': 1500,
    'Mezzanine': 2000,
}


async def seed() -> None:
    sections = list(SECTION_PRICES)[: int(os.getenv('SEED_SECTIONS', '2'))]
    rows = ascii_uppercase[: int(os.getenv('SEED_ROWS', '5'))]
    seats_per_row = int(os.getenv('SEED_SEATS_PER_ROW', '10'))

    database = container.database()
    await database.create_tables()

    show = ShowModel(
        id=uuid7(),
        name='Spring Recital',
        show_date=date(2026, 5, 16),
        start_time='18:30',
        venue_name=VENUE_NAME,
        venue_address=VENUE_ADDRESS,
    )
    venue_seats = []
    show_seats = []
    for section in sections:
        for row in rows:
            for number in range(1, seats_per_row + 1):
                venue_seat = VenueSeatModel(
                    id=uuid7(),
                    venue_name=VENUE_NAME,
                    section=section,
                    row_label=row,
                    seat_number=number,
                    seat_type='standard',
                    is_handicap_accessible=row == 'A' and number <= 2,
                    base_price_in_cents=SECTION_PRICES[section],
                )
                venue_seats.append(venue_seat)
                show_seats.append(
                    ShowSeatModel(
                        id=uuid7(),
                        show_id=show.id,
                        seat_id=venue_seat.id,
                        status='available',
                        price_in_cents=venue_seat.base_price_in_cents,
                    )
                )

    async with database.session() as session:
        session.add(show)
        session.add_all(venue_seats)
        await session.flush()
        session.add_all(show_seats)
        await session.commit()

    Logger.base.info(
        f'🌱 [SEED] Show "{show.name}" ({show.id}) with {len(show_seats)} seats '
        f'across {", ".join(sections)}'
    )
    await database.dispose()


if __name__ == '__main__':
    asyncio.run(seed())
