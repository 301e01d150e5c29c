"""
Test Configuration and Fixtures

This module provides:
- Environment setup before any application module reads settings
- A file-backed SQLite database per test (integration tests)
- Seed helpers for a show with priced seats

Architecture:
- Unit tests (test/**/unit/): collaborators are AsyncMock, no database
- Integration tests: real repositories against SQLite via aiosqlite
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings and the loguru sinks are built at import time
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    os.environ['DEBUG'] = 'true'
    os.environ['SECRET_KEY'] = 'test_secret_key'
    os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///:memory:'
    os.environ['MAILGUN_API_KEY'] = ''
    os.environ['STRIPE_SECRET_KEY'] = 'sk_test_dummy'
    os.environ['BACKGROUND_TASK_BACKOFF_SECONDS'] = '0'


_early_setup_test_environment()

from collections.abc import AsyncGenerator, Awaitable, Callable  # noqa: E402
from datetime import date  # noqa: E402
from typing import Any, List, Optional  # noqa: E402
from uuid import UUID  # noqa: E402

import attrs  # noqa: E402
import pytest  # noqa: E402
from uuid_utils.compat import uuid7  # noqa: E402

from src.platform.database.orm_db_setting import Database  # noqa: E402
from src.service.box_office.driven_adapter.model import (  # noqa: E402, F401
    order_model,
    reservation_model,
)
from src.service.box_office.driven_adapter.model.show_model import (  # noqa: E402
    ShowModel,
    ShowSeatModel,
    VenueSeatModel,
)


# =============================================================================
# Database Fixtures
# =============================================================================
@pytest.fixture
async def database(tmp_path: Path) -> AsyncGenerator[Database, None]:
    """Fresh SQLite file per test; separate connections so concurrent writers really race."""
    db = Database(url=f'sqlite+aiosqlite:///{tmp_path / "box_office_test.db"}')
    await db.create_tables()
    yield db
    await db.drop_tables()
    await db.dispose()


@attrs.define
class SeededShow:
    show_id: UUID
    show_seat_ids: List[UUID]
    price_in_cents: int


SeedShow = Callable[..., Awaitable[SeededShow]]


@pytest.fixture
def seed_show(database: Database) -> SeedShow:
    """
    Returns a coroutine function creating one show with `seat_count` available
    seats in section A, row A, all at the same price.
    """

    async def _seed(
        *,
        seat_count: int = 4,
        price_in_cents: int = 1500,
        name: str = 'Spring Recital',
        section: str = 'A',
        handicap_seat_numbers: Optional[List[int]] = None,
    ) -> SeededShow:
        show_id = uuid7()
        show_seat_ids: List[UUID] = []
        rows: List[Any] = [
            ShowModel(
                id=show_id,
                name=name,
                show_date=date(2026, 5, 16),
                start_time='18:30',
                venue_name='Lincoln Auditorium',
                venue_address='12 Main St',
            )
        ]
        for number in range(1, seat_count + 1):
            seat_id = uuid7()
            show_seat_id = uuid7()
            show_seat_ids.append(show_seat_id)
            rows.append(
                VenueSeatModel(
                    id=seat_id,
                    venue_name='Lincoln Auditorium',
                    section=section,
                    row_label='A',
                    seat_number=number,
                    seat_type='standard',
                    is_handicap_accessible=number in (handicap_seat_numbers or []),
                    base_price_in_cents=price_in_cents,
                )
            )
            rows.append(
                ShowSeatModel(
                    id=show_seat_id,
                    show_id=show_id,
                    seat_id=seat_id,
                    status='available',
                    price_in_cents=price_in_cents,
                )
            )

        async with database.session() as session:
            # Parents first so SQLite FK ordering never matters
            session.add_all([row for row in rows if not isinstance(row, ShowSeatModel)])
            await session.flush()
            session.add_all([row for row in rows if isinstance(row, ShowSeatModel)])
            await session.commit()

        return SeededShow(
            show_id=show_id, show_seat_ids=show_seat_ids, price_in_cents=price_in_cents
        )

    return _seed
