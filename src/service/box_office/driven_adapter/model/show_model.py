from datetime import date, datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import Boolean, Date, ForeignKey, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base, UtcDateTime


class VenueSeatModel(Base):
    __tablename__ = 'venue_seat'

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    venue_name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    section: Mapped[str] = mapped_column(String(50), nullable=False)
    row_label: Mapped[str] = mapped_column(String(10), nullable=False)
    seat_number: Mapped[int] = mapped_column(Integer, nullable=False)
    seat_type: Mapped[str] = mapped_column(String(20), default='standard', nullable=False)
    is_handicap_accessible: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    base_price_in_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class ShowModel(Base):
    __tablename__ = 'recital_show'

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    show_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)  # HH:MM
    venue_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    venue_address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UtcDateTime, server_default=func.now(), nullable=False
    )


class ShowSeatModel(Base):
    __tablename__ = 'show_seat'

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    show_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey('recital_show.id'), nullable=False, index=True
    )
    seat_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey('venue_seat.id'), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default='available', nullable=False)
    price_in_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    reserved_until: Mapped[Optional[datetime]] = mapped_column(UtcDateTime, nullable=True)
    reserved_by: Mapped[Optional[UUID]] = mapped_column(Uuid, nullable=True, index=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(UtcDateTime, nullable=True)
