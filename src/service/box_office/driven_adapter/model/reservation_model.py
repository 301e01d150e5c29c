from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base, UtcDateTime


class SeatReservationModel(Base):
    __tablename__ = 'seat_reservation'

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    reservation_token: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    session_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    show_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey('recital_show.id'), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    expires_at: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    extension_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False)


class ReservationSeatModel(Base):
    __tablename__ = 'reservation_seat'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reservation_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey('seat_reservation.id', ondelete='CASCADE'), nullable=False, index=True
    )
    show_seat_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey('show_seat.id'), nullable=False)

    __table_args__ = (
        UniqueConstraint('reservation_id', 'show_seat_id', name='uq_reservation_seat'),
    )
