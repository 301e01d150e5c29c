from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base, UtcDateTime


class TicketOrderModel(Base):
    __tablename__ = 'ticket_order'
    __table_args__ = (
        # One provider charge pays for exactly one order
        UniqueConstraint('payment_intent_id', name='uq_ticket_order_payment_intent_id'),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    order_number: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    show_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey('recital_show.id'), nullable=False)
    customer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    customer_email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    customer_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    payment_intent_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default='pending', nullable=False)
    total_amount_in_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    refunded_amount_in_cents: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    session_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False)


class TicketModel(Base):
    __tablename__ = 'ticket'

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    order_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey('ticket_order.id', ondelete='CASCADE'), nullable=False, index=True
    )
    # Not unique: a refunded (invalidated) ticket keeps pointing at a seat that may be resold
    show_seat_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey('show_seat.id'), nullable=False, index=True
    )
    ticket_code: Mapped[str] = mapped_column(String(40), nullable=False, unique=True)
    is_valid: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    pdf_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    pdf_generated_at: Mapped[Optional[datetime]] = mapped_column(UtcDateTime, nullable=True)
    scanned_at: Mapped[Optional[datetime]] = mapped_column(UtcDateTime, nullable=True)
    scan_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False)
