"""Booking database models."""

from datetime import date
from enum import StrEnum
from uuid import UUID

from sqlalchemy import Date, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from payaudit.core.constants import MAX_NAME_LENGTH
from payaudit.core.database.base import Base, TimestampMixin, UUIDMixin, string_enum


class BookingPaymentStatus(StrEnum):
    PENDING = "pending"
    PARTIAL = "partial"
    COMPLETED = "completed"


class Booking(Base, UUIDMixin, TimestampMixin):
    """An accommodation booking paid in monthly instalments.

    Attributes:
        user_id: Member who owns the booking
        accommodation_title: Name of the booked accommodation
        check_in_date: First day of the stay
        total_months: Number of monthly instalments in the payment schedule
        paid_months: Instalments with an approved payment
        payment_status: Overall payment progress
    """

    __tablename__ = "bookings"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    accommodation_title: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    check_in_date: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
    )
    total_months: Mapped[int] = mapped_column(
        default=1,
        nullable=False,
    )
    paid_months: Mapped[int] = mapped_column(
        default=0,
        nullable=False,
    )
    payment_status: Mapped[BookingPaymentStatus] = mapped_column(
        string_enum(BookingPaymentStatus),
        default=BookingPaymentStatus.PENDING,
        nullable=False,
    )

    def record_paid_month(self) -> None:
        """Count one more approved instalment and update payment status."""
        self.paid_months = min(self.paid_months + 1, self.total_months)
        if self.paid_months >= self.total_months:
            self.payment_status = BookingPaymentStatus.COMPLETED
        else:
            self.payment_status = BookingPaymentStatus.PARTIAL

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, user_id={self.user_id}, status={self.payment_status})>"
