"""Payment verification database models."""

from datetime import date, datetime
from decimal import Decimal
from enum import StrEnum
from uuid import UUID

from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from payaudit.core.constants import (
    MAX_ADMIN_NOTES_LENGTH,
    MAX_FILENAME_LENGTH,
    MAX_MIMETYPE_LENGTH,
    MAX_REFERENCE_LENGTH,
)
from payaudit.core.database.base import (
    Base,
    TimestampMixin,
    UUIDMixin,
    string_enum,
    utcnow,
)


class VerificationStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    REQUIRES_CLARIFICATION = "requires_clarification"


# Statuses an admin may still decide on
OPEN_STATUSES = frozenset(
    {VerificationStatus.PENDING, VerificationStatus.REQUIRES_CLARIFICATION}
)


class VerificationDecision(StrEnum):
    """An admin's decision on a submitted payment."""

    APPROVE = "approve"
    REJECT = "reject"

    @property
    def resulting_status(self) -> VerificationStatus:
        match self:
            case VerificationDecision.APPROVE:
                return VerificationStatus.APPROVED
            case VerificationDecision.REJECT:
                return VerificationStatus.REJECTED


class PaymentMethod(StrEnum):
    BANK_TRANSFER = "bank_transfer"
    MOBILE_MONEY = "mobile_money"
    CASH = "cash"
    CARD = "card"
    OTHER = "other"


class Currency(StrEnum):
    NGN = "NGN"
    USD = "USD"


class PaymentVerification(Base, UUIDMixin, TimestampMixin):
    """A member's proof of one monthly booking instalment.

    The member uploads proof of payment; an admin approves or rejects it.
    Approval produces a receipt number.

    Attributes:
        booking_id: Booking the instalment belongs to
        user_id: Member who paid
        month_number: Instalment month (1-12)
        amount: Amount paid
        verification_status: Review state of the proof
        verified_by: Admin who decided
        verified_at: When the decision was made
        receipt_number: Set once an approved payment has a receipt
    """

    __tablename__ = "payment_verifications"

    booking_id: Mapped[UUID] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    month_number: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
    )
    currency: Mapped[Currency] = mapped_column(
        string_enum(Currency),
        default=Currency.NGN,
        nullable=False,
    )
    payment_method: Mapped[PaymentMethod] = mapped_column(
        string_enum(PaymentMethod),
        nullable=False,
    )
    transaction_reference: Mapped[str | None] = mapped_column(
        String(MAX_REFERENCE_LENGTH),
        nullable=True,
    )
    payment_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )
    user_notes: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    # Uploaded proof
    proof_filename: Mapped[str] = mapped_column(
        String(MAX_FILENAME_LENGTH),
        nullable=False,
    )
    proof_size: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    proof_mimetype: Mapped[str] = mapped_column(
        String(MAX_MIMETYPE_LENGTH),
        nullable=False,
    )

    # Review
    verification_status: Mapped[VerificationStatus] = mapped_column(
        string_enum(VerificationStatus),
        default=VerificationStatus.PENDING,
        nullable=False,
        index=True,
    )
    verified_by: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    admin_notes: Mapped[str | None] = mapped_column(
        String(MAX_ADMIN_NOTES_LENGTH),
        nullable=True,
    )
    rejection_reason: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    # Receipt
    receipt_number: Mapped[str | None] = mapped_column(
        String(MAX_REFERENCE_LENGTH),
        nullable=True,
        unique=True,
    )
    receipt_filename: Mapped[str | None] = mapped_column(
        String(MAX_FILENAME_LENGTH),
        nullable=True,
    )

    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<PaymentVerification(id={self.id}, booking_id={self.booking_id}, "
            f"month={self.month_number}, status={self.verification_status})>"
        )
