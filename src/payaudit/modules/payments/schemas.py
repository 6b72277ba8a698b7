"""Pydantic schemas for payment verification operations."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from payaudit.core.constants import (
    MAX_ADMIN_NOTES_LENGTH,
    MAX_FILENAME_LENGTH,
    MAX_MIMETYPE_LENGTH,
    MAX_MONTH_NUMBER,
    MAX_REFERENCE_LENGTH,
    MAX_USER_NOTES_LENGTH,
    MIN_MONTH_NUMBER,
)
from payaudit.modules.payments.models import (
    Currency,
    PaymentMethod,
    VerificationDecision,
    VerificationStatus,
)


# ============================================================
# Requests
# ============================================================


class PaymentSubmission(BaseModel):
    """Proof of one monthly instalment submitted by a member."""

    booking_id: UUID
    month_number: int = Field(..., ge=MIN_MONTH_NUMBER, le=MAX_MONTH_NUMBER)
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    currency: Currency = Currency.NGN
    payment_method: PaymentMethod
    transaction_reference: str | None = Field(None, max_length=MAX_REFERENCE_LENGTH)
    payment_date: date
    user_notes: str | None = Field(None, max_length=MAX_USER_NOTES_LENGTH)
    proof_filename: str = Field(..., min_length=1, max_length=MAX_FILENAME_LENGTH)
    proof_size: int = Field(..., gt=0)
    proof_mimetype: str = Field(..., min_length=1, max_length=MAX_MIMETYPE_LENGTH)


class VerificationRequest(BaseModel):
    """An admin's decision on a submitted payment."""

    decision: VerificationDecision
    admin_notes: str | None = Field(None, max_length=MAX_ADMIN_NOTES_LENGTH)


class ExportFilters(BaseModel):
    """Filters applied to a payment export. All optional."""

    start_date: date | None = None
    end_date: date | None = None
    status: VerificationStatus | None = None
    payment_method: PaymentMethod | None = None

    def applied(self) -> dict[str, Any]:
        """The filters that were actually set, JSON-safe."""
        return self.model_dump(mode="json", exclude_none=True)


# ============================================================
# Responses
# ============================================================


class PaymentResponse(BaseModel):
    """Payment verification as returned by the API."""

    id: UUID
    booking_id: UUID
    user_id: UUID
    month_number: int
    amount: Decimal
    currency: Currency
    payment_method: PaymentMethod
    transaction_reference: str | None
    payment_date: date
    user_notes: str | None
    proof_filename: str
    verification_status: VerificationStatus
    verified_by: UUID | None
    verified_at: datetime | None
    admin_notes: str | None
    rejection_reason: str | None
    receipt_number: str | None
    submitted_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReceiptResponse(BaseModel):
    """Receipt for an approved payment."""

    payment_id: UUID
    receipt_number: str
    receipt_filename: str | None
    amount: Decimal
    currency: Currency
    month_number: int
    verified_at: datetime | None
