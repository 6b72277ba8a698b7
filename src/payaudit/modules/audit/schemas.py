"""Pydantic schemas for the payment audit trail."""

import math
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from payaudit.modules.audit.models import AuditAction, AuditCategory, AuditSeverity


# ============================================================
# Snapshots and helper inputs
# ============================================================


class AuditState(BaseModel):
    """Point-in-time snapshot of a payment, stored as previous/new state."""

    status: str | None = None
    amount: float | None = None
    payment_method: str | None = None
    notes: str | None = None
    verified_by: UUID | None = None
    verified_at: datetime | None = None

    def snapshot(self) -> dict[str, Any]:
        """JSON-safe dict of the fields that are set."""
        return self.model_dump(mode="json", exclude_none=True)


class ReceiptDetails(BaseModel):
    """Receipt produced for an approved payment."""

    receipt_number: str
    filename: str | None = None


class ExportDetails(BaseModel):
    """Description of one payment data export."""

    format: str
    filters: dict[str, Any] = Field(default_factory=dict)
    record_count: int = 0
    filename: str | None = None


# ============================================================
# Responses
# ============================================================


class Pagination(BaseModel):
    """Page position within a paginated listing."""

    current: int
    pages: int
    total: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(current=page, pages=math.ceil(total / limit) if limit else 0, total=total)


class PerformerSummary(BaseModel):
    id: UUID
    name: str
    email: str
    role: str

    model_config = ConfigDict(from_attributes=True)


class PaymentSummary(BaseModel):
    id: UUID
    month_number: int
    amount: Decimal

    model_config = ConfigDict(from_attributes=True)


class BookingSummary(BaseModel):
    id: UUID
    accommodation_title: str

    model_config = ConfigDict(from_attributes=True)


class AuditLogResponse(BaseModel):
    """A single audit entry as shown in admin reports."""

    id: UUID
    payment_verification_id: UUID | None = None
    booking_id: UUID | None = None
    performed_by: UUID
    action: AuditAction
    action_label: str
    description: str
    previous_state: dict[str, Any] | None = None
    new_state: dict[str, Any] | None = None
    metadata: dict[str, Any] = Field(default_factory=dict, validation_alias="metadata_")
    severity: AuditSeverity
    category: AuditCategory
    timestamp: datetime
    tags: list[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class AuditTrailEntry(AuditLogResponse):
    """Audit entry with the acting user resolved."""

    performer: PerformerSummary | None = None


class UserActivityEntry(AuditLogResponse):
    """Audit entry with the related payment and booking resolved."""

    payment_verification: PaymentSummary | None = None
    booking: BookingSummary | None = None


class SuspiciousActivityEntry(AuditLogResponse):
    """Audit entry flagged by the suspicious activity scan."""

    performer: PerformerSummary | None = None
    payment_verification: PaymentSummary | None = None


class AuditTrailResponse(BaseModel):
    items: list[AuditTrailEntry]
    pagination: Pagination


class UserActivityResponse(BaseModel):
    items: list[UserActivityEntry]
    pagination: Pagination


class SuspiciousActivityResponse(BaseModel):
    items: list[SuspiciousActivityEntry]
    hours: int


class AuditStatistics(BaseModel):
    """Entry counts overall, per category and per severity."""

    total_actions: int = 0
    category_breakdown: dict[str, int] = Field(default_factory=dict)
    severity_breakdown: dict[str, int] = Field(default_factory=dict)


class CleanupResponse(BaseModel):
    deleted_count: int
    days_to_keep: int
