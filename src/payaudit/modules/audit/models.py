"""Payment audit log database model.

Stores an append-only trail of payment verification activity: who did
what, when, to which payment or booking, with before/after snapshots.
Entries are never updated; the retention sweep is the only delete.
"""

from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payaudit.core.database.base import (
    Base,
    JSONType,
    UUIDMixin,
    string_enum,
    utcnow,
)


if TYPE_CHECKING:
    from payaudit.modules.bookings.models import Booking
    from payaudit.modules.payments.models import PaymentVerification
    from payaudit.modules.users.models import User


class AuditAction(StrEnum):
    PAYMENT_SUBMITTED = "payment_submitted"
    PAYMENT_APPROVED = "payment_approved"
    PAYMENT_REJECTED = "payment_rejected"
    PAYMENT_RESUBMITTED = "payment_resubmitted"
    RECEIPT_GENERATED = "receipt_generated"
    RECEIPT_DOWNLOADED = "receipt_downloaded"
    PAYMENT_EXPORTED = "payment_exported"
    PAYMENT_VIEWED = "payment_viewed"
    PAYMENT_EDITED = "payment_edited"
    PAYMENT_DELETED = "payment_deleted"
    STATUS_CHANGED = "status_changed"
    NOTES_ADDED = "notes_added"
    FILE_UPLOADED = "file_uploaded"
    FILE_DELETED = "file_deleted"


class AuditSeverity(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AuditCategory(StrEnum):
    SUBMISSION = "submission"
    VERIFICATION = "verification"
    ADMINISTRATION = "administration"
    EXPORT = "export"
    SECURITY = "security"
    SYSTEM = "system"


# Severities the retention sweep may delete
EXPIRABLE_SEVERITIES = frozenset({AuditSeverity.LOW, AuditSeverity.MEDIUM})

# Actions that always surface in the suspicious activity scan
SUSPICIOUS_ACTIONS = frozenset({AuditAction.PAYMENT_REJECTED, AuditAction.FILE_DELETED})

ACTION_LABELS: dict[AuditAction, str] = {
    AuditAction.PAYMENT_SUBMITTED: "Payment proof submitted",
    AuditAction.PAYMENT_APPROVED: "Payment approved by admin",
    AuditAction.PAYMENT_REJECTED: "Payment rejected by admin",
    AuditAction.PAYMENT_RESUBMITTED: "Payment proof resubmitted",
    AuditAction.RECEIPT_GENERATED: "Payment receipt generated",
    AuditAction.RECEIPT_DOWNLOADED: "Payment receipt downloaded",
    AuditAction.PAYMENT_EXPORTED: "Payment data exported",
    AuditAction.PAYMENT_VIEWED: "Payment details viewed",
    AuditAction.PAYMENT_EDITED: "Payment details edited",
    AuditAction.PAYMENT_DELETED: "Payment record deleted",
    AuditAction.STATUS_CHANGED: "Payment status changed",
    AuditAction.NOTES_ADDED: "Notes added to payment",
    AuditAction.FILE_UPLOADED: "Payment proof file uploaded",
    AuditAction.FILE_DELETED: "Payment proof file deleted",
}


class PaymentAuditLog(Base, UUIDMixin):
    """One audited action on a payment verification.

    Attributes:
        payment_verification_id: Payment the action concerns (None for exports)
        booking_id: Booking the payment belongs to (None for exports)
        performed_by: User who performed the action
        action: What happened
        description: Human-readable summary
        previous_state: Snapshot before the action
        new_state: Snapshot after the action
        metadata_: Request context and action-specific details
        severity: Priority used for retention and suspicious scans
        category: Grouping for filtering and reports
        timestamp: When the action was recorded
        tags: Free-form labels
    """

    __tablename__ = "payment_audit_logs"
    __table_args__ = (
        Index("ix_payment_audit_logs_payment_ts", "payment_verification_id", "timestamp"),
        Index("ix_payment_audit_logs_booking_ts", "booking_id", "timestamp"),
        Index("ix_payment_audit_logs_performer_ts", "performed_by", "timestamp"),
        Index("ix_payment_audit_logs_action_ts", "action", "timestamp"),
        Index("ix_payment_audit_logs_category_ts", "category", "timestamp"),
        Index("ix_payment_audit_logs_severity_ts", "severity", "timestamp"),
    )

    # Lookup-only references: audit rows outlive what they describe
    payment_verification_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("payment_verifications.id", ondelete="SET NULL"),
        nullable=True,
    )
    booking_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("bookings.id", ondelete="SET NULL"),
        nullable=True,
    )
    performed_by: Mapped[UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
    )

    # What happened
    action: Mapped[AuditAction] = mapped_column(
        string_enum(AuditAction),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    # Before/after snapshots
    previous_state: Mapped[dict[str, Any] | None] = mapped_column(
        JSONType,
        nullable=True,
    )
    new_state: Mapped[dict[str, Any] | None] = mapped_column(
        JSONType,
        nullable=True,
    )
    metadata_: Mapped[dict[str, Any]] = mapped_column(
        "metadata",  # Column name in database
        JSONType,
        default=dict,
        nullable=False,
    )

    severity: Mapped[AuditSeverity] = mapped_column(
        string_enum(AuditSeverity),
        default=AuditSeverity.MEDIUM,
        nullable=False,
    )
    category: Mapped[AuditCategory] = mapped_column(
        string_enum(AuditCategory),
        nullable=False,
    )
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True,
    )
    tags: Mapped[list[str]] = mapped_column(
        JSONType,
        default=list,
        nullable=False,
    )

    performer: Mapped["User"] = relationship(
        "User",
        lazy="selectin",
        viewonly=True,
    )
    payment_verification: Mapped["PaymentVerification | None"] = relationship(
        "PaymentVerification",
        lazy="selectin",
        viewonly=True,
    )
    booking: Mapped["Booking | None"] = relationship(
        "Booking",
        lazy="selectin",
        viewonly=True,
    )

    @property
    def action_label(self) -> str:
        """Human-readable label for the action."""
        return ACTION_LABELS.get(self.action, str(self.action))

    def __repr__(self) -> str:
        return (
            f"<PaymentAuditLog(id={self.id}, action={self.action}, "
            f"performed_by={self.performed_by}, severity={self.severity})>"
        )
