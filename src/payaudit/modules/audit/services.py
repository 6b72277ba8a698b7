"""Payment audit service.

Intention-revealing helpers for recording payment verification activity,
plus the read side used by admin reports.

Writes and reads follow different error policies. A write never raises:
any failure is logged and ``None`` is returned, so recording an action can
never fail the business operation that triggered it. Reads log the failure
and re-raise so the route handler can turn it into an error response.
"""

from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Annotated, Any
from uuid import UUID

import structlog
from fastapi import Depends, Request
from pydantic_core import to_jsonable_python
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from payaudit.api.dependencies import SessionFactory
from payaudit.core.constants import DEFAULT_AUDIT_PAGE_SIZE
from payaudit.core.database.base import utcnow
from payaudit.core.logging.middleware import get_client_ip
from payaudit.modules.audit.models import (
    AuditAction,
    AuditCategory,
    AuditSeverity,
    PaymentAuditLog,
)
from payaudit.modules.audit.repos import PaymentAuditLogRepository
from payaudit.modules.audit.schemas import (
    AuditState,
    AuditStatistics,
    ExportDetails,
    Pagination,
    ReceiptDetails,
)


if TYPE_CHECKING:
    from payaudit.modules.payments.models import (
        PaymentVerification,
        VerificationDecision,
    )
    from payaudit.modules.users.models import User


log = structlog.get_logger()


class AuditContext:
    """Request information recorded alongside an audit entry.

    Passed explicitly by callers; the service never reaches for an
    ambient request object.
    """

    def __init__(
        self,
        ip_address: str | None = None,
        user_agent: str | None = None,
        session_id: str | None = None,
        request_id: str | None = None,
    ) -> None:
        """Initialize audit context.

        Args:
            ip_address: Client IP address
            user_agent: Client user agent
            session_id: Client session identifier
            request_id: Request correlation ID
        """
        self.ip_address = ip_address
        self.user_agent = user_agent
        self.session_id = session_id
        self.request_id = request_id

    @classmethod
    def from_request(cls, request: Request) -> "AuditContext":
        """Build a context from an incoming FastAPI request."""
        return cls(
            ip_address=get_client_ip(request),
            user_agent=request.headers.get("User-Agent"),
            session_id=request.headers.get("X-Session-ID")
            or request.cookies.get("session_id"),
            request_id=getattr(request.state, "request_id", None),
        )

    def as_metadata(self) -> dict[str, str]:
        """Metadata keys for the fields that are known."""
        fields = {
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "session_id": self.session_id,
            "request_id": self.request_id,
        }
        return {key: value for key, value in fields.items() if value is not None}


class PaymentAuditService:
    """Records and reports on payment verification activity.

    Every write runs in its own short-lived session and commits
    independently of the caller's transaction.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    # ------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------

    async def log_action(
        self,
        *,
        performed_by: UUID,
        action: AuditAction | str,
        category: AuditCategory | str,
        description: str,
        payment_verification_id: UUID | None = None,
        booking_id: UUID | None = None,
        previous_state: dict[str, Any] | None = None,
        new_state: dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
        severity: AuditSeverity | str = AuditSeverity.MEDIUM,
        tags: list[str] | None = None,
        context: AuditContext | None = None,
    ) -> PaymentAuditLog | None:
        """Persist one audit entry.

        Args:
            performed_by: User who performed the action
            action: What happened
            category: Grouping for reports
            description: Human-readable summary
            payment_verification_id: Payment concerned, if any
            booking_id: Booking concerned, if any
            previous_state: Snapshot before the action
            new_state: Snapshot after the action
            metadata: Action-specific details. UUID, datetime and Decimal
                values here and in the snapshots are stored in JSON form.
            severity: Priority of the entry
            tags: Free-form labels
            context: Request context merged into metadata

        Returns:
            The stored entry, or None if it could not be recorded
        """
        entry_metadata = dict(metadata or {})
        if context is not None:
            entry_metadata.update(context.as_metadata())

        try:
            entry = PaymentAuditLog(
                payment_verification_id=payment_verification_id,
                booking_id=booking_id,
                performed_by=performed_by,
                action=AuditAction(action),
                category=AuditCategory(category),
                severity=AuditSeverity(severity),
                description=description,
                previous_state=to_jsonable_python(previous_state),
                new_state=to_jsonable_python(new_state),
                metadata_=to_jsonable_python(entry_metadata),
                tags=list(tags or []),
                timestamp=utcnow(),
            )
            async with self.session_factory() as session:
                await PaymentAuditLogRepository(session).add(entry)
                await session.commit()
        except Exception:
            log.exception(
                "audit_log_failed",
                action=str(action),
                performed_by=str(performed_by),
                payment_verification_id=(
                    str(payment_verification_id) if payment_verification_id else None
                ),
            )
            return None

        log.info(
            "audit_log_created",
            action=str(entry.action),
            category=str(entry.category),
            severity=str(entry.severity),
            performed_by=str(performed_by),
        )
        return entry

    async def log_payment_submission(
        self,
        payment: "PaymentVerification",
        user: "User",
        context: AuditContext | None = None,
    ) -> PaymentAuditLog | None:
        """Record a member submitting proof of payment."""
        return await self.log_action(
            payment_verification_id=payment.id,
            booking_id=payment.booking_id,
            performed_by=user.id,
            action=AuditAction.PAYMENT_SUBMITTED,
            description=(
                f"Payment proof submitted for month {payment.month_number} - "
                f"Amount: {payment.currency} {payment.amount:,.2f}"
            ),
            new_state=AuditState(
                status=payment.verification_status,
                amount=float(payment.amount),
                payment_method=payment.payment_method,
            ).snapshot(),
            metadata={
                "file_details": {
                    "filename": payment.proof_filename,
                    "size": payment.proof_size,
                    "mimetype": payment.proof_mimetype,
                }
            },
            severity=AuditSeverity.MEDIUM,
            category=AuditCategory.SUBMISSION,
            tags=["user_action", "file_upload"],
            context=context,
        )

    async def log_payment_verification(
        self,
        payment: "PaymentVerification",
        admin: "User",
        decision: "VerificationDecision | str",
        admin_notes: str | None,
        previous_status: str,
        context: AuditContext | None = None,
    ) -> PaymentAuditLog | None:
        """Record an admin approving or rejecting a payment.

        Rejections are logged with high severity, approvals with medium.

        Raises:
            ValueError: If decision is not approve or reject
        """
        from payaudit.modules.payments.models import (  # noqa: PLC0415
            VerificationDecision,
        )

        decision = VerificationDecision(decision)
        match decision:
            case VerificationDecision.APPROVE:
                action, severity, tag = (
                    AuditAction.PAYMENT_APPROVED,
                    AuditSeverity.MEDIUM,
                    "approval",
                )
            case VerificationDecision.REJECT:
                action, severity, tag = (
                    AuditAction.PAYMENT_REJECTED,
                    AuditSeverity.HIGH,
                    "rejection",
                )

        description = f"Payment {decision.resulting_status} by admin"
        if admin_notes:
            description += f" - Notes: {admin_notes}"

        return await self.log_action(
            payment_verification_id=payment.id,
            booking_id=payment.booking_id,
            performed_by=admin.id,
            action=action,
            description=description,
            previous_state={
                **AuditState(status=previous_status).snapshot(),
                "verified_by": None,
                "verified_at": None,
            },
            new_state=AuditState(
                status=payment.verification_status,
                verified_by=payment.verified_by,
                verified_at=payment.verified_at,
                notes=admin_notes,
            ).snapshot(),
            severity=severity,
            category=AuditCategory.VERIFICATION,
            tags=["admin_action", tag],
            context=context,
        )

    async def log_receipt_generation(
        self,
        payment: "PaymentVerification",
        receipt: ReceiptDetails,
        context: AuditContext | None = None,
    ) -> PaymentAuditLog | None:
        """Record a receipt being issued for an approved payment."""
        return await self.log_action(
            payment_verification_id=payment.id,
            booking_id=payment.booking_id,
            performed_by=payment.verified_by or payment.user_id,
            action=AuditAction.RECEIPT_GENERATED,
            description=f"Payment receipt generated - Receipt #{receipt.receipt_number}",
            metadata={"receipt_details": receipt.model_dump(mode="json")},
            severity=AuditSeverity.LOW,
            category=AuditCategory.ADMINISTRATION,
            tags=["receipt", "document_generation"],
            context=context,
        )

    async def log_receipt_download(
        self,
        payment: "PaymentVerification",
        user: "User",
        context: AuditContext | None = None,
    ) -> PaymentAuditLog | None:
        """Record a receipt being downloaded."""
        return await self.log_action(
            payment_verification_id=payment.id,
            booking_id=payment.booking_id,
            performed_by=user.id,
            action=AuditAction.RECEIPT_DOWNLOADED,
            description=f"Payment receipt downloaded - Receipt #{payment.receipt_number}",
            metadata={
                "receipt_details": {
                    "receipt_number": payment.receipt_number,
                    "downloaded_by": str(user.role),
                }
            },
            severity=AuditSeverity.LOW,
            category=AuditCategory.ADMINISTRATION,
            tags=["receipt", "download"],
            context=context,
        )

    async def log_payment_export(
        self,
        user: "User",
        export: ExportDetails,
        context: AuditContext | None = None,
    ) -> PaymentAuditLog | None:
        """Record a bulk export of payment data.

        Exports span many payments, so no payment or booking is referenced.
        """
        return await self.log_action(
            payment_verification_id=None,
            booking_id=None,
            performed_by=user.id,
            action=AuditAction.PAYMENT_EXPORTED,
            description=(
                f"Payment data exported in {export.format} format - "
                f"{export.record_count} records"
            ),
            metadata={"export_details": export.model_dump(mode="json")},
            severity=AuditSeverity.MEDIUM,
            category=AuditCategory.EXPORT,
            tags=["admin_action", "data_export", export.format],
            context=context,
        )

    async def log_payment_view(
        self,
        payment_id: UUID,
        booking_id: UUID | None,
        user: "User",
        context: AuditContext | None = None,
    ) -> PaymentAuditLog | None:
        """Record someone viewing payment details."""
        role = str(user.role)
        return await self.log_action(
            payment_verification_id=payment_id,
            booking_id=booking_id,
            performed_by=user.id,
            action=AuditAction.PAYMENT_VIEWED,
            description=f"Payment details viewed by {role}",
            severity=AuditSeverity.LOW,
            category=AuditCategory.ADMINISTRATION,
            tags=["view", role],
            context=context,
        )

    async def log_security_event(
        self,
        payment_id: UUID | None,
        booking_id: UUID | None,
        user: "User",
        action: AuditAction | str,
        description: str,
        context: AuditContext | None = None,
    ) -> PaymentAuditLog | None:
        """Record a security-relevant event, always with high severity."""
        return await self.log_action(
            payment_verification_id=payment_id,
            booking_id=booking_id,
            performed_by=user.id,
            action=action,
            description=description,
            severity=AuditSeverity.HIGH,
            category=AuditCategory.SECURITY,
            tags=["security", "alert"],
            context=context,
        )

    # ------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------

    async def get_payment_audit_trail(
        self,
        payment_id: UUID,
        *,
        limit: int = DEFAULT_AUDIT_PAGE_SIZE,
        page: int = 1,
        category: AuditCategory | None = None,
        action: AuditAction | None = None,
    ) -> tuple[list[PaymentAuditLog], Pagination]:
        """Entries for one payment, newest first, with the actor resolved."""
        try:
            async with self.session_factory() as session:
                entries, total = await PaymentAuditLogRepository(session).list_for_payment(
                    payment_id,
                    category=category,
                    action=action,
                    offset=(page - 1) * limit,
                    limit=limit,
                )
        except Exception:
            log.exception("audit_trail_query_failed", payment_id=str(payment_id))
            raise

        return entries, Pagination.build(page, limit, total)

    async def get_user_activity(
        self,
        user_id: UUID,
        *,
        limit: int = DEFAULT_AUDIT_PAGE_SIZE,
        page: int = 1,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> tuple[list[PaymentAuditLog], Pagination]:
        """Entries performed by one user within an optional window, newest first."""
        try:
            async with self.session_factory() as session:
                entries, total = await PaymentAuditLogRepository(session).list_for_user(
                    user_id,
                    start=start_date,
                    end=end_date,
                    offset=(page - 1) * limit,
                    limit=limit,
                )
        except Exception:
            log.exception("user_activity_query_failed", user_id=str(user_id))
            raise

        return entries, Pagination.build(page, limit, total)

    async def get_audit_statistics(
        self,
        *,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> AuditStatistics:
        """Total entry count with per-category and per-severity breakdowns."""
        try:
            async with self.session_factory() as session:
                repo = PaymentAuditLogRepository(session)
                total = await repo.count(start_date, end_date)
                by_category = await repo.count_by_category(start_date, end_date)
                by_severity = await repo.count_by_severity(start_date, end_date)
        except Exception:
            log.exception("audit_statistics_query_failed")
            raise

        return AuditStatistics(
            total_actions=total,
            category_breakdown=by_category,
            severity_breakdown=by_severity,
        )

    async def get_suspicious_activities(
        self,
        *,
        limit: int = 50,
        hours: int = 24,
    ) -> list[PaymentAuditLog]:
        """Recent critical, security, rejection and file deletion entries."""
        since = utcnow() - timedelta(hours=hours)
        try:
            async with self.session_factory() as session:
                return await PaymentAuditLogRepository(session).list_suspicious(
                    since, limit
                )
        except Exception:
            log.exception("suspicious_activity_query_failed", hours=hours)
            raise

    async def cleanup_old_logs(self, days_to_keep: int = 365) -> int:
        """Delete low and medium severity entries older than the retention window.

        Returns:
            Number of entries deleted
        """
        cutoff = utcnow() - timedelta(days=days_to_keep)
        try:
            async with self.session_factory() as session:
                deleted = await PaymentAuditLogRepository(session).delete_expired(cutoff)
                await session.commit()
        except Exception:
            log.exception("audit_cleanup_failed", days_to_keep=days_to_keep)
            raise

        log.info(
            "audit_cleanup_complete",
            deleted_count=deleted,
            days_to_keep=days_to_keep,
            cutoff=cutoff.isoformat(),
        )
        return deleted


def get_audit_service(session_factory: SessionFactory) -> PaymentAuditService:
    return PaymentAuditService(session_factory)


def get_audit_context(request: Request) -> AuditContext:
    return AuditContext.from_request(request)


# Type aliases for dependency injection
AuditSvc = Annotated[PaymentAuditService, Depends(get_audit_service)]
RequestAuditContext = Annotated[AuditContext, Depends(get_audit_context)]
