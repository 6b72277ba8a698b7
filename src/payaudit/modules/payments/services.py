"""Payment verification service.

Each operation commits its own change before recording the audit entry,
so a lost audit write never rolls back the payment itself.
"""

import secrets
from typing import TYPE_CHECKING, Annotated
from uuid import UUID

import structlog
from fastapi import Depends

from payaudit.api.dependencies import DBSession
from payaudit.core.constants import RECEIPT_PREFIX
from payaudit.core.database.base import utcnow
from payaudit.core.errors import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
)
from payaudit.modules.audit.models import AuditAction
from payaudit.modules.audit.schemas import ExportDetails, ReceiptDetails
from payaudit.modules.audit.services import AuditContext, AuditSvc, PaymentAuditService
from payaudit.modules.bookings.models import Booking
from payaudit.modules.payments.exports import (
    ExportFormat,
    export_filename,
    render_payments_csv,
    render_payments_xlsx,
)
from payaudit.modules.payments.models import (
    OPEN_STATUSES,
    PaymentVerification,
    VerificationDecision,
    VerificationStatus,
)
from payaudit.modules.payments.repos import PaymentVerificationRepository
from payaudit.modules.payments.schemas import (
    ExportFilters,
    PaymentSubmission,
    ReceiptResponse,
)


if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from payaudit.modules.users.models import User


log = structlog.get_logger()


def generate_receipt_number() -> str:
    """Create a receipt number such as ``RCP-202610-3F9A1C``."""
    return f"{RECEIPT_PREFIX}-{utcnow():%Y%m}-{secrets.token_hex(3).upper()}"


class PaymentVerificationService:
    """Business operations on payment verifications.

    Args:
        session: Database session for payment and booking changes
        audit: Audit service recording each operation
    """

    def __init__(self, session: "AsyncSession", audit: PaymentAuditService) -> None:
        self.session = session
        self.repo = PaymentVerificationRepository(session)
        self.audit = audit

    async def _get_or_404(self, payment_id: UUID) -> PaymentVerification:
        payment = await self.repo.get_by_id(payment_id)
        if not payment:
            raise NotFoundError(
                "Payment verification not found",
                resource="payment_verification",
                resource_id=str(payment_id),
            )
        return payment

    async def _ensure_can_access(
        self,
        payment: PaymentVerification,
        user: "User",
        context: AuditContext | None,
    ) -> None:
        if user.is_admin or payment.user_id == user.id:
            return

        await self.audit.log_security_event(
            payment.id,
            payment.booking_id,
            user,
            AuditAction.PAYMENT_VIEWED,
            "Unauthorized attempt to access payment details",
            context=context,
        )
        raise ForbiddenError(
            "You do not have access to this payment",
            error_code="payment_access_denied",
        )

    async def submit_payment(
        self,
        user: "User",
        data: PaymentSubmission,
        context: AuditContext | None = None,
    ) -> PaymentVerification:
        """Record a member's proof of payment for one booking month.

        Args:
            user: Member submitting the proof
            data: Payment and proof file details
            context: Request context for the audit entry

        Returns:
            The pending verification

        Raises:
            NotFoundError: If the booking does not exist
            ForbiddenError: If the booking belongs to someone else
            BadRequestError: If the month is outside the booking's schedule
            ConflictError: If the month already has a pending or approved payment
        """
        booking = await self.session.get(Booking, data.booking_id)
        if not booking:
            raise NotFoundError(
                "Booking not found",
                resource="booking",
                resource_id=str(data.booking_id),
            )
        if booking.user_id != user.id:
            raise ForbiddenError(
                "You can only submit payments for your own bookings",
                error_code="booking_not_owned",
            )
        if data.month_number > booking.total_months:
            raise BadRequestError(
                f"Booking only has {booking.total_months} monthly payments",
                error_code="invalid_month",
                details={"month_number": data.month_number},
            )

        existing = await self.repo.get_active_for_month(booking.id, data.month_number)
        if existing:
            raise ConflictError(
                "Payment verification already exists for this month",
                error_code="payment_exists",
                details={
                    "month_number": data.month_number,
                    "existing_status": str(existing.verification_status),
                },
            )

        payment = PaymentVerification(
            user_id=user.id,
            verification_status=VerificationStatus.PENDING,
            submitted_at=utcnow(),
            **data.model_dump(),
        )
        await self.repo.create(payment)
        await self.session.commit()

        log.info(
            "payment_submitted",
            payment_id=str(payment.id),
            booking_id=str(booking.id),
            month_number=payment.month_number,
        )
        await self.audit.log_payment_submission(payment, user, context)
        return payment

    async def verify_payment(
        self,
        payment_id: UUID,
        admin: "User",
        decision: VerificationDecision | str,
        admin_notes: str | None = None,
        context: AuditContext | None = None,
    ) -> PaymentVerification:
        """Approve or reject a submitted payment.

        Approval counts the month towards the booking and issues a receipt.

        Raises:
            ValueError: If decision is not approve or reject
            NotFoundError: If the payment does not exist
            BadRequestError: If the payment was already decided
        """
        decision = VerificationDecision(decision)
        payment = await self._get_or_404(payment_id)

        if payment.verification_status not in OPEN_STATUSES:
            raise BadRequestError(
                f"Payment has already been {payment.verification_status}",
                error_code="payment_already_verified",
                details={"current_status": str(payment.verification_status)},
            )

        previous_status = payment.verification_status
        payment.verification_status = decision.resulting_status
        payment.verified_by = admin.id
        payment.verified_at = utcnow()
        payment.admin_notes = admin_notes

        receipt: ReceiptDetails | None = None
        if decision is VerificationDecision.APPROVE:
            booking = await self.session.get(Booking, payment.booking_id)
            if booking:
                booking.record_paid_month()
            payment.receipt_number = generate_receipt_number()
            payment.receipt_filename = f"receipt-{payment.receipt_number}.pdf"
            receipt = ReceiptDetails(
                receipt_number=payment.receipt_number,
                filename=payment.receipt_filename,
            )
        else:
            payment.rejection_reason = admin_notes

        await self.session.commit()

        log.info(
            "payment_verified",
            payment_id=str(payment.id),
            decision=str(decision),
            verified_by=str(admin.id),
        )
        await self.audit.log_payment_verification(
            payment, admin, decision, admin_notes, previous_status, context
        )
        if receipt is not None:
            await self.audit.log_receipt_generation(payment, receipt, context)
        return payment

    async def get_payment(
        self,
        payment_id: UUID,
        viewer: "User",
        context: AuditContext | None = None,
    ) -> PaymentVerification:
        """Fetch a payment for its owner or an admin.

        Raises:
            NotFoundError: If the payment does not exist
            ForbiddenError: If the viewer is neither owner nor admin
        """
        payment = await self._get_or_404(payment_id)
        await self._ensure_can_access(payment, viewer, context)
        await self.audit.log_payment_view(payment.id, payment.booking_id, viewer, context)
        return payment

    async def download_receipt(
        self,
        payment_id: UUID,
        user: "User",
        context: AuditContext | None = None,
    ) -> ReceiptResponse:
        """Return receipt details for an approved payment.

        Raises:
            NotFoundError: If the payment does not exist
            ForbiddenError: If the user is neither owner nor admin
            BadRequestError: If no receipt has been issued
        """
        payment = await self._get_or_404(payment_id)
        await self._ensure_can_access(payment, user, context)

        if (
            payment.verification_status != VerificationStatus.APPROVED
            or not payment.receipt_number
        ):
            raise BadRequestError(
                "Receipt is only available for approved payments",
                error_code="receipt_unavailable",
            )

        await self.audit.log_receipt_download(payment, user, context)
        return ReceiptResponse(
            payment_id=payment.id,
            receipt_number=payment.receipt_number,
            receipt_filename=payment.receipt_filename,
            amount=payment.amount,
            currency=payment.currency,
            month_number=payment.month_number,
            verified_at=payment.verified_at,
        )

    async def export_payments(
        self,
        admin: "User",
        filters: ExportFilters,
        context: AuditContext | None = None,
        export_format: ExportFormat | str = ExportFormat.CSV,
    ) -> tuple[str, str | bytes]:
        """Render matching payments as CSV text or an Excel workbook.

        Args:
            admin: Admin requesting the export
            filters: Which payments to include
            context: Request context for the audit entry
            export_format: csv or excel

        Returns:
            Tuple of (filename, CSV text or xlsx bytes)

        Raises:
            ValueError: If export_format is not csv or excel
        """
        export_format = ExportFormat(export_format)
        payments = await self.repo.list_for_export(filters)
        generated_at = utcnow()
        content: str | bytes
        if export_format is ExportFormat.EXCEL:
            content, record_count = render_payments_xlsx(payments, generated_at)
        else:
            content, record_count = render_payments_csv(payments)
        filename = export_filename(generated_at, export_format)

        log.info(
            "payments_exported",
            format=str(export_format),
            record_count=record_count,
            filename=filename,
        )
        await self.audit.log_payment_export(
            admin,
            ExportDetails(
                format=str(export_format),
                filters=filters.applied(),
                record_count=record_count,
                filename=filename,
            ),
            context,
        )
        return filename, content


def get_payment_service(db: DBSession, audit: AuditSvc) -> PaymentVerificationService:
    return PaymentVerificationService(db, audit)


# Type alias for dependency injection
PaymentSvc = Annotated[PaymentVerificationService, Depends(get_payment_service)]
