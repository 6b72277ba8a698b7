"""Payment verification API routes."""

from io import BytesIO
from uuid import UUID

from fastapi import Depends, Query, Response, status
from fastapi.responses import StreamingResponse

from payaudit.core.auth.dependencies import CurrentAdmin, CurrentUser
from payaudit.core.constants import DEFAULT_AUDIT_PAGE_SIZE, MAX_PAGE_SIZE
from payaudit.modules.audit.models import AuditAction, AuditCategory
from payaudit.modules.audit.schemas import AuditTrailEntry, AuditTrailResponse
from payaudit.modules.audit.services import AuditSvc, RequestAuditContext
from payaudit.modules.payments import router
from payaudit.modules.payments.exports import ExportFormat
from payaudit.modules.payments.schemas import (
    ExportFilters,
    PaymentResponse,
    PaymentSubmission,
    ReceiptResponse,
    VerificationRequest,
)
from payaudit.modules.payments.services import PaymentSvc


# ============================================================
# Member Routes
# ============================================================


@router.post(
    "",
    response_model=PaymentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit payment proof",
    description="Submit proof of one monthly instalment for review.",
)
async def submit_payment(
    data: PaymentSubmission,
    current_user: CurrentUser,
    service: PaymentSvc,
    context: RequestAuditContext,
) -> PaymentResponse:
    """Submit a payment for verification."""
    payment = await service.submit_payment(current_user, data, context)
    return PaymentResponse.model_validate(payment)


# ============================================================
# Admin Routes
# ============================================================


@router.get(
    "/export/csv",
    summary="Export payments",
    description="Download matching payment verifications as CSV. Requires admin.",
    response_class=Response,
)
async def export_payments(
    current_admin: CurrentAdmin,
    service: PaymentSvc,
    context: RequestAuditContext,
    filters: ExportFilters = Depends(),
) -> Response:
    """Export payments as a CSV attachment."""
    filename, content = await service.export_payments(current_admin, filters, context)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get(
    "/export/excel",
    summary="Export payments to Excel",
    description=(
        "Download matching payment verifications as an xlsx workbook with a "
        "summary sheet. Requires admin."
    ),
    response_class=StreamingResponse,
)
async def export_payments_excel(
    current_admin: CurrentAdmin,
    service: PaymentSvc,
    context: RequestAuditContext,
    filters: ExportFilters = Depends(),
) -> StreamingResponse:
    """Export payments as an Excel attachment."""
    filename, content = await service.export_payments(
        current_admin, filters, context, ExportFormat.EXCEL
    )
    return StreamingResponse(
        BytesIO(content),
        media_type=ExportFormat.EXCEL.media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post(
    "/{payment_id}/verify",
    response_model=PaymentResponse,
    summary="Verify payment",
    description="Approve or reject a submitted payment. Requires admin.",
)
async def verify_payment(
    payment_id: UUID,
    data: VerificationRequest,
    current_admin: CurrentAdmin,
    service: PaymentSvc,
    context: RequestAuditContext,
) -> PaymentResponse:
    """Record an admin decision on a payment."""
    payment = await service.verify_payment(
        payment_id, current_admin, data.decision, data.admin_notes, context
    )
    return PaymentResponse.model_validate(payment)


@router.get(
    "/{payment_id}/audit-trail",
    response_model=AuditTrailResponse,
    summary="Payment audit trail",
    description="Audit entries for a payment, newest first. Requires admin.",
)
async def get_audit_trail(
    payment_id: UUID,
    audit: AuditSvc,
    current_admin: CurrentAdmin,  # noqa: ARG001 - required for auth
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(
        DEFAULT_AUDIT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Items per page"
    ),
    category: AuditCategory | None = Query(None, description="Filter by category"),
    action: AuditAction | None = Query(None, description="Filter by action"),
) -> AuditTrailResponse:
    """List the audit trail of one payment."""
    entries, pagination = await audit.get_payment_audit_trail(
        payment_id,
        limit=limit,
        page=page,
        category=category,
        action=action,
    )
    return AuditTrailResponse(
        items=[AuditTrailEntry.model_validate(e) for e in entries],
        pagination=pagination,
    )


# ============================================================
# Owner or Admin Routes
# ============================================================


@router.get(
    "/{payment_id}",
    response_model=PaymentResponse,
    summary="Get payment",
    description="Get a payment verification. Owner or admin only.",
)
async def get_payment(
    payment_id: UUID,
    current_user: CurrentUser,
    service: PaymentSvc,
    context: RequestAuditContext,
) -> PaymentResponse:
    """Get payment details."""
    payment = await service.get_payment(payment_id, current_user, context)
    return PaymentResponse.model_validate(payment)


@router.get(
    "/{payment_id}/receipt",
    response_model=ReceiptResponse,
    summary="Get receipt",
    description="Receipt details for an approved payment. Owner or admin only.",
)
async def download_receipt(
    payment_id: UUID,
    current_user: CurrentUser,
    service: PaymentSvc,
    context: RequestAuditContext,
) -> ReceiptResponse:
    """Download the receipt for a payment."""
    return await service.download_receipt(payment_id, current_user, context)
