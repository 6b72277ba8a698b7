"""Admin API routes for audit reports and retention."""

from datetime import datetime
from uuid import UUID

from fastapi import Query

from payaudit.core.auth.dependencies import CurrentAdmin, CurrentSuperAdmin
from payaudit.core.constants import DEFAULT_AUDIT_PAGE_SIZE, MAX_PAGE_SIZE
from payaudit.modules.audit import router
from payaudit.modules.audit.schemas import (
    AuditStatistics,
    CleanupResponse,
    SuspiciousActivityEntry,
    SuspiciousActivityResponse,
    UserActivityEntry,
    UserActivityResponse,
)
from payaudit.modules.audit.services import AuditSvc


# ============================================================
# Reports
# ============================================================


@router.get(
    "/users/{user_id}/activity",
    response_model=UserActivityResponse,
    summary="User activity",
    description="Audit entries performed by a user, newest first. Requires admin.",
)
async def get_user_activity(
    user_id: UUID,
    service: AuditSvc,
    current_admin: CurrentAdmin,  # noqa: ARG001 - required for auth
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(
        DEFAULT_AUDIT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Items per page"
    ),
    start_date: datetime | None = Query(None, description="Window start (inclusive)"),
    end_date: datetime | None = Query(None, description="Window end (inclusive)"),
) -> UserActivityResponse:
    """List a user's audited actions."""
    entries, pagination = await service.get_user_activity(
        user_id,
        limit=limit,
        page=page,
        start_date=start_date,
        end_date=end_date,
    )
    return UserActivityResponse(
        items=[UserActivityEntry.model_validate(e) for e in entries],
        pagination=pagination,
    )


@router.get(
    "/statistics",
    response_model=AuditStatistics,
    summary="Audit statistics",
    description="Entry counts per category and severity. Requires admin.",
)
async def get_statistics(
    service: AuditSvc,
    current_admin: CurrentAdmin,  # noqa: ARG001 - required for auth
    start_date: datetime | None = Query(None, description="Window start (inclusive)"),
    end_date: datetime | None = Query(None, description="Window end (inclusive)"),
) -> AuditStatistics:
    """Summarize audit activity."""
    return await service.get_audit_statistics(start_date=start_date, end_date=end_date)


@router.get(
    "/suspicious",
    response_model=SuspiciousActivityResponse,
    summary="Suspicious activity",
    description=(
        "Recent critical, security, rejection and file deletion entries. "
        "Requires admin."
    ),
)
async def get_suspicious_activity(
    service: AuditSvc,
    current_admin: CurrentAdmin,  # noqa: ARG001 - required for auth
    limit: int = Query(50, ge=1, le=MAX_PAGE_SIZE, description="Maximum entries"),
    hours: int = Query(24, ge=1, description="Look-back window in hours"),
) -> SuspiciousActivityResponse:
    """List recent entries that need attention."""
    entries = await service.get_suspicious_activities(limit=limit, hours=hours)
    return SuspiciousActivityResponse(
        items=[SuspiciousActivityEntry.model_validate(e) for e in entries],
        hours=hours,
    )


# ============================================================
# Retention
# ============================================================


@router.delete(
    "/logs",
    response_model=CleanupResponse,
    summary="Delete expired audit entries",
    description=(
        "Delete low and medium severity entries older than the retention "
        "window. Requires super admin."
    ),
)
async def cleanup_logs(
    service: AuditSvc,
    current_admin: CurrentSuperAdmin,  # noqa: ARG001 - required for auth
    days_to_keep: int = Query(365, ge=1, description="Retention window in days"),
) -> CleanupResponse:
    """Run the retention sweep."""
    deleted = await service.cleanup_old_logs(days_to_keep)
    return CleanupResponse(deleted_count=deleted, days_to_keep=days_to_keep)
