"""Audit log retention sweep."""

from typing import Any

import structlog

from payaudit.config import settings
from payaudit.modules.audit.services import PaymentAuditService


log = structlog.get_logger()


async def cleanup_audit_logs(ctx: dict[str, Any]) -> dict[str, int]:
    """Delete low and medium severity audit entries past retention.

    Scheduled daily. High and critical entries are kept indefinitely.

    Args:
        ctx: Worker context containing database session factory

    Returns:
        Dict with the number of deleted entries and the retention used
    """
    days_to_keep = settings.audit_retention_days
    service = PaymentAuditService(ctx["db_session_factory"])
    deleted = await service.cleanup_old_logs(days_to_keep)

    log.info(
        "cleanup_audit_logs_complete",
        audit_logs_deleted=deleted,
        days_to_keep=days_to_keep,
    )

    return {"audit_logs_deleted": deleted, "days_to_keep": days_to_keep}
