"""Audit module: append-only trail of payment verification activity.

Provides:
- PaymentAuditLog: Database model for audit entries
- PaymentAuditService: Recording helpers and admin reports
- AuditContext: Request details attached to each entry
"""

from fastapi import APIRouter


router = APIRouter(prefix="/audit", tags=["audit"])

# Import routes to register them (must be after router is defined)
from payaudit.modules.audit import routes  # noqa: F401, E402
from payaudit.modules.audit.models import PaymentAuditLog  # noqa: E402
from payaudit.modules.audit.services import (  # noqa: E402
    AuditContext,
    PaymentAuditService,
)


__all__ = ["AuditContext", "PaymentAuditLog", "PaymentAuditService", "router"]
