"""Root API router.

Health and info endpoints live at the root; every feature module router is
mounted under ``/api/v1``.
"""

import structlog
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import select, text

from payaudit import __version__
from payaudit.api.dependencies import DBSession
from payaudit.config import settings
from payaudit.modules import discover_modules
from payaudit.modules.audit.models import PaymentAuditLog


log = structlog.get_logger()


class HealthResponse(BaseModel):
    status: str


class ReadinessResponse(BaseModel):
    status: str
    checks: dict[str, str]


class AuditPolicy(BaseModel):
    """Retention and monitoring windows applied to the audit trail."""

    retention_days: int
    suspicious_window_hours: int
    cleanup_hour_utc: int


class InfoResponse(BaseModel):
    app: str
    version: str
    environment: str
    modules: list[str]
    audit: AuditPolicy


module_routers = discover_modules()

api_router = APIRouter()
health_router = APIRouter(tags=["health"])


@health_router.get(
    "/health/live",
    response_model=HealthResponse,
    summary="Liveness probe",
)
async def liveness() -> HealthResponse:
    return HealthResponse(status="alive")


@health_router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    description=(
        "Checks the database connection and that the audit log table can be "
        "read. Returns 503 if either check fails."
    ),
)
async def readiness(db: DBSession) -> JSONResponse:
    """Report whether the service can record and read audit entries."""
    checks: dict[str, str] = {}
    probes = {
        "database": text("SELECT 1"),
        "audit_store": select(PaymentAuditLog.id).limit(1),
    }

    for name, stmt in probes.items():
        try:
            await db.execute(stmt)
            checks[name] = "ok"
        except Exception as e:
            log.warning("readiness_check_failed", check=name, error=str(e))
            checks[name] = "unavailable"

    ready = all(v == "ok" for v in checks.values())
    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "ready" if ready else "degraded", "checks": checks},
    )


@health_router.get(
    "/info",
    response_model=InfoResponse,
    summary="Service info",
    description="Version, mounted modules and the audit retention policy.",
)
async def info() -> InfoResponse:
    return InfoResponse(
        app=settings.app_name,
        version=__version__,
        environment=settings.environment,
        modules=sorted(router.prefix.strip("/") for router in module_routers),
        audit=AuditPolicy(
            retention_days=settings.audit_retention_days,
            suspicious_window_hours=settings.audit_suspicious_window_hours,
            cleanup_hour_utc=settings.audit_cleanup_hour,
        ),
    )


v1_router = APIRouter(prefix="/api/v1")
for module_router in module_routers:
    v1_router.include_router(module_router)

api_router.include_router(health_router)
api_router.include_router(v1_router)
