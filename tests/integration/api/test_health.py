"""Tests for health and info endpoints."""

from httpx import AsyncClient

from payaudit.models import PaymentAuditLog


async def test_liveness_endpoint(client: AsyncClient):
    response = await client.get("/health/live")

    assert response.status_code == 200
    assert response.json()["status"] == "alive"


async def test_readiness_checks_database_and_audit_store(client: AsyncClient):
    response = await client.get("/health/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"] == {"database": "ok", "audit_store": "ok"}


async def test_readiness_degraded_without_audit_table(client: AsyncClient, engine):
    async with engine.begin() as conn:
        await conn.run_sync(PaymentAuditLog.__table__.drop)

    response = await client.get("/health/ready")

    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "degraded"
    assert data["checks"] == {"database": "ok", "audit_store": "unavailable"}


async def test_info_reports_audit_policy(client: AsyncClient):
    response = await client.get("/info")

    assert response.status_code == 200
    data = response.json()
    assert data["app"] == "Community Payments Audit"
    assert "version" in data
    assert data["modules"] == ["audit", "payments"]
    assert data["audit"] == {
        "retention_days": 365,
        "suspicious_window_hours": 24,
        "cleanup_hour_utc": 3,
    }


async def test_openapi_describes_append_only_trail(client: AsyncClient):
    response = await client.get("/openapi.json")

    assert "append-only audit trail" in response.json()["info"]["description"]


async def test_request_id_is_echoed(client: AsyncClient):
    response = await client.get("/health/live", headers={"X-Request-ID": "req-abc"})

    assert response.headers["X-Request-ID"] == "req-abc"
