"""API tests for admin audit reports and retention."""

from datetime import timedelta

from httpx import AsyncClient

from payaudit.core.database import utcnow
from payaudit.modules.audit.models import AuditAction, AuditCategory, AuditSeverity


class TestAccess:
    async def test_reports_require_admin(self, client: AsyncClient, member_headers):
        for path in ("/api/v1/audit/statistics", "/api/v1/audit/suspicious"):
            response = await client.get(path, headers=member_headers)

            assert response.status_code == 403
            assert response.json()["type"].endswith("/errors/not_admin")

    async def test_cleanup_requires_super_admin(self, client: AsyncClient, admin_headers):
        response = await client.delete("/api/v1/audit/logs", headers=admin_headers)

        assert response.status_code == 403


class TestReports:
    async def test_statistics(self, client: AsyncClient, make_log, admin_headers):
        await make_log(category=AuditCategory.EXPORT, severity=AuditSeverity.MEDIUM)
        await make_log(category=AuditCategory.SECURITY, severity=AuditSeverity.HIGH)

        response = await client.get("/api/v1/audit/statistics", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {
            "total_actions": 2,
            "category_breakdown": {"export": 1, "security": 1},
            "severity_breakdown": {"medium": 1, "high": 1},
        }

    async def test_suspicious(self, client: AsyncClient, make_log, admin_headers):
        flagged = await make_log(action=AuditAction.PAYMENT_REJECTED)
        await make_log()

        response = await client.get(
            "/api/v1/audit/suspicious", params={"hours": 6}, headers=admin_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["hours"] == 6
        assert [item["id"] for item in data["items"]] == [str(flagged.id)]

    async def test_user_activity(
        self, client: AsyncClient, make_log, member, payment, admin_headers
    ):
        await make_log(
            performed_by=member.id,
            payment_verification_id=payment.id,
            booking_id=payment.booking_id,
        )

        response = await client.get(
            f"/api/v1/audit/users/{member.id}/activity", headers=admin_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["pagination"] == {"current": 1, "pages": 1, "total": 1}
        assert data["items"][0]["payment_verification"]["month_number"] == 3
        assert data["items"][0]["booking"]["id"] == str(payment.booking_id)


class TestCleanup:
    async def test_super_admin_runs_sweep(
        self, client: AsyncClient, make_log, super_admin_headers
    ):
        old = utcnow() - timedelta(days=120)
        await make_log(severity=AuditSeverity.LOW, timestamp=old)
        await make_log(severity=AuditSeverity.CRITICAL, timestamp=old)

        response = await client.delete(
            "/api/v1/audit/logs",
            params={"days_to_keep": 90},
            headers=super_admin_headers,
        )

        assert response.status_code == 200
        assert response.json() == {"deleted_count": 1, "days_to_keep": 90}
