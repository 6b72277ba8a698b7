"""Tests for payaudit CLI commands."""

from datetime import datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from typer.testing import CliRunner

from payaudit import __version__
from payaudit.cli import app
from payaudit.modules.audit.models import AuditAction, AuditSeverity
from payaudit.modules.audit.schemas import AuditStatistics


# Wide enough that table columns are never truncated
runner = CliRunner(env={"COLUMNS": "200"})


@pytest.fixture
def audit_service():
    service = MagicMock()
    with patch("payaudit.cli.get_audit_service", return_value=service):
        yield service


def test_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.stdout


class TestCleanupCommand:
    def test_reports_deleted_count(self, audit_service):
        audit_service.cleanup_old_logs = AsyncMock(return_value=4)

        result = runner.invoke(app, ["cleanup", "--days", "90"])

        assert result.exit_code == 0, result.stdout
        audit_service.cleanup_old_logs.assert_awaited_once_with(90)
        assert "Deleted 4 audit entries" in result.stdout

    def test_rejects_zero_days(self, audit_service):
        result = runner.invoke(app, ["cleanup", "--days", "0"])

        assert result.exit_code != 0


class TestStatsCommand:
    def test_prints_breakdowns(self, audit_service):
        audit_service.get_audit_statistics = AsyncMock(
            return_value=AuditStatistics(
                total_actions=3,
                category_breakdown={"submission": 2, "verification": 1},
                severity_breakdown={"medium": 3},
            )
        )

        result = runner.invoke(app, ["stats", "--start", "2026-10-01"])

        assert result.exit_code == 0, result.stdout
        kwargs = audit_service.get_audit_statistics.await_args.kwargs
        assert kwargs["start_date"] == datetime(2026, 10, 1)
        assert kwargs["end_date"] is None
        assert "Total actions:" in result.stdout
        assert "submission" in result.stdout


class TestSuspiciousCommand:
    def test_lists_entries(self, audit_service):
        performer = uuid4()
        audit_service.get_suspicious_activities = AsyncMock(
            return_value=[
                SimpleNamespace(
                    timestamp=datetime(2026, 10, 19, 8, 30),
                    action=AuditAction.PAYMENT_REJECTED,
                    severity=AuditSeverity.HIGH,
                    performed_by=performer,
                    description="Payment rejected by admin",
                )
            ]
        )

        result = runner.invoke(app, ["suspicious", "--hours", "12", "--limit", "5"])

        assert result.exit_code == 0, result.stdout
        audit_service.get_suspicious_activities.assert_awaited_once_with(
            limit=5, hours=12
        )
        assert "payment_rejected" in result.stdout
        assert str(performer)[:8] in result.stdout
        assert "Payment rejected by admin" in result.stdout

    def test_narrow_terminal_folds_instead_of_truncating(self, audit_service):
        audit_service.get_suspicious_activities = AsyncMock(
            return_value=[
                SimpleNamespace(
                    timestamp=datetime(2026, 10, 19, 8, 30),
                    action=AuditAction.PAYMENT_VIEWED,
                    severity=AuditSeverity.HIGH,
                    performed_by=uuid4(),
                    description="Unauthorized attempt to access payment details",
                )
            ]
        )

        result = CliRunner(env={"COLUMNS": "80"}).invoke(app, ["suspicious"])

        assert result.exit_code == 0, result.stdout
        assert "…" not in result.stdout

    def test_nothing_found(self, audit_service):
        audit_service.get_suspicious_activities = AsyncMock(return_value=[])

        result = runner.invoke(app, ["suspicious"])

        assert result.exit_code == 0
        assert "No suspicious activity" in result.stdout
