"""Unit tests for the payment audit service."""

from contextlib import asynccontextmanager
from datetime import date
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from starlette.requests import Request

from payaudit.modules.audit.models import (
    AuditAction,
    AuditCategory,
    AuditSeverity,
    PaymentAuditLog,
)
from payaudit.modules.audit.schemas import ExportDetails, ReceiptDetails
from payaudit.modules.audit.services import AuditContext, PaymentAuditService
from payaudit.modules.payments.models import (
    Currency,
    PaymentMethod,
    VerificationDecision,
    VerificationStatus,
)
from payaudit.modules.users.models import UserRole


def make_session_factory(session):
    """Session factory stand-in that always yields the given session."""

    @asynccontextmanager
    async def factory():
        yield session

    return factory


def make_request(headers: dict[str, str] | None = None, client=("203.0.113.9", 5000)):
    raw_headers = [
        (k.lower().encode(), v.encode()) for k, v in (headers or {}).items()
    ]
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": raw_headers,
        "client": client,
        "query_string": b"",
        "state": {},
    }
    return Request(scope)


@pytest.fixture
def mock_session():
    session = AsyncMock()
    session.add = MagicMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    return session


@pytest.fixture
def service(mock_session) -> PaymentAuditService:
    return PaymentAuditService(make_session_factory(mock_session))


@pytest.fixture
def admin():
    return SimpleNamespace(id=uuid4(), role=UserRole.ADMIN)


@pytest.fixture
def member():
    return SimpleNamespace(id=uuid4(), role=UserRole.USER)


@pytest.fixture
def payment(member):
    return SimpleNamespace(
        id=uuid4(),
        booking_id=uuid4(),
        user_id=member.id,
        month_number=3,
        amount=Decimal("5000.00"),
        currency=Currency.NGN,
        payment_method=PaymentMethod.BANK_TRANSFER,
        payment_date=date(2026, 3, 1),
        proof_filename="proof.pdf",
        proof_size=1024,
        proof_mimetype="application/pdf",
        verification_status=VerificationStatus.PENDING,
        verified_by=None,
        verified_at=None,
        receipt_number=None,
    )


def added_entry(mock_session) -> PaymentAuditLog:
    mock_session.add.assert_called_once()
    return mock_session.add.call_args[0][0]


class TestAuditContext:
    """Tests for AuditContext."""

    def test_create_context_minimal(self):
        context = AuditContext()

        assert context.ip_address is None
        assert context.as_metadata() == {}

    def test_as_metadata_skips_unknown_fields(self):
        context = AuditContext(ip_address="10.0.0.1", request_id="req-1")

        assert context.as_metadata() == {
            "ip_address": "10.0.0.1",
            "request_id": "req-1",
        }

    def test_from_request_prefers_forwarded_address(self):
        request = make_request(
            {
                "X-Forwarded-For": "198.51.100.7, 10.0.0.2",
                "User-Agent": "Mozilla/5.0",
                "X-Session-ID": "sess-42",
            }
        )
        request.state.request_id = "req-42"

        context = AuditContext.from_request(request)

        assert context.ip_address == "198.51.100.7"
        assert context.user_agent == "Mozilla/5.0"
        assert context.session_id == "sess-42"
        assert context.request_id == "req-42"

    def test_from_request_falls_back_to_client_and_cookie(self):
        request = make_request({"Cookie": "session_id=cookie-sess"})

        context = AuditContext.from_request(request)

        assert context.ip_address == "203.0.113.9"
        assert context.session_id == "cookie-sess"
        assert context.request_id is None


class TestLogAction:
    """Tests for PaymentAuditService.log_action."""

    async def test_persists_entry_with_defaults(self, service, mock_session, admin):
        entry = await service.log_action(
            performed_by=admin.id,
            action=AuditAction.PAYMENT_VIEWED,
            category=AuditCategory.ADMINISTRATION,
            description="Payment details viewed by admin",
        )

        stored = added_entry(mock_session)
        assert entry is stored
        assert stored.severity == AuditSeverity.MEDIUM
        assert stored.metadata_ == {}
        assert stored.tags == []
        assert stored.timestamp is not None
        mock_session.commit.assert_awaited_once()

    async def test_accepts_plain_string_values(self, service, mock_session, admin):
        await service.log_action(
            performed_by=admin.id,
            action="payment_exported",
            category="export",
            severity="high",
            description="Exported",
        )

        stored = added_entry(mock_session)
        assert stored.action is AuditAction.PAYMENT_EXPORTED
        assert stored.category is AuditCategory.EXPORT
        assert stored.severity is AuditSeverity.HIGH

    async def test_merges_context_into_metadata(self, service, mock_session, admin):
        context = AuditContext(ip_address="10.0.0.1", user_agent="Agent")

        await service.log_action(
            performed_by=admin.id,
            action=AuditAction.PAYMENT_VIEWED,
            category=AuditCategory.ADMINISTRATION,
            description="Viewed",
            metadata={"source": "dashboard"},
            context=context,
        )

        stored = added_entry(mock_session)
        assert stored.metadata_ == {
            "source": "dashboard",
            "ip_address": "10.0.0.1",
            "user_agent": "Agent",
        }

    async def test_store_failure_returns_none(self, service, mock_session, admin):
        mock_session.commit.side_effect = RuntimeError("database unavailable")

        entry = await service.log_action(
            performed_by=admin.id,
            action=AuditAction.PAYMENT_VIEWED,
            category=AuditCategory.ADMINISTRATION,
            description="Viewed",
        )

        assert entry is None

    async def test_session_factory_failure_returns_none(self, admin):
        def broken_factory():
            raise ConnectionError("cannot connect")

        service = PaymentAuditService(broken_factory)

        entry = await service.log_action(
            performed_by=admin.id,
            action=AuditAction.PAYMENT_VIEWED,
            category=AuditCategory.ADMINISTRATION,
            description="Viewed",
        )

        assert entry is None

    async def test_unknown_action_returns_none(self, service, mock_session, admin):
        entry = await service.log_action(
            performed_by=admin.id,
            action="payment_teleported",
            category=AuditCategory.ADMINISTRATION,
            description="Not a real action",
        )

        assert entry is None
        mock_session.add.assert_not_called()


class TestHelpers:
    """Tests for the intention-revealing logging helpers."""

    async def test_payment_submission(self, service, mock_session, payment, member):
        await service.log_payment_submission(payment, member)

        stored = added_entry(mock_session)
        assert stored.action is AuditAction.PAYMENT_SUBMITTED
        assert stored.category is AuditCategory.SUBMISSION
        assert stored.severity is AuditSeverity.MEDIUM
        assert stored.performed_by == member.id
        assert stored.new_state == {
            "status": "pending",
            "amount": 5000.0,
            "payment_method": "bank_transfer",
        }
        assert stored.metadata_["file_details"] == {
            "filename": "proof.pdf",
            "size": 1024,
            "mimetype": "application/pdf",
        }
        assert stored.tags == ["user_action", "file_upload"]

    async def test_approval_is_medium_severity(
        self, service, mock_session, payment, admin
    ):
        payment.verification_status = VerificationStatus.APPROVED
        payment.verified_by = admin.id

        await service.log_payment_verification(
            payment, admin, VerificationDecision.APPROVE, None, "pending"
        )

        stored = added_entry(mock_session)
        assert stored.action is AuditAction.PAYMENT_APPROVED
        assert stored.severity is AuditSeverity.MEDIUM
        assert stored.category is AuditCategory.VERIFICATION
        assert stored.tags == ["admin_action", "approval"]
        assert stored.description == "Payment approved by admin"

    async def test_rejection_is_high_severity(
        self, service, mock_session, payment, admin
    ):
        payment.verification_status = VerificationStatus.REJECTED

        await service.log_payment_verification(
            payment, admin, "reject", "insufficient proof", "pending"
        )

        stored = added_entry(mock_session)
        assert stored.action is AuditAction.PAYMENT_REJECTED
        assert stored.severity is AuditSeverity.HIGH
        assert stored.previous_state == {
            "status": "pending",
            "verified_by": None,
            "verified_at": None,
        }
        assert stored.new_state["status"] == "rejected"
        assert stored.new_state["notes"] == "insufficient proof"
        assert stored.description.endswith("Notes: insufficient proof")

    async def test_invalid_decision_raises(self, service, mock_session, payment, admin):
        with pytest.raises(ValueError):
            await service.log_payment_verification(
                payment, admin, "maybe", None, "pending"
            )

        mock_session.add.assert_not_called()

    async def test_receipt_generation_falls_back_to_owner(
        self, service, mock_session, payment
    ):
        await service.log_receipt_generation(
            payment, ReceiptDetails(receipt_number="RCP-202610-ABC123")
        )

        stored = added_entry(mock_session)
        assert stored.performed_by == payment.user_id
        assert stored.severity is AuditSeverity.LOW
        assert stored.metadata_["receipt_details"]["receipt_number"] == "RCP-202610-ABC123"

    async def test_payment_export_has_no_payment_reference(
        self, service, mock_session, admin
    ):
        export = ExportDetails(
            format="csv",
            filters={"status": "approved"},
            record_count=12,
            filename="payments.csv",
        )

        await service.log_payment_export(admin, export)

        stored = added_entry(mock_session)
        assert stored.payment_verification_id is None
        assert stored.booking_id is None
        assert stored.category is AuditCategory.EXPORT
        assert stored.tags == ["admin_action", "data_export", "csv"]
        assert stored.metadata_["export_details"]["record_count"] == 12

    async def test_payment_view_tags_role(self, service, mock_session, payment, member):
        await service.log_payment_view(payment.id, payment.booking_id, member)

        stored = added_entry(mock_session)
        assert stored.action is AuditAction.PAYMENT_VIEWED
        assert stored.tags == ["view", "user"]
        assert stored.description == "Payment details viewed by user"

    async def test_security_event_is_always_high(
        self, service, mock_session, payment, member
    ):
        await service.log_security_event(
            payment.id,
            payment.booking_id,
            member,
            AuditAction.FILE_DELETED,
            "Proof file removed outside the review flow",
        )

        stored = added_entry(mock_session)
        assert stored.severity is AuditSeverity.HIGH
        assert stored.category is AuditCategory.SECURITY
        assert stored.tags == ["security", "alert"]


class TestReads:
    """Read operations propagate storage failures."""

    async def test_statistics_failure_is_raised(self, mock_session):
        mock_session.execute.side_effect = RuntimeError("database unavailable")
        service = PaymentAuditService(make_session_factory(mock_session))

        with pytest.raises(RuntimeError, match="database unavailable"):
            await service.get_audit_statistics()

    async def test_cleanup_failure_is_raised(self, mock_session):
        mock_session.execute.side_effect = RuntimeError("database unavailable")
        service = PaymentAuditService(make_session_factory(mock_session))

        with pytest.raises(RuntimeError):
            await service.cleanup_old_logs(30)

        mock_session.commit.assert_not_awaited()
