"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime
from pathlib import Path
from typing import Any
from uuid import UUID

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from payaudit.core.auth import create_access_token
from payaudit.core.database import Base, get_db, get_session_factory, utcnow
from payaudit.main import create_app
from payaudit.models import Booking, PaymentAuditLog, PaymentVerification, User
from payaudit.modules.audit.models import AuditAction, AuditCategory, AuditSeverity
from payaudit.modules.audit.services import AuditContext, PaymentAuditService
from payaudit.modules.users.models import UserRole
from tests.factories.booking import BookingFactory
from tests.factories.payment import PaymentVerificationFactory
from tests.factories.user import UserFactory


@pytest.fixture
async def engine(tmp_path: Path):
    """Create a throwaway SQLite database with all tables."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'payaudit.db'}",
        poolclass=NullPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging and inspecting test data.

    Fixtures commit what they create so that services using their own
    sessions can see it.
    """
    async with session_factory() as session:
        yield session


@pytest.fixture
def audit_service(session_factory) -> PaymentAuditService:
    return PaymentAuditService(session_factory)


@pytest.fixture
def audit_context() -> AuditContext:
    return AuditContext(
        ip_address="10.0.0.1",
        user_agent="Test Agent",
        session_id="sess-123",
        request_id="req-123",
    )


@pytest.fixture
async def app(session_factory):
    """Create test application instance bound to the test database."""
    application = create_app()

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_session_factory] = lambda: session_factory

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


# ============================================================
# Users, Bookings and Payments
# ============================================================


async def _persist(db: AsyncSession, instance: Any) -> Any:
    db.add(instance)
    await db.commit()
    return instance


@pytest.fixture
async def member(db: AsyncSession) -> User:
    """A regular member who owns a booking."""
    return await _persist(db, UserFactory.build(role=UserRole.USER))


@pytest.fixture
async def other_member(db: AsyncSession) -> User:
    return await _persist(db, UserFactory.build(role=UserRole.USER))


@pytest.fixture
async def admin(db: AsyncSession) -> User:
    return await _persist(db, UserFactory.build(role=UserRole.ADMIN, name="Ada Admin"))


@pytest.fixture
async def super_admin(db: AsyncSession) -> User:
    return await _persist(db, UserFactory.build(role=UserRole.SUPER_ADMIN))


@pytest.fixture
async def booking(db: AsyncSession, member: User) -> Booking:
    return await _persist(db, BookingFactory.build(user_id=member.id))


@pytest.fixture
async def payment(db: AsyncSession, booking: Booking, member: User) -> PaymentVerification:
    """A pending payment for month 3 of the member's booking."""
    return await _persist(
        db,
        PaymentVerificationFactory.build(
            booking_id=booking.id,
            user_id=member.id,
            month_number=3,
        ),
    )


def auth_headers_for(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def member_headers(member: User) -> dict[str, str]:
    return auth_headers_for(member)


@pytest.fixture
def other_member_headers(other_member: User) -> dict[str, str]:
    return auth_headers_for(other_member)


@pytest.fixture
def admin_headers(admin: User) -> dict[str, str]:
    return auth_headers_for(admin)


@pytest.fixture
def super_admin_headers(super_admin: User) -> dict[str, str]:
    return auth_headers_for(super_admin)


# ============================================================
# Audit entries with controlled timestamps
# ============================================================


MakeLog = Callable[..., Awaitable[PaymentAuditLog]]


@pytest.fixture
def make_log(db: AsyncSession, admin: User) -> MakeLog:
    """Insert an audit entry directly, with any field overridden."""

    async def _make(
        *,
        timestamp: datetime | None = None,
        performed_by: UUID | None = None,
        action: AuditAction = AuditAction.PAYMENT_VIEWED,
        category: AuditCategory = AuditCategory.ADMINISTRATION,
        severity: AuditSeverity = AuditSeverity.LOW,
        payment_verification_id: UUID | None = None,
        booking_id: UUID | None = None,
        description: str = "Payment details viewed by admin",
    ) -> PaymentAuditLog:
        entry = PaymentAuditLog(
            payment_verification_id=payment_verification_id,
            booking_id=booking_id,
            performed_by=performed_by or admin.id,
            action=action,
            category=category,
            severity=severity,
            description=description,
            metadata_={},
            tags=[],
            timestamp=timestamp or utcnow(),
        )
        return await _persist(db, entry)

    return _make
