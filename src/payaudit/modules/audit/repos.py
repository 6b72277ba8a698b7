"""Payment audit log repository.

Insert and query operations only. There is no update
method; ``delete_expired`` exists for the retention sweep.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Select, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from payaudit.modules.audit.models import (
    EXPIRABLE_SEVERITIES,
    SUSPICIOUS_ACTIONS,
    AuditAction,
    AuditCategory,
    AuditSeverity,
    PaymentAuditLog,
)


def _within(stmt: Select, start: datetime | None, end: datetime | None) -> Select:
    """Restrict a statement to an inclusive timestamp window."""
    if start is not None:
        stmt = stmt.where(PaymentAuditLog.timestamp >= start)
    if end is not None:
        stmt = stmt.where(PaymentAuditLog.timestamp <= end)
    return stmt


class PaymentAuditLogRepository:
    """Database access for PaymentAuditLog entries."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def add(self, entry: PaymentAuditLog) -> PaymentAuditLog:
        """Insert a new entry.

        Args:
            entry: Entry to persist

        Returns:
            The entry with its ID populated
        """
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def _page(
        self,
        stmt: Select,
        offset: int,
        limit: int,
    ) -> tuple[list[PaymentAuditLog], int]:
        count_stmt = select(func.count()).select_from(stmt.subquery())
        total = (await self.session.execute(count_stmt)).scalar_one()

        page_stmt = (
            stmt.order_by(PaymentAuditLog.timestamp.desc(), PaymentAuditLog.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(page_stmt)
        return list(result.scalars().all()), total

    async def list_for_payment(
        self,
        payment_id: UUID,
        *,
        category: AuditCategory | None = None,
        action: AuditAction | None = None,
        offset: int = 0,
        limit: int = 50,
    ) -> tuple[list[PaymentAuditLog], int]:
        """List entries for one payment, newest first.

        Returns:
            Tuple of (entries, total matching count)
        """
        stmt = select(PaymentAuditLog).where(
            PaymentAuditLog.payment_verification_id == payment_id
        )
        if category is not None:
            stmt = stmt.where(PaymentAuditLog.category == category)
        if action is not None:
            stmt = stmt.where(PaymentAuditLog.action == action)
        return await self._page(stmt, offset, limit)

    async def list_for_user(
        self,
        user_id: UUID,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
        offset: int = 0,
        limit: int = 50,
    ) -> tuple[list[PaymentAuditLog], int]:
        """List entries performed by one user, newest first.

        Returns:
            Tuple of (entries, total matching count)
        """
        stmt = select(PaymentAuditLog).where(PaymentAuditLog.performed_by == user_id)
        stmt = _within(stmt, start, end)
        return await self._page(stmt, offset, limit)

    async def count(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> int:
        stmt = _within(select(func.count(PaymentAuditLog.id)), start, end)
        return (await self.session.execute(stmt)).scalar_one()

    async def count_by_category(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> dict[str, int]:
        """Count entries per category within the window."""
        stmt = select(PaymentAuditLog.category, func.count(PaymentAuditLog.id))
        stmt = _within(stmt, start, end).group_by(PaymentAuditLog.category)
        result = await self.session.execute(stmt)
        return {str(category): count for category, count in result.all()}

    async def count_by_severity(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> dict[str, int]:
        """Count entries per severity within the window."""
        stmt = select(PaymentAuditLog.severity, func.count(PaymentAuditLog.id))
        stmt = _within(stmt, start, end).group_by(PaymentAuditLog.severity)
        result = await self.session.execute(stmt)
        return {str(severity): count for severity, count in result.all()}

    async def list_suspicious(
        self,
        since: datetime,
        limit: int = 50,
    ) -> list[PaymentAuditLog]:
        """List recent entries that are critical, security related, or
        record a rejection or file deletion. Newest first.
        """
        stmt = (
            select(PaymentAuditLog)
            .where(
                PaymentAuditLog.timestamp >= since,
                or_(
                    PaymentAuditLog.severity == AuditSeverity.CRITICAL,
                    PaymentAuditLog.category == AuditCategory.SECURITY,
                    PaymentAuditLog.action.in_(list(SUSPICIOUS_ACTIONS)),
                ),
            )
            .order_by(PaymentAuditLog.timestamp.desc(), PaymentAuditLog.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_expired(self, cutoff: datetime) -> int:
        """Delete low and medium severity entries strictly older than cutoff.

        High and critical entries are never removed here.

        Returns:
            Number of entries deleted
        """
        stmt = (
            delete(PaymentAuditLog)
            .where(
                PaymentAuditLog.timestamp < cutoff,
                PaymentAuditLog.severity.in_(list(EXPIRABLE_SEVERITIES)),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount
