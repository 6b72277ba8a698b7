"""Payment verification repository."""

from datetime import datetime, time
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payaudit.modules.payments.models import PaymentVerification, VerificationStatus
from payaudit.modules.payments.schemas import ExportFilters


class PaymentVerificationRepository:
    """Database access for PaymentVerification records."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, payment_id: UUID) -> PaymentVerification | None:
        return await self.session.get(PaymentVerification, payment_id)

    async def get_active_for_month(
        self,
        booking_id: UUID,
        month_number: int,
    ) -> PaymentVerification | None:
        """Find a pending or approved verification for a booking month.

        Rejected submissions do not count, so a member can resubmit.
        """
        stmt = select(PaymentVerification).where(
            PaymentVerification.booking_id == booking_id,
            PaymentVerification.month_number == month_number,
            PaymentVerification.verification_status.in_(
                [VerificationStatus.PENDING, VerificationStatus.APPROVED]
            ),
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def create(self, payment: PaymentVerification) -> PaymentVerification:
        self.session.add(payment)
        await self.session.flush()
        return payment

    async def list_for_export(self, filters: ExportFilters) -> list[PaymentVerification]:
        """List verifications matching export filters, oldest submission first."""
        stmt = select(PaymentVerification)
        if filters.start_date is not None:
            stmt = stmt.where(
                PaymentVerification.submitted_at
                >= datetime.combine(filters.start_date, time.min)
            )
        if filters.end_date is not None:
            stmt = stmt.where(
                PaymentVerification.submitted_at
                <= datetime.combine(filters.end_date, time.max)
            )
        if filters.status is not None:
            stmt = stmt.where(PaymentVerification.verification_status == filters.status)
        if filters.payment_method is not None:
            stmt = stmt.where(PaymentVerification.payment_method == filters.payment_method)

        stmt = stmt.order_by(PaymentVerification.submitted_at.asc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
