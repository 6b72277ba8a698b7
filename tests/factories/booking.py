"""Booking factory for tests."""

from datetime import date
from uuid import uuid4

from polyfactory.factories.sqlalchemy_factory import SQLAlchemyFactory

from payaudit.modules.bookings.models import Booking, BookingPaymentStatus


class BookingFactory(SQLAlchemyFactory[Booking]):
    """Factory for creating test Booking instances.

    Pass ``user_id`` to attach the booking to an existing user.
    """

    __model__ = Booking

    @classmethod
    def accommodation_title(cls) -> str:
        return f"Lagoon View Apartment {uuid4().hex[:4]}"

    @classmethod
    def check_in_date(cls) -> date:
        return date(2026, 1, 1)

    @classmethod
    def total_months(cls) -> int:
        return 6

    @classmethod
    def paid_months(cls) -> int:
        return 0

    @classmethod
    def payment_status(cls) -> BookingPaymentStatus:
        return BookingPaymentStatus.PENDING
