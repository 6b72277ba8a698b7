"""Import every model so metadata is complete for Alembic and test setup."""

from payaudit.core.database import Base
from payaudit.modules.audit.models import PaymentAuditLog
from payaudit.modules.bookings.models import Booking
from payaudit.modules.payments.models import PaymentVerification
from payaudit.modules.users.models import User


__all__ = ["Base", "Booking", "PaymentAuditLog", "PaymentVerification", "User"]
