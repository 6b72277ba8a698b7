"""User database models."""

from enum import StrEnum

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from payaudit.core.constants import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH
from payaudit.core.database.base import Base, TimestampMixin, UUIDMixin, string_enum


class UserRole(StrEnum):
    """Platform roles relevant to payment verification."""

    USER = "user"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


ADMIN_ROLES = frozenset({UserRole.ADMIN, UserRole.SUPER_ADMIN})


class User(Base, UUIDMixin, TimestampMixin):
    """A platform member.

    Accounts are managed by the identity service; this table mirrors the
    fields needed to authorize requests and to name actors in audit reports.

    Attributes:
        name: Display name
        email: Contact email
        role: Platform role
        is_active: Whether the user can use the API
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    email: Mapped[str] = mapped_column(
        String(MAX_EMAIL_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    role: Mapped[UserRole] = mapped_column(
        string_enum(UserRole),
        default=UserRole.USER,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
