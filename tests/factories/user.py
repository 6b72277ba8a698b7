"""User factory for tests."""

from uuid import uuid4

from polyfactory.factories.sqlalchemy_factory import SQLAlchemyFactory

from payaudit.modules.users.models import User, UserRole


class UserFactory(SQLAlchemyFactory[User]):
    """Factory for creating test User instances."""

    __model__ = User

    @classmethod
    def email(cls) -> str:
        """Generate a unique email."""
        return f"user-{uuid4().hex[:8]}@example.com"

    @classmethod
    def name(cls) -> str:
        return f"Test User {uuid4().hex[:4]}"

    @classmethod
    def role(cls) -> UserRole:
        return UserRole.USER

    @classmethod
    def is_active(cls) -> bool:
        """Default to active."""
        return True
