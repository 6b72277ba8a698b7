"""Database layer - session management, base models, and mixins."""

from payaudit.core.database.base import (
    Base,
    JSONType,
    TimestampMixin,
    UUIDMixin,
    string_enum,
    utcnow,
)
from payaudit.core.database.session import (
    async_engine,
    async_session_factory,
    get_db,
    get_session_factory,
)


__all__ = [
    "Base",
    "JSONType",
    "TimestampMixin",
    "UUIDMixin",
    "async_engine",
    "async_session_factory",
    "get_db",
    "get_session_factory",
    "string_enum",
    "utcnow",
]
