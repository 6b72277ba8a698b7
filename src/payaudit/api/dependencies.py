"""Shared API dependencies."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from payaudit.core.database import get_db, get_session_factory


# Type alias for database session dependency
DBSession = Annotated[AsyncSession, Depends(get_db)]

# Factory for services that manage their own sessions
SessionFactory = Annotated[
    async_sessionmaker[AsyncSession], Depends(get_session_factory)
]
