"""FastAPI dependencies for authentication and role checks."""

from typing import TYPE_CHECKING, Annotated, Any

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from payaudit.api.dependencies import DBSession
from payaudit.core.auth.backend import decode_token
from payaudit.core.auth.schemas import TokenData
from payaudit.core.errors import ForbiddenError, UnauthorizedError


if TYPE_CHECKING:
    from payaudit.modules.users.models import User


bearer_scheme = HTTPBearer(auto_error=False)


async def get_token_data(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> TokenData:
    """Extract and validate token data from the Authorization header.

    Raises:
        UnauthorizedError: If token is missing or invalid
    """
    if not credentials:
        raise UnauthorizedError(
            "Missing authentication token",
            error_code="missing_token",
        )

    token_data = decode_token(credentials.credentials)
    if not token_data:
        raise UnauthorizedError(
            "Invalid or expired token",
            error_code="invalid_token",
        )

    if token_data.type != "access":
        raise UnauthorizedError(
            "Invalid token type",
            error_code="invalid_token_type",
        )

    return token_data


async def get_current_user(
    request: Request,
    token_data: Annotated[TokenData, Depends(get_token_data)],
    db: DBSession,
) -> "User":
    """Get the currently authenticated user.

    Raises:
        UnauthorizedError: If user not found
        ForbiddenError: If user is inactive
    """
    from payaudit.modules.users.repos import UserRepository  # noqa: PLC0415

    user = await UserRepository(db).get_by_id(token_data.user_id)

    if not user:
        raise UnauthorizedError(
            "User not found",
            error_code="user_not_found",
        )

    if not user.is_active:
        raise ForbiddenError(
            "User account is deactivated",
            error_code="user_inactive",
        )

    request.state.user_id = user.id
    structlog.contextvars.bind_contextvars(user_id=str(user.id))

    return user


async def get_current_admin(
    user: Annotated[Any, Depends(get_current_user)],
) -> "User":
    """Get the current user, ensuring they hold an admin role.

    Raises:
        ForbiddenError: If user is not an admin
    """
    if not user.is_admin:
        raise ForbiddenError(
            "Admin privileges required",
            error_code="not_admin",
        )
    return user


async def get_current_super_admin(
    user: Annotated[Any, Depends(get_current_user)],
) -> "User":
    """Get the current user, ensuring they are a super admin.

    Raises:
        ForbiddenError: If user is not a super admin
    """
    from payaudit.modules.users.models import UserRole  # noqa: PLC0415

    if user.role != UserRole.SUPER_ADMIN:
        raise ForbiddenError(
            "Super admin privileges required",
            error_code="not_super_admin",
        )
    return user


# Use Any for User type to avoid circular imports at runtime
CurrentUser = Annotated[Any, Depends(get_current_user)]
CurrentAdmin = Annotated[Any, Depends(get_current_admin)]
CurrentSuperAdmin = Annotated[Any, Depends(get_current_super_admin)]
