"""Authentication: JWT verification and role dependencies."""

from payaudit.core.auth.backend import create_access_token, decode_token
from payaudit.core.auth.dependencies import (
    CurrentAdmin,
    CurrentSuperAdmin,
    CurrentUser,
    get_current_admin,
    get_current_super_admin,
    get_current_user,
)
from payaudit.core.auth.schemas import TokenData


__all__ = [
    "CurrentAdmin",
    "CurrentSuperAdmin",
    "CurrentUser",
    "TokenData",
    "create_access_token",
    "decode_token",
    "get_current_admin",
    "get_current_super_admin",
    "get_current_user",
]
