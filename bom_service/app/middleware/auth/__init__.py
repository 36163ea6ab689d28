"""
Authentication middleware package for BOM Service.
"""

from .auth_middleware import (
    AuthenticatedUser,
    SessionAuthMiddleware,
    admin_user,
    authenticated_user,
    optional_user,
    setup_bom_auth_middleware,
)

__all__ = [
    "SessionAuthMiddleware",
    "AuthenticatedUser",
    "setup_bom_auth_middleware",
    "authenticated_user",
    "admin_user",
    "optional_user",
]
