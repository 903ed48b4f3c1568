"""Caller identity dependencies.

Authentication happens upstream; the gateway forwards the verified user id
and role in the ``X-User-Id`` and ``X-User-Role`` headers.
"""

from typing import Optional

from fastapi import Depends, Header

from ..state.errors import ForbiddenError, UnauthorizedError
from ..state.models import Principal, Role


def get_principal(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> Principal:
    """Resolve the authenticated caller, or fail with 401."""
    if not x_user_id:
        raise UnauthorizedError("Not authorized to access this route")

    try:
        role = Role((x_user_role or Role.USER.value).lower())
    except ValueError:
        raise UnauthorizedError(f"Unknown role: {x_user_role}") from None

    return Principal(user_id=x_user_id, role=role)


def require_admin(principal: Principal = Depends(get_principal)) -> Principal:
    """Allow only callers holding the admin role."""
    if not principal.is_admin:
        raise ForbiddenError(
            f"User role {principal.role.value} is not authorized to access this route"
        )
    return principal
