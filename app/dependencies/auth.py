"""
Authentication dependencies for FastAPI routes.

The identity provider sits in front of this service.  The trusted front end
forwards the authenticated principal as headers: X-User-Id (required),
X-User-Email, X-User-First-Name and X-User-Last-Name.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException, status

from app.models.database_models import User, UserRole
from app.services.storage import DatabaseStorage, get_storage

logger = logging.getLogger(__name__)


async def get_current_user_id(
    x_user_id: str = Header(..., alias="X-User-Id"),
) -> str:
    """Extract the authenticated user ID from the request header. Raises 401 if empty."""
    if not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header.",
        )
    return x_user_id.strip()


async def get_or_create_user(
    user_id: str = Depends(get_current_user_id),
    x_user_email: Optional[str] = Header(None, alias="X-User-Email"),
    x_user_first_name: Optional[str] = Header(None, alias="X-User-First-Name"),
    x_user_last_name: Optional[str] = Header(None, alias="X-User-Last-Name"),
    storage: DatabaseStorage = Depends(get_storage),
) -> User:
    """Ensure the user exists in the local users table. Creates a citizen if needed."""
    user = await storage.get_user(user_id)
    if user is None:
        user = await storage.upsert_user(
            {
                "id": user_id,
                "email": x_user_email,
                "first_name": x_user_first_name,
                "last_name": x_user_last_name,
            }
        )
        logger.info("Created new user: id=%s email=%s", user_id, user.email)
    return user


def require_role(*allowed_roles: UserRole) -> Callable:
    """Return a FastAPI dependency that enforces role membership.

    Usage::

        @router.get("/cases")
        async def list_cases(user: User = Depends(require_role(UserRole.LAWYER))):
            ...
    """
    allowed = {UserRole(r) for r in allowed_roles}

    async def _check(user: User = Depends(get_or_create_user)) -> User:
        if UserRole(user.role) not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=(
                    f"This endpoint requires one of: {', '.join(sorted(r.value for r in allowed))}. "
                    f"Your role: {UserRole(user.role).value}"
                ),
            )
        return user

    return _check


def is_admin(user: User) -> bool:
    return UserRole(user.role) is UserRole.ADMIN
