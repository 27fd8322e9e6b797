"""
Identity endpoints.

The identity provider redirects through the front end, which posts the
verified claims here so the local users table mirrors the provider.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.dependencies.auth import get_current_user_id
from app.models.database_models import UserRole
from app.models.schemas import IdentityClaims, UserResponse
from app.services.storage import DatabaseStorage, get_storage
from app.utils.helpers import full_name

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/callback", response_model=UserResponse)
async def auth_callback(
    claims: IdentityClaims,
    storage: DatabaseStorage = Depends(get_storage),
) -> UserResponse:
    """Create or refresh the local user from identity-provider claims.

    Fields omitted from the claims keep their stored values, so a login
    without a ``role`` never demotes an existing lawyer or admin.
    """
    user = await storage.upsert_user(claims.model_dump(exclude_none=True))
    logger.info(
        "Identity callback: id=%s name=%r role=%s",
        user.id,
        full_name(user.first_name, user.last_name),
        UserRole(user.role).value,
    )
    return UserResponse.model_validate(user)


@router.get("/user", response_model=UserResponse)
async def current_user(
    user_id: str = Depends(get_current_user_id),
    storage: DatabaseStorage = Depends(get_storage),
) -> UserResponse:
    user = await storage.get_user(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User {user_id} not found.",
        )
    return UserResponse.model_validate(user)
