"""
Legal-aid applications.

Applicants see only their own applications; admins see everything and
decide on status and lawyer assignment.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.config import settings
from app.dependencies.auth import get_or_create_user, is_admin, require_role
from app.models.database_models import User, UserRole
from app.models.schemas import (
    LegalAidApplicationCreate,
    LegalAidApplicationResponse,
    LegalAidApplicationUpdate,
    LegalAidApplicationWithUserResponse,
    UserResponse,
)
from app.services.storage import DatabaseStorage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter()


def _with_user(application, user: Optional[User]) -> LegalAidApplicationWithUserResponse:
    base = LegalAidApplicationResponse.model_validate(application)
    return LegalAidApplicationWithUserResponse(
        **base.model_dump(),
        user=UserResponse.model_validate(user) if user is not None else None,
    )


@router.get("/applications", response_model=List[LegalAidApplicationWithUserResponse])
async def list_applications(
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
    user: User = Depends(get_or_create_user),
    storage: DatabaseStorage = Depends(get_storage),
) -> List[LegalAidApplicationWithUserResponse]:
    """
    Admins get every application (filterable by status, paginated).
    Everyone else gets their own applications, newest first.
    """
    if is_admin(user):
        entries = await storage.list_legal_aid_applications(
            status=status_filter, limit=limit, offset=offset
        )
        return [_with_user(e.application, e.user) for e in entries]

    applications = await storage.list_user_legal_aid_applications(user.id)
    return [_with_user(a, user) for a in applications]


@router.post(
    "/applications",
    response_model=LegalAidApplicationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_application(
    body: LegalAidApplicationCreate,
    user: User = Depends(get_or_create_user),
    storage: DatabaseStorage = Depends(get_storage),
) -> LegalAidApplicationResponse:
    application = await storage.create_legal_aid_application({**body.model_dump(), "user_id": user.id})
    return LegalAidApplicationResponse.model_validate(application)


@router.patch("/applications/{application_id}", response_model=LegalAidApplicationResponse)
async def update_application(
    application_id: str,
    body: LegalAidApplicationUpdate,
    admin: User = Depends(require_role(UserRole.ADMIN)),
    storage: DatabaseStorage = Depends(get_storage),
) -> LegalAidApplicationResponse:
    updates = body.model_dump(exclude_unset=True)

    lawyer_id = updates.get("assigned_lawyer_id")
    if lawyer_id is not None:
        lawyer = await storage.get_user(lawyer_id)
        if lawyer is None or UserRole(lawyer.role) is not UserRole.LAWYER:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"User {lawyer_id} is not a lawyer.",
            )

    application = await storage.update_legal_aid_application(application_id, updates)
    if application is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Application {application_id} not found.",
        )
    logger.info(
        "Admin %s updated application %s: %s", admin.id, application_id, sorted(updates)
    )
    return LegalAidApplicationResponse.model_validate(application)
