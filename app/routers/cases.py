"""
Case management for lawyers.

Every route requires the ``lawyer`` role and only ever exposes the caller's
own cases.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.config import settings
from app.dependencies.auth import require_role
from app.models.database_models import LegalCase, User, UserRole
from app.models.schemas import (
    CaseStatusSchema,
    LegalCaseCreate,
    LegalCaseResponse,
    LegalCaseUpdate,
)
from app.services.storage import DatabaseStorage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter()

require_lawyer = require_role(UserRole.LAWYER)


async def _owned_case(case_id: str, user: User, storage: DatabaseStorage) -> LegalCase:
    """404 if the case does not exist, 403 if another lawyer owns it."""
    legal_case = await storage.get_legal_case(case_id)
    if legal_case is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Case {case_id} not found.",
        )
    if legal_case.lawyer_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This case belongs to another lawyer.",
        )
    return legal_case


@router.get("", response_model=List[LegalCaseResponse])
async def list_cases(
    status_filter: Optional[CaseStatusSchema] = Query(None, alias="status"),
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
    user: User = Depends(require_lawyer),
    storage: DatabaseStorage = Depends(get_storage),
) -> List[LegalCaseResponse]:
    """The caller's cases, most recently updated first."""
    cases = await storage.list_legal_cases(
        user.id,
        status=status_filter.value if status_filter else None,
        limit=limit,
        offset=offset,
    )
    return [LegalCaseResponse.model_validate(c) for c in cases]


@router.post("", response_model=LegalCaseResponse, status_code=status.HTTP_201_CREATED)
async def create_case(
    body: LegalCaseCreate,
    user: User = Depends(require_lawyer),
    storage: DatabaseStorage = Depends(get_storage),
) -> LegalCaseResponse:
    data = body.model_dump(exclude_none=True)
    data["lawyer_id"] = user.id
    legal_case = await storage.create_legal_case(data)
    return LegalCaseResponse.model_validate(legal_case)


@router.get("/{case_id}", response_model=LegalCaseResponse)
async def get_case(
    case_id: str,
    user: User = Depends(require_lawyer),
    storage: DatabaseStorage = Depends(get_storage),
) -> LegalCaseResponse:
    legal_case = await _owned_case(case_id, user, storage)
    return LegalCaseResponse.model_validate(legal_case)


@router.patch("/{case_id}", response_model=LegalCaseResponse)
async def update_case(
    case_id: str,
    body: LegalCaseUpdate,
    user: User = Depends(require_lawyer),
    storage: DatabaseStorage = Depends(get_storage),
) -> LegalCaseResponse:
    await _owned_case(case_id, user, storage)
    legal_case = await storage.update_legal_case(case_id, user.id, body.model_dump(exclude_unset=True))
    if legal_case is None:
        raise HTTPException(status_code=404, detail=f"Case {case_id} not found.")
    logger.info("Lawyer %s updated case %s", user.id, case_id)
    return LegalCaseResponse.model_validate(legal_case)
