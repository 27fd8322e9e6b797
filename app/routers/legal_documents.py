"""
Legal document library endpoints.

Reads are public. Publishing and editing are limited to lawyers and admins,
which is stricter than requiring any signed-in user.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.config import settings
from app.dependencies.auth import require_role
from app.models.database_models import User, UserRole
from app.models.schemas import (
    DocumentCategorySchema,
    LegalDocumentCreate,
    LegalDocumentResponse,
    LegalDocumentUpdate,
)
from app.services.storage import DatabaseStorage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[LegalDocumentResponse])
async def list_legal_documents(
    category: Optional[DocumentCategorySchema] = Query(None),
    search: Optional[str] = Query(None, description="Substring of title or content"),
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
    storage: DatabaseStorage = Depends(get_storage),
) -> List[LegalDocumentResponse]:
    documents = await storage.list_legal_documents(
        category=category.value if category else None,
        search=search,
        limit=limit,
        offset=offset,
    )
    return [LegalDocumentResponse.model_validate(d) for d in documents]


@router.get("/{document_id}", response_model=LegalDocumentResponse)
async def get_legal_document(
    document_id: str,
    storage: DatabaseStorage = Depends(get_storage),
) -> LegalDocumentResponse:
    document = await storage.get_legal_document(document_id)
    if document is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Legal document {document_id} not found.",
        )
    return LegalDocumentResponse.model_validate(document)


@router.post("", response_model=LegalDocumentResponse, status_code=status.HTTP_201_CREATED)
async def create_legal_document(
    body: LegalDocumentCreate,
    user: User = Depends(require_role(UserRole.ADMIN, UserRole.LAWYER)),
    storage: DatabaseStorage = Depends(get_storage),
) -> LegalDocumentResponse:
    """Publish a document to the library. Lawyers and admins only."""
    document = await storage.create_legal_document(body.model_dump())
    logger.info("User %s published legal document %s", user.id, document.id)
    return LegalDocumentResponse.model_validate(document)


@router.patch("/{document_id}", response_model=LegalDocumentResponse)
async def update_legal_document(
    document_id: str,
    body: LegalDocumentUpdate,
    user: User = Depends(require_role(UserRole.ADMIN, UserRole.LAWYER)),
    storage: DatabaseStorage = Depends(get_storage),
) -> LegalDocumentResponse:
    document = await storage.update_legal_document(document_id, body.model_dump(exclude_unset=True))
    if document is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Legal document {document_id} not found.",
        )
    return LegalDocumentResponse.model_validate(document)
