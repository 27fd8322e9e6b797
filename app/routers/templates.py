"""
Document templates and the documents users generate from them.

Route summary
-------------
GET  /api/document-templates                 — active templates (optional category)
GET  /api/document-templates/{template_id}   — one template
GET  /api/generated-documents                — the caller's documents, with template
POST /api/generate-document                  — fill a template (optionally LLM-drafted)
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.dependencies.auth import get_or_create_user
from app.models.database_models import User
from app.models.schemas import (
    DocumentCategorySchema,
    DocumentTemplateResponse,
    GenerateDocumentRequest,
    GeneratedDocumentResponse,
    GeneratedDocumentWithTemplateResponse,
)
from app.services.llm_service import LLMService, LLMServiceError, get_llm_service
from app.services.storage import DatabaseStorage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/document-templates", response_model=List[DocumentTemplateResponse])
async def list_templates(
    category: Optional[DocumentCategorySchema] = Query(None),
    storage: DatabaseStorage = Depends(get_storage),
) -> List[DocumentTemplateResponse]:
    templates = await storage.list_document_templates(category=category.value if category else None)
    return [DocumentTemplateResponse.model_validate(t) for t in templates]


@router.get("/document-templates/{template_id}", response_model=DocumentTemplateResponse)
async def get_template(
    template_id: str,
    storage: DatabaseStorage = Depends(get_storage),
) -> DocumentTemplateResponse:
    template = await storage.get_document_template(template_id)
    if template is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Template {template_id} not found.",
        )
    return DocumentTemplateResponse.model_validate(template)


@router.get("/generated-documents", response_model=List[GeneratedDocumentWithTemplateResponse])
async def list_generated_documents(
    user: User = Depends(get_or_create_user),
    storage: DatabaseStorage = Depends(get_storage),
) -> List[GeneratedDocumentWithTemplateResponse]:
    entries = await storage.list_user_generated_documents(user.id)
    results = []
    for entry in entries:
        base = GeneratedDocumentResponse.model_validate(entry.document)
        template = (
            DocumentTemplateResponse.model_validate(entry.template)
            if entry.template is not None
            else None
        )
        results.append(GeneratedDocumentWithTemplateResponse(**base.model_dump(), template=template))
    return results


@router.post(
    "/generate-document",
    response_model=GeneratedDocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def generate_document(
    body: GenerateDocumentRequest,
    user: User = Depends(get_or_create_user),
    storage: DatabaseStorage = Depends(get_storage),
    llm: LLMService = Depends(get_llm_service),
) -> GeneratedDocumentResponse:
    """
    Record a document filled from a template.

    With ``generate_content`` the LLM drafts the prose first; the draft is
    stored as ``form_data["generated_content"]``.  An LLM failure aborts the
    request with 502 and nothing is stored.
    """
    template = await storage.get_document_template(body.template_id)
    if template is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Template {body.template_id} not found.",
        )

    form_data = dict(body.form_data)
    if body.generate_content:
        try:
            form_data["generated_content"] = await llm.generate_document_content(
                template.name, body.form_data
            )
        except LLMServiceError as exc:
            logger.error("Drafting %r for user %s failed: %s", template.name, user.id, exc)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Failed to generate document content.",
            ) from exc

    document = await storage.create_generated_document(
        {
            "user_id": user.id,
            "template_id": template.id,
            "title": body.title,
            "form_data": form_data,
        }
    )
    return GeneratedDocumentResponse.model_validate(document)
