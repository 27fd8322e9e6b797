"""
LLM-backed helpers: plain-language summaries, question triage and
document drafting.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.models.schemas import (
    AnalyzeQuestionRequest,
    AnalyzeQuestionResponse,
    GenerateContentRequest,
    GenerateContentResponse,
    LegalSummaryRequest,
    LegalSummaryResponse,
    QuestionAnalysis,
)
from app.services.llm_service import LLMService, LLMServiceError, get_llm_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/legal-summary", response_model=LegalSummaryResponse)
async def legal_summary(
    body: LegalSummaryRequest,
    llm: LLMService = Depends(get_llm_service),
) -> LegalSummaryResponse:
    try:
        summary = await llm.generate_legal_summary(body.text)
    except LLMServiceError as exc:
        logger.error("legal_summary failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to generate legal summary.",
        ) from exc
    return LegalSummaryResponse(summary=summary)


@router.post("/analyze-question", response_model=AnalyzeQuestionResponse)
async def analyze_question(
    body: AnalyzeQuestionRequest,
    llm: LLMService = Depends(get_llm_service),
) -> AnalyzeQuestionResponse:
    """Always answers; an unreachable LLM yields the default analysis."""
    analysis = await llm.analyze_legal_question(body.question)
    return AnalyzeQuestionResponse(analysis=QuestionAnalysis(**analysis))


@router.post("/generate-document", response_model=GenerateContentResponse)
async def generate_document_content(
    body: GenerateContentRequest,
    llm: LLMService = Depends(get_llm_service),
) -> GenerateContentResponse:
    try:
        content = await llm.generate_document_content(body.template_type, body.form_data)
    except LLMServiceError as exc:
        logger.error("generate_document_content failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to generate document.",
        ) from exc
    return GenerateContentResponse(content=content)
