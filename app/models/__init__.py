"""Database and schema models for the legal-aid backend."""
from app.models.database_models import (
    User,
    LegalDocument,
    ForumQuestion,
    ForumAnswer,
    LegalCase,
    DocumentTemplate,
    GeneratedDocument,
    LegalAidApplication,
    UserRole,
    DocumentCategory,
    QuestionStatus,
    CaseStatus,
)
from app.models.schemas import (
    UserResponse,
    LegalDocumentResponse,
    ForumQuestionResponse,
    ForumQuestionDetailResponse,
    ForumAnswerResponse,
    LegalCaseResponse,
    DocumentTemplateResponse,
    GeneratedDocumentResponse,
    LegalAidApplicationResponse,
    HealthCheckResponse,
)

__all__ = [
    # Database models
    "User",
    "LegalDocument",
    "ForumQuestion",
    "ForumAnswer",
    "LegalCase",
    "DocumentTemplate",
    "GeneratedDocument",
    "LegalAidApplication",
    "UserRole",
    "DocumentCategory",
    "QuestionStatus",
    "CaseStatus",
    # Pydantic schemas
    "UserResponse",
    "LegalDocumentResponse",
    "ForumQuestionResponse",
    "ForumQuestionDetailResponse",
    "ForumAnswerResponse",
    "LegalCaseResponse",
    "DocumentTemplateResponse",
    "GeneratedDocumentResponse",
    "LegalAidApplicationResponse",
    "HealthCheckResponse",
]
