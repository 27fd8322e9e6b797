"""
Pydantic schemas for request/response validation.
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List, Dict, Any, Union
from datetime import datetime
from enum import Enum


# Enums (matching database enums)
class UserRoleSchema(str, Enum):
    """User roles for API requests and responses."""

    CITIZEN = "citizen"
    LAWYER = "lawyer"
    PRISONER = "prisoner"
    ADMIN = "admin"


class DocumentCategorySchema(str, Enum):
    """Legal categories for API requests and responses."""

    CONSTITUTIONAL = "constitutional"
    CIVIL = "civil"
    CRIMINAL = "criminal"
    FAMILY = "family"
    PROPERTY = "property"
    BUSINESS = "business"
    EMPLOYMENT = "employment"
    HUMAN_RIGHTS = "human_rights"


class QuestionStatusSchema(str, Enum):
    OPEN = "open"
    ANSWERED = "answered"
    CLOSED = "closed"


class CaseStatusSchema(str, Enum):
    ACTIVE = "active"
    PENDING = "pending"
    CLOSED = "closed"
    APPEALED = "appealed"


class VoteDirectionSchema(str, Enum):
    UP = "up"
    DOWN = "down"


# User Schemas
class IdentityClaims(BaseModel):
    """Claims forwarded by the identity provider after a successful login."""

    id: str = Field(..., min_length=1, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    first_name: Optional[str] = Field(None, max_length=255)
    last_name: Optional[str] = Field(None, max_length=255)
    profile_image_url: Optional[str] = Field(None, max_length=1024)
    role: Optional[UserRoleSchema] = None


class UserResponse(BaseModel):
    """Schema for user responses."""

    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    role: UserRoleSchema
    verified: bool = False
    bio: Optional[str] = None
    location: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Legal Document Schemas
class LegalDocumentCreate(BaseModel):
    """Schema for publishing a legal document."""

    title: str = Field(..., min_length=1, max_length=500)
    content: str = Field(..., min_length=1)
    summary: Optional[str] = None
    category: DocumentCategorySchema
    difficulty_level: int = Field(1, ge=1, le=5)
    language: str = Field("en", min_length=2, max_length=10)
    tags: List[str] = []
    source_url: Optional[str] = Field(None, max_length=1024)
    is_official: bool = False


class LegalDocumentUpdate(BaseModel):
    """Partial update; only fields that are sent are written."""

    title: Optional[str] = Field(None, min_length=1, max_length=500)
    content: Optional[str] = Field(None, min_length=1)
    summary: Optional[str] = None
    category: Optional[DocumentCategorySchema] = None
    difficulty_level: Optional[int] = Field(None, ge=1, le=5)
    language: Optional[str] = Field(None, min_length=2, max_length=10)
    tags: Optional[List[str]] = None
    source_url: Optional[str] = Field(None, max_length=1024)
    is_official: Optional[bool] = None


class LegalDocumentResponse(BaseModel):
    """Schema for legal document details."""

    id: str
    title: str
    content: str
    summary: Optional[str] = None
    category: DocumentCategorySchema
    difficulty_level: int
    language: str
    tags: Optional[List[str]] = None
    source_url: Optional[str] = None
    is_official: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Forum Schemas
class ForumQuestionCreate(BaseModel):
    """Schema for asking a forum question."""

    title: str = Field(..., min_length=10, max_length=500)
    content: str = Field(..., min_length=50)
    category: DocumentCategorySchema


class ForumQuestionUpdate(BaseModel):
    """Partial update of a question. Any status may be set from any status."""

    title: Optional[str] = Field(None, min_length=10, max_length=500)
    content: Optional[str] = Field(None, min_length=50)
    category: Optional[DocumentCategorySchema] = None
    status: Optional[QuestionStatusSchema] = None
    featured: Optional[bool] = None


class ForumQuestionResponse(BaseModel):
    """Schema for a bare forum question row."""

    id: str
    user_id: str
    title: str
    content: str
    category: DocumentCategorySchema
    status: QuestionStatusSchema
    views_count: int = 0
    upvotes: int = 0
    downvotes: int = 0
    featured: bool = False
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ForumQuestionDetailResponse(ForumQuestionResponse):
    """Question enriched with its author and live answer count."""

    user: Optional[UserResponse] = None
    answers_count: int = 0


class VoteRequest(BaseModel):
    """Body of a vote call: ``{"type": "up"}`` or ``{"type": "down"}``."""

    type: VoteDirectionSchema


class ForumAnswerCreate(BaseModel):
    content: str = Field(..., min_length=1)


class ForumAnswerUpdate(BaseModel):
    """Partial update of an answer."""

    content: Optional[str] = Field(None, min_length=1)
    is_accepted: Optional[bool] = None
    expert_verified: Optional[bool] = None


class ForumAnswerResponse(BaseModel):
    """Schema for a bare forum answer row."""

    id: str
    question_id: str
    user_id: str
    content: str
    upvotes: int = 0
    downvotes: int = 0
    is_accepted: bool = False
    expert_verified: bool = False
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ForumAnswerWithAuthorResponse(ForumAnswerResponse):
    user: Optional[UserResponse] = None


# Legal Case Schemas
class LegalCaseCreate(BaseModel):
    """Schema for opening a case file. The owning lawyer is the caller."""

    client_name: str = Field(..., min_length=2, max_length=255)
    client_contact: Optional[str] = Field(None, max_length=255)
    title: str = Field(..., min_length=5, max_length=500)
    description: Optional[str] = None
    category: DocumentCategorySchema
    status: Optional[CaseStatusSchema] = None
    court_name: Optional[str] = Field(None, max_length=255)
    case_number: Optional[str] = Field(None, max_length=255)
    next_hearing: Optional[datetime] = None
    documents: List[str] = []
    notes: Optional[str] = None


class LegalCaseUpdate(BaseModel):
    """Partial update of a case. Any status may be set from any status."""

    client_name: Optional[str] = Field(None, min_length=2, max_length=255)
    client_contact: Optional[str] = Field(None, max_length=255)
    title: Optional[str] = Field(None, min_length=5, max_length=500)
    description: Optional[str] = None
    category: Optional[DocumentCategorySchema] = None
    status: Optional[CaseStatusSchema] = None
    court_name: Optional[str] = Field(None, max_length=255)
    case_number: Optional[str] = Field(None, max_length=255)
    next_hearing: Optional[datetime] = None
    documents: Optional[List[str]] = None
    notes: Optional[str] = None


class LegalCaseResponse(BaseModel):
    """Schema for case details."""

    id: str
    lawyer_id: str
    client_name: str
    client_contact: Optional[str] = None
    title: str
    description: Optional[str] = None
    category: DocumentCategorySchema
    status: CaseStatusSchema
    court_name: Optional[str] = None
    case_number: Optional[str] = None
    next_hearing: Optional[datetime] = None
    documents: Optional[List[str]] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Template / Generated Document Schemas
class DocumentTemplateResponse(BaseModel):
    """Schema for a document template."""

    id: str
    name: str
    description: Optional[str] = None
    category: DocumentCategorySchema
    template: Union[Dict[str, Any], List[Any]]
    html_template: Optional[str] = None
    is_active: bool = True
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class GenerateDocumentRequest(BaseModel):
    """
    Fill a template for the caller.

    With ``generate_content`` set, the LLM drafts the document prose and the
    result is stored under ``form_data["generated_content"]``.
    """

    template_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=500)
    form_data: Dict[str, Any]
    generate_content: bool = False


class GeneratedDocumentResponse(BaseModel):
    """Schema for a generated document. File URLs stay null until rendered."""

    id: str
    user_id: str
    template_id: str
    title: str
    form_data: Dict[str, Any]
    pdf_url: Optional[str] = None
    docx_url: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class GeneratedDocumentWithTemplateResponse(GeneratedDocumentResponse):
    template: Optional[DocumentTemplateResponse] = None


# Legal Aid Schemas
class LegalAidApplicationCreate(BaseModel):
    """Schema for applying for legal aid."""

    case_description: str = Field(..., min_length=1)
    financial_status: Dict[str, Any]
    supporting_documents: List[str] = []


class LegalAidApplicationUpdate(BaseModel):
    """Admin decision on an application. Status is free text by convention."""

    status: Optional[str] = Field(None, min_length=1, max_length=50)
    assigned_lawyer_id: Optional[str] = Field(None, max_length=255)


class LegalAidApplicationResponse(BaseModel):
    """Schema for a legal aid application."""

    id: str
    user_id: str
    case_description: str
    financial_status: Dict[str, Any]
    supporting_documents: Optional[List[str]] = None
    status: str
    assigned_lawyer_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LegalAidApplicationWithUserResponse(LegalAidApplicationResponse):
    user: Optional[UserResponse] = None


# AI Schemas
class LegalSummaryRequest(BaseModel):
    text: str = Field(..., min_length=1)


class LegalSummaryResponse(BaseModel):
    summary: str


class AnalyzeQuestionRequest(BaseModel):
    question: str = Field(..., min_length=1)


class QuestionAnalysis(BaseModel):
    """Category / complexity triage of a free-text legal question."""

    category: DocumentCategorySchema
    complexity: int = Field(..., ge=1, le=5)
    suggested_resources: List[str]


class AnalyzeQuestionResponse(BaseModel):
    analysis: QuestionAnalysis


class GenerateContentRequest(BaseModel):
    template_type: str = Field(..., min_length=1)
    form_data: Dict[str, Any]


class GenerateContentResponse(BaseModel):
    content: str


# Constitution Schemas
class ConstitutionSearchResult(BaseModel):
    id: str
    title: str
    content: str
    chapter: str
    section: str
    relevance: float


# Health Check Schema
class HealthCheckResponse(BaseModel):
    """Schema for health check response."""

    status: str
    database: str
    llm: str
    timestamp: datetime
