"""
SQLAlchemy ORM models for the legal-aid database.

Identifiers are opaque UUID strings. Timestamps and counters get their
defaults on the Python side so a flushed object is fully populated without
a second round trip; the matching server defaults keep raw SQL inserts and
the Alembic schema consistent.
"""
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    ForeignKey,
    Boolean,
    Enum as SQLEnum,
    JSON,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression, func
import enum

from app.database import Base
from app.utils.helpers import new_id, utcnow


# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


# Enums
class UserRole(str, enum.Enum):
    """Roles a user account can hold."""

    CITIZEN = "citizen"
    LAWYER = "lawyer"
    PRISONER = "prisoner"
    ADMIN = "admin"


class DocumentCategory(str, enum.Enum):
    """Legal areas shared by documents, forum questions, cases and templates."""

    CONSTITUTIONAL = "constitutional"
    CIVIL = "civil"
    CRIMINAL = "criminal"
    FAMILY = "family"
    PROPERTY = "property"
    BUSINESS = "business"
    EMPLOYMENT = "employment"
    HUMAN_RIGHTS = "human_rights"


class QuestionStatus(str, enum.Enum):
    OPEN = "open"
    ANSWERED = "answered"
    CLOSED = "closed"


class CaseStatus(str, enum.Enum):
    ACTIVE = "active"
    PENDING = "pending"
    CLOSED = "closed"
    APPEALED = "appealed"


def _pg_enum(enum_cls, name: str) -> SQLEnum:
    """Enum column stored by value, rejecting unknown labels at bind time."""
    return SQLEnum(
        enum_cls,
        name=name,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )


document_category_enum = _pg_enum(DocumentCategory, "document_category")


# Models
class User(Base):
    """User account, created and refreshed by the identity-provider callback."""

    __tablename__ = "users"

    id = Column(String(255), primary_key=True, default=new_id)
    email = Column(String(255), nullable=True, unique=True, index=True)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    profile_image_url = Column(String(1024), nullable=True)
    role = Column(_pg_enum(UserRole, "user_role"), default=UserRole.CITIZEN, nullable=False)
    verified = Column(Boolean, default=False, server_default=expression.false(), nullable=False)
    bio = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    # Relationships
    forum_questions = relationship("ForumQuestion", back_populates="user")
    forum_answers = relationship("ForumAnswer", back_populates="user")
    legal_cases = relationship("LegalCase", back_populates="lawyer")
    generated_documents = relationship("GeneratedDocument", back_populates="user")
    legal_aid_applications = relationship(
        "LegalAidApplication",
        foreign_keys="LegalAidApplication.user_id",
        back_populates="user",
    )


class LegalDocument(Base):
    """Published legal text (constitution articles, statutes, guides)."""

    __tablename__ = "legal_documents"

    id = Column(String(255), primary_key=True, default=new_id)
    title = Column(String(500), nullable=False)
    content = Column(Text, nullable=False)
    summary = Column(Text, nullable=True)
    category = Column(document_category_enum, nullable=False, index=True)
    difficulty_level = Column(Integer, default=1, server_default="1", nullable=False)  # 1-5 scale
    language = Column(String(10), default="en", server_default="en", nullable=False)
    tags = Column(JSONType, default=list, nullable=True)
    source_url = Column(String(1024), nullable=True)
    is_official = Column(Boolean, default=False, server_default=expression.false(), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)


class ForumQuestion(Base):
    """Question posted to the Q&A forum."""

    __tablename__ = "forum_questions"

    id = Column(String(255), primary_key=True, default=new_id)
    user_id = Column(String(255), ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    content = Column(Text, nullable=False)
    category = Column(document_category_enum, nullable=False, index=True)
    status = Column(
        _pg_enum(QuestionStatus, "question_status"),
        default=QuestionStatus.OPEN,
        nullable=False,
        index=True,
    )
    views_count = Column(Integer, default=0, server_default="0", nullable=False)
    upvotes = Column(Integer, default=0, server_default="0", nullable=False)
    downvotes = Column(Integer, default=0, server_default="0", nullable=False)
    featured = Column(Boolean, default=False, server_default=expression.false(), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    # Relationships
    user = relationship("User", back_populates="forum_questions")
    answers = relationship("ForumAnswer", back_populates="question")


class ForumAnswer(Base):
    """Answer to a forum question."""

    __tablename__ = "forum_answers"

    id = Column(String(255), primary_key=True, default=new_id)
    question_id = Column(String(255), ForeignKey("forum_questions.id"), nullable=False, index=True)
    user_id = Column(String(255), ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    upvotes = Column(Integer, default=0, server_default="0", nullable=False)
    downvotes = Column(Integer, default=0, server_default="0", nullable=False)
    is_accepted = Column(Boolean, default=False, server_default=expression.false(), nullable=False)
    expert_verified = Column(Boolean, default=False, server_default=expression.false(), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    # Relationships
    question = relationship("ForumQuestion", back_populates="answers")
    user = relationship("User", back_populates="forum_answers")


class LegalCase(Base):
    """Case file managed by a lawyer."""

    __tablename__ = "legal_cases"

    id = Column(String(255), primary_key=True, default=new_id)
    lawyer_id = Column(String(255), ForeignKey("users.id"), nullable=False, index=True)
    client_name = Column(String(255), nullable=False)
    client_contact = Column(String(255), nullable=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(document_category_enum, nullable=False)
    status = Column(
        _pg_enum(CaseStatus, "case_status"),
        default=CaseStatus.ACTIVE,
        nullable=False,
        index=True,
    )
    court_name = Column(String(255), nullable=True)
    case_number = Column(String(255), nullable=True)
    next_hearing = Column(DateTime(timezone=True), nullable=True)
    documents = Column(JSONType, default=list, nullable=True)  # document references
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False, index=True)

    # Relationships
    lawyer = relationship("User", back_populates="legal_cases")


class DocumentTemplate(Base):
    """Fillable legal document template (form-field schema + optional HTML)."""

    __tablename__ = "document_templates"

    id = Column(String(255), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    category = Column(document_category_enum, nullable=False)
    template = Column(JSONType, nullable=False)  # form field schema
    html_template = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, server_default=expression.true(), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    # Relationships
    generated_documents = relationship("GeneratedDocument", back_populates="template")


class GeneratedDocument(Base):
    """Document a user produced from a template."""

    __tablename__ = "generated_documents"

    id = Column(String(255), primary_key=True, default=new_id)
    user_id = Column(String(255), ForeignKey("users.id"), nullable=False, index=True)
    template_id = Column(String(255), ForeignKey("document_templates.id"), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    form_data = Column(JSONType, nullable=False)
    pdf_url = Column(String(1024), nullable=True)  # populated by a rendering pipeline
    docx_url = Column(String(1024), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    # Relationships
    user = relationship("User", back_populates="generated_documents")
    template = relationship("DocumentTemplate", back_populates="generated_documents")


class LegalAidApplication(Base):
    """Request for legal aid. Status is free-form: pending / approved / rejected."""

    __tablename__ = "legal_aid_applications"

    id = Column(String(255), primary_key=True, default=new_id)
    user_id = Column(String(255), ForeignKey("users.id"), nullable=False, index=True)
    case_description = Column(Text, nullable=False)
    financial_status = Column(JSONType, nullable=False)
    supporting_documents = Column(JSONType, default=list, nullable=True)
    status = Column(String(50), default="pending", server_default="pending", nullable=False, index=True)
    assigned_lawyer_id = Column(String(255), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    # Relationships
    user = relationship("User", foreign_keys=[user_id], back_populates="legal_aid_applications")
    assigned_lawyer = relationship("User", foreign_keys=[assigned_lawyer_id])
