"""initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

All 8 tables as defined in app/models/database_models.py:
users, legal_documents, forum_questions, forum_answers, legal_cases,
document_templates, generated_documents, legal_aid_applications.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None

CATEGORIES = (
    "constitutional", "civil", "criminal", "family",
    "property", "business", "employment", "human_rights",
)


def _enum(name: str, *values: str) -> postgresql.ENUM:
    return postgresql.ENUM(*values, name=name, create_type=False)


def upgrade() -> None:
    bind = op.get_bind()

    # ── Enum types ────────────────────────────────────────────────────────
    postgresql.ENUM("citizen", "lawyer", "prisoner", "admin", name="user_role").create(bind, checkfirst=True)
    postgresql.ENUM(*CATEGORIES, name="document_category").create(bind, checkfirst=True)
    postgresql.ENUM("open", "answered", "closed", name="question_status").create(bind, checkfirst=True)
    postgresql.ENUM("active", "pending", "closed", "appealed", name="case_status").create(bind, checkfirst=True)

    user_role = _enum("user_role", "citizen", "lawyer", "prisoner", "admin")
    document_category = _enum("document_category", *CATEGORIES)
    question_status = _enum("question_status", "open", "answered", "closed")
    case_status = _enum("case_status", "active", "pending", "closed", "appealed")

    # ── users ─────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("email", sa.String(255), nullable=True, unique=True, index=True),
        sa.Column("first_name", sa.String(255), nullable=True),
        sa.Column("last_name", sa.String(255), nullable=True),
        sa.Column("profile_image_url", sa.String(1024), nullable=True),
        sa.Column("role", user_role, server_default="citizen", nullable=False),
        sa.Column("verified", sa.Boolean, server_default=sa.false(), nullable=False),
        sa.Column("bio", sa.Text, nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # ── legal_documents ───────────────────────────────────────────────────
    op.create_table(
        "legal_documents",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("summary", sa.Text, nullable=True),
        sa.Column("category", document_category, nullable=False, index=True),
        sa.Column("difficulty_level", sa.Integer, server_default="1", nullable=False),
        sa.Column("language", sa.String(10), server_default="en", nullable=False),
        sa.Column("tags", postgresql.JSONB, nullable=True),
        sa.Column("source_url", sa.String(1024), nullable=True),
        sa.Column("is_official", sa.Boolean, server_default=sa.false(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False, index=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # ── forum_questions ───────────────────────────────────────────────────
    op.create_table(
        "forum_questions",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("user_id", sa.String(255), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("category", document_category, nullable=False, index=True),
        sa.Column("status", question_status, server_default="open", nullable=False, index=True),
        sa.Column("views_count", sa.Integer, server_default="0", nullable=False),
        sa.Column("upvotes", sa.Integer, server_default="0", nullable=False),
        sa.Column("downvotes", sa.Integer, server_default="0", nullable=False),
        sa.Column("featured", sa.Boolean, server_default=sa.false(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False, index=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # ── forum_answers ─────────────────────────────────────────────────────
    op.create_table(
        "forum_answers",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("question_id", sa.String(255), sa.ForeignKey("forum_questions.id"), nullable=False, index=True),
        sa.Column("user_id", sa.String(255), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("upvotes", sa.Integer, server_default="0", nullable=False),
        sa.Column("downvotes", sa.Integer, server_default="0", nullable=False),
        sa.Column("is_accepted", sa.Boolean, server_default=sa.false(), nullable=False),
        sa.Column("expert_verified", sa.Boolean, server_default=sa.false(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # ── legal_cases ───────────────────────────────────────────────────────
    op.create_table(
        "legal_cases",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("lawyer_id", sa.String(255), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("client_name", sa.String(255), nullable=False),
        sa.Column("client_contact", sa.String(255), nullable=True),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("category", document_category, nullable=False),
        sa.Column("status", case_status, server_default="active", nullable=False, index=True),
        sa.Column("court_name", sa.String(255), nullable=True),
        sa.Column("case_number", sa.String(255), nullable=True),
        sa.Column("next_hearing", sa.DateTime(timezone=True), nullable=True),
        sa.Column("documents", postgresql.JSONB, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False, index=True),
    )

    # ── document_templates ────────────────────────────────────────────────
    op.create_table(
        "document_templates",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, index=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("category", document_category, nullable=False),
        sa.Column("template", postgresql.JSONB, nullable=False),
        sa.Column("html_template", sa.Text, nullable=True),
        sa.Column("is_active", sa.Boolean, server_default=sa.true(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # ── generated_documents ───────────────────────────────────────────────
    op.create_table(
        "generated_documents",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("user_id", sa.String(255), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("template_id", sa.String(255), sa.ForeignKey("document_templates.id"), nullable=False, index=True),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("form_data", postgresql.JSONB, nullable=False),
        sa.Column("pdf_url", sa.String(1024), nullable=True),
        sa.Column("docx_url", sa.String(1024), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # ── legal_aid_applications ────────────────────────────────────────────
    op.create_table(
        "legal_aid_applications",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("user_id", sa.String(255), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("case_description", sa.Text, nullable=False),
        sa.Column("financial_status", postgresql.JSONB, nullable=False),
        sa.Column("supporting_documents", postgresql.JSONB, nullable=True),
        sa.Column("status", sa.String(50), server_default="pending", nullable=False, index=True),
        sa.Column("assigned_lawyer_id", sa.String(255), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("legal_aid_applications")
    op.drop_table("generated_documents")
    op.drop_table("document_templates")
    op.drop_table("legal_cases")
    op.drop_table("forum_answers")
    op.drop_table("forum_questions")
    op.drop_table("legal_documents")
    op.drop_table("users")

    op.execute("DROP TYPE IF EXISTS case_status")
    op.execute("DROP TYPE IF EXISTS question_status")
    op.execute("DROP TYPE IF EXISTS document_category")
    op.execute("DROP TYPE IF EXISTS user_role")
