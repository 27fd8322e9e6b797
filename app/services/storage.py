"""
Data-access layer for every entity of the legal-aid platform.

``DatabaseStorage`` wraps one ``AsyncSession``; routers build one per request
through ``get_storage``. Operations never commit; the session dependency
commits when the request succeeds.

Behaviour worth knowing at the call site
----------------------------------------
* Listing filters are AND-ed. ``limit`` / ``offset`` of ``None`` apply no bound.
* Lookups by id return ``None`` when the row is absent; updates on a missing
  id also return ``None`` and write nothing.
* Every update refreshes ``updated_at``.
* View and vote counters are bumped with a single
  ``UPDATE ... SET c = c + 1`` so concurrent callers never lose increments.
  There is no voter ledger: every call adds exactly one.
* Status columns accept any label of their enum in any order.
* Labels outside an enum column's domain raise ``InvalidFieldValue`` before
  anything is sent to the database.
"""
from __future__ import annotations

import dataclasses
import enum
import logging
from typing import Any, Dict, List, Mapping, Optional, Type

from fastapi import Depends
from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.database_models import (
    CaseStatus,
    DocumentCategory,
    DocumentTemplate,
    ForumAnswer,
    ForumQuestion,
    GeneratedDocument,
    LegalAidApplication,
    LegalCase,
    LegalDocument,
    QuestionStatus,
    User,
    UserRole,
)
from app.utils.helpers import escape_like, utcnow

logger = logging.getLogger(__name__)


class VoteDirection(str, enum.Enum):
    UP = "up"
    DOWN = "down"


class InvalidFieldValue(ValueError):
    """A mutation or filter carried a value the column cannot hold."""

    def __init__(self, field: str, value: Any, allowed: Optional[List[str]] = None) -> None:
        self.field = field
        self.value = value
        self.allowed = allowed or []
        message = f"Invalid value {value!r} for field '{field}'"
        if self.allowed:
            message += f". Allowed: {', '.join(self.allowed)}"
        super().__init__(message)


# Enum-typed columns per model; values are coerced before any write.
_ENUM_FIELDS: Dict[type, Dict[str, Type[enum.Enum]]] = {
    User: {"role": UserRole},
    LegalDocument: {"category": DocumentCategory},
    ForumQuestion: {"category": DocumentCategory, "status": QuestionStatus},
    LegalCase: {"category": DocumentCategory, "status": CaseStatus},
    DocumentTemplate: {"category": DocumentCategory},
}

# Never writable through a partial update.
_IMMUTABLE_FIELDS = frozenset({"id", "created_at", "updated_at"})


# ---------------------------------------------------------------------------
# Enriched result rows
# ---------------------------------------------------------------------------

@dataclasses.dataclass
class QuestionWithAuthor:
    question: ForumQuestion
    user: Optional[User]
    answers_count: int


@dataclasses.dataclass
class AnswerWithAuthor:
    answer: ForumAnswer
    user: Optional[User]


@dataclasses.dataclass
class DocumentWithTemplate:
    document: GeneratedDocument
    template: Optional[DocumentTemplate]


@dataclasses.dataclass
class ApplicationWithUser:
    application: LegalAidApplication
    user: Optional[User]


# ---------------------------------------------------------------------------
# Query helpers
# ---------------------------------------------------------------------------

def _coerce_enum(enum_cls: Type[enum.Enum], field: str, value: Any) -> enum.Enum:
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidFieldValue(field, value, [m.value for m in enum_cls]) from None


def _paginate(stmt, limit: Optional[int], offset: Optional[int]):
    if limit is not None:
        stmt = stmt.limit(limit)
    if offset is not None:
        stmt = stmt.offset(offset)
    return stmt


def _answers_count():
    """Correlated COUNT of answers for the enclosing question row."""
    return (
        select(func.count(ForumAnswer.id))
        .where(ForumAnswer.question_id == ForumQuestion.id)
        .correlate(ForumQuestion)
        .scalar_subquery()
        .label("answers_count")
    )


class DatabaseStorage:
    """All reads and writes behind the HTTP routers."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Generic create / update / increment
    # ------------------------------------------------------------------

    def _clean(self, model: type, data: Mapping[str, Any], partial: bool) -> Dict[str, Any]:
        columns = model.__table__.columns
        enums = _ENUM_FIELDS.get(model, {})
        values: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in columns or (partial and key in _IMMUTABLE_FIELDS):
                raise InvalidFieldValue(key, value)
            if value is None and not columns[key].nullable:
                allowed = [m.value for m in enums[key]] if key in enums else None
                raise InvalidFieldValue(key, value, allowed)
            if key in enums:
                value = _coerce_enum(enums[key], key, value)
            values[key] = value
        return values

    async def _create(self, model: type, data: Mapping[str, Any]):
        obj = model(**self._clean(model, data, partial=False))
        self._session.add(obj)
        await self._session.flush()
        return obj

    async def _update(self, obj, updates: Mapping[str, Any]):
        values = self._clean(type(obj), updates, partial=True)
        for key, value in values.items():
            setattr(obj, key, value)
        obj.updated_at = utcnow()
        await self._session.flush()
        return obj

    async def _increment(self, model: type, row_id: str, column) -> bool:
        """
        Atomically add one to *column* on row *row_id*.

        Returns False when no row matched.
        """
        result = await self._session.execute(
            update(model)
            .where(model.id == row_id)
            .values({column.key: column + 1, "updated_at": utcnow()})
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def get_user(self, user_id: str) -> Optional[User]:
        return await self._session.get(User, user_id)

    async def upsert_user(self, user_data: Mapping[str, Any]) -> User:
        """
        Insert a user, or overwrite the supplied fields if the id exists.

        Uses INSERT ... ON CONFLICT (id) DO UPDATE so repeated logins collapse
        onto one row.
        """
        values = self._clean(User, user_data, partial=False)
        for key in ("created_at", "updated_at"):
            if key in values:
                raise InvalidFieldValue(key, values[key])
        if not values.get("id"):
            raise InvalidFieldValue("id", values.get("id"))

        now = utcnow()
        dialect = self._session.get_bind().dialect.name
        insert = pg_insert if dialect == "postgresql" else sqlite_insert

        stmt = insert(User).values(**values, created_at=now, updated_at=now)
        stmt = stmt.on_conflict_do_update(
            index_elements=["id"],
            set_={
                **{k: v for k, v in values.items() if k != "id"},
                "updated_at": now,
            },
        )
        await self._session.execute(stmt)

        user = await self._session.get(User, values["id"], populate_existing=True)
        logger.debug("upsert_user: id=%s role=%s", user.id, user.role)
        return user

    # ------------------------------------------------------------------
    # Legal documents
    # ------------------------------------------------------------------

    async def list_legal_documents(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[LegalDocument]:
        """Newest first. ``search`` matches title OR content as a substring."""
        conditions = []
        if category is not None:
            conditions.append(
                LegalDocument.category == _coerce_enum(DocumentCategory, "category", category)
            )
        if search:
            pattern = f"%{escape_like(search)}%"
            conditions.append(
                or_(
                    LegalDocument.title.like(pattern, escape="\\"),
                    LegalDocument.content.like(pattern, escape="\\"),
                )
            )

        stmt = select(LegalDocument)
        if conditions:
            stmt = stmt.where(and_(*conditions))
        stmt = _paginate(stmt.order_by(LegalDocument.created_at.desc()), limit, offset)

        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get_legal_document(self, document_id: str) -> Optional[LegalDocument]:
        return await self._session.get(LegalDocument, document_id)

    async def create_legal_document(self, data: Mapping[str, Any]) -> LegalDocument:
        document = await self._create(LegalDocument, data)
        logger.info("Created legal document id=%s title=%r", document.id, document.title)
        return document

    async def update_legal_document(
        self, document_id: str, updates: Mapping[str, Any]
    ) -> Optional[LegalDocument]:
        document = await self.get_legal_document(document_id)
        if document is None:
            return None
        return await self._update(document, updates)

    # ------------------------------------------------------------------
    # Forum questions
    # ------------------------------------------------------------------

    async def list_forum_questions(
        self,
        category: Optional[str] = None,
        status: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[QuestionWithAuthor]:
        """Newest first, each row with its author (or None) and answer count."""
        conditions = []
        if category is not None:
            conditions.append(
                ForumQuestion.category == _coerce_enum(DocumentCategory, "category", category)
            )
        if status is not None:
            conditions.append(
                ForumQuestion.status == _coerce_enum(QuestionStatus, "status", status)
            )

        stmt = (
            select(ForumQuestion, User, _answers_count())
            .outerjoin(User, ForumQuestion.user_id == User.id)
        )
        if conditions:
            stmt = stmt.where(and_(*conditions))
        stmt = _paginate(stmt.order_by(ForumQuestion.created_at.desc()), limit, offset)
        stmt = stmt.execution_options(populate_existing=True)

        result = await self._session.execute(stmt)
        return [
            QuestionWithAuthor(question=question, user=user, answers_count=int(count or 0))
            for question, user, count in result.all()
        ]

    async def get_forum_question(self, question_id: str) -> Optional[QuestionWithAuthor]:
        """Pure read of one question with author and answer count."""
        stmt = (
            select(ForumQuestion, User, _answers_count())
            .outerjoin(User, ForumQuestion.user_id == User.id)
            .where(ForumQuestion.id == question_id)
            .execution_options(populate_existing=True)
        )
        row = (await self._session.execute(stmt)).first()
        if row is None:
            return None
        question, user, count = row
        return QuestionWithAuthor(question=question, user=user, answers_count=int(count or 0))

    async def view_forum_question(self, question_id: str) -> Optional[QuestionWithAuthor]:
        """Count one view, then return the question including that view."""
        if not await self._increment(ForumQuestion, question_id, ForumQuestion.views_count):
            return None
        return await self.get_forum_question(question_id)

    async def create_forum_question(self, data: Mapping[str, Any]) -> ForumQuestion:
        question = await self._create(ForumQuestion, data)
        logger.info("Created forum question id=%s by user=%s", question.id, question.user_id)
        return question

    async def update_forum_question(
        self, question_id: str, updates: Mapping[str, Any]
    ) -> Optional[ForumQuestion]:
        question = await self._session.get(ForumQuestion, question_id)
        if question is None:
            return None
        return await self._update(question, updates)

    async def vote_forum_question(
        self, question_id: str, direction: str
    ) -> Optional[ForumQuestion]:
        """Add one up- or down-vote. Returns the refreshed row, or None."""
        vote = _coerce_enum(VoteDirection, "direction", direction)
        column = ForumQuestion.upvotes if vote is VoteDirection.UP else ForumQuestion.downvotes
        if not await self._increment(ForumQuestion, question_id, column):
            return None
        return await self._session.get(ForumQuestion, question_id, populate_existing=True)

    # ------------------------------------------------------------------
    # Forum answers
    # ------------------------------------------------------------------

    async def list_forum_answers(self, question_id: str) -> List[AnswerWithAuthor]:
        """Best-voted first; equal votes show the most recent first."""
        stmt = (
            select(ForumAnswer, User)
            .outerjoin(User, ForumAnswer.user_id == User.id)
            .where(ForumAnswer.question_id == question_id)
            .order_by(ForumAnswer.upvotes.desc(), ForumAnswer.created_at.desc())
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return [AnswerWithAuthor(answer=answer, user=user) for answer, user in result.all()]

    async def get_forum_answer(self, answer_id: str) -> Optional[ForumAnswer]:
        return await self._session.get(ForumAnswer, answer_id)

    async def create_forum_answer(self, data: Mapping[str, Any]) -> ForumAnswer:
        answer = await self._create(ForumAnswer, data)
        logger.info(
            "Created forum answer id=%s on question=%s by user=%s",
            answer.id,
            answer.question_id,
            answer.user_id,
        )
        return answer

    async def update_forum_answer(
        self, answer_id: str, updates: Mapping[str, Any]
    ) -> Optional[ForumAnswer]:
        answer = await self.get_forum_answer(answer_id)
        if answer is None:
            return None
        return await self._update(answer, updates)

    async def vote_forum_answer(self, answer_id: str, direction: str) -> Optional[ForumAnswer]:
        vote = _coerce_enum(VoteDirection, "direction", direction)
        column = ForumAnswer.upvotes if vote is VoteDirection.UP else ForumAnswer.downvotes
        if not await self._increment(ForumAnswer, answer_id, column):
            return None
        return await self._session.get(ForumAnswer, answer_id, populate_existing=True)

    # ------------------------------------------------------------------
    # Legal cases (always scoped to one lawyer)
    # ------------------------------------------------------------------

    async def list_legal_cases(
        self,
        lawyer_id: str,
        status: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[LegalCase]:
        """Cases owned by *lawyer_id*, most recently updated first."""
        conditions = [LegalCase.lawyer_id == lawyer_id]
        if status is not None:
            conditions.append(LegalCase.status == _coerce_enum(CaseStatus, "status", status))

        stmt = select(LegalCase).where(and_(*conditions)).order_by(LegalCase.updated_at.desc())
        stmt = _paginate(stmt, limit, offset)

        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get_legal_case(
        self, case_id: str, lawyer_id: Optional[str] = None
    ) -> Optional[LegalCase]:
        """Fetch a case; with *lawyer_id* set, only if that lawyer owns it."""
        stmt = select(LegalCase).where(LegalCase.id == case_id)
        if lawyer_id is not None:
            stmt = stmt.where(LegalCase.lawyer_id == lawyer_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_legal_case(self, data: Mapping[str, Any]) -> LegalCase:
        if not data.get("lawyer_id"):
            raise InvalidFieldValue("lawyer_id", data.get("lawyer_id"))
        legal_case = await self._create(LegalCase, data)
        logger.info("Created legal case id=%s for lawyer=%s", legal_case.id, legal_case.lawyer_id)
        return legal_case

    async def update_legal_case(
        self, case_id: str, lawyer_id: str, updates: Mapping[str, Any]
    ) -> Optional[LegalCase]:
        """Owner-scoped partial update; another lawyer's case reads as absent."""
        if "lawyer_id" in updates:
            raise InvalidFieldValue("lawyer_id", updates["lawyer_id"])
        legal_case = await self.get_legal_case(case_id, lawyer_id=lawyer_id)
        if legal_case is None:
            return None
        return await self._update(legal_case, updates)

    # ------------------------------------------------------------------
    # Document templates
    # ------------------------------------------------------------------

    async def list_document_templates(
        self, category: Optional[str] = None
    ) -> List[DocumentTemplate]:
        """Active templates, alphabetical by name."""
        conditions = [DocumentTemplate.is_active.is_(True)]
        if category is not None:
            conditions.append(
                DocumentTemplate.category == _coerce_enum(DocumentCategory, "category", category)
            )
        stmt = select(DocumentTemplate).where(and_(*conditions)).order_by(DocumentTemplate.name.asc())
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get_document_template(self, template_id: str) -> Optional[DocumentTemplate]:
        return await self._session.get(DocumentTemplate, template_id)

    async def create_document_template(self, data: Mapping[str, Any]) -> DocumentTemplate:
        template = await self._create(DocumentTemplate, data)
        logger.info("Created document template id=%s name=%r", template.id, template.name)
        return template

    # ------------------------------------------------------------------
    # Generated documents
    # ------------------------------------------------------------------

    async def list_user_generated_documents(self, user_id: str) -> List[DocumentWithTemplate]:
        stmt = (
            select(GeneratedDocument, DocumentTemplate)
            .outerjoin(DocumentTemplate, GeneratedDocument.template_id == DocumentTemplate.id)
            .where(GeneratedDocument.user_id == user_id)
            .order_by(GeneratedDocument.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [
            DocumentWithTemplate(document=document, template=template)
            for document, template in result.all()
        ]

    async def create_generated_document(self, data: Mapping[str, Any]) -> GeneratedDocument:
        document = await self._create(GeneratedDocument, data)
        logger.info(
            "Created generated document id=%s from template=%s for user=%s",
            document.id,
            document.template_id,
            document.user_id,
        )
        return document

    # ------------------------------------------------------------------
    # Legal aid applications
    # ------------------------------------------------------------------

    async def list_legal_aid_applications(
        self,
        status: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[ApplicationWithUser]:
        """Every application (admin view), newest first, with the applicant."""
        stmt = (
            select(LegalAidApplication, User)
            .outerjoin(User, LegalAidApplication.user_id == User.id)
        )
        if status is not None:
            stmt = stmt.where(LegalAidApplication.status == status)
        stmt = _paginate(stmt.order_by(LegalAidApplication.created_at.desc()), limit, offset)

        result = await self._session.execute(stmt)
        return [
            ApplicationWithUser(application=application, user=user)
            for application, user in result.all()
        ]

    async def list_user_legal_aid_applications(self, user_id: str) -> List[LegalAidApplication]:
        stmt = (
            select(LegalAidApplication)
            .where(LegalAidApplication.user_id == user_id)
            .order_by(LegalAidApplication.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get_legal_aid_application(self, application_id: str) -> Optional[LegalAidApplication]:
        return await self._session.get(LegalAidApplication, application_id)

    async def create_legal_aid_application(self, data: Mapping[str, Any]) -> LegalAidApplication:
        application = await self._create(LegalAidApplication, data)
        logger.info(
            "Created legal aid application id=%s for user=%s", application.id, application.user_id
        )
        return application

    async def update_legal_aid_application(
        self, application_id: str, updates: Mapping[str, Any]
    ) -> Optional[LegalAidApplication]:
        application = await self.get_legal_aid_application(application_id)
        if application is None:
            return None
        return await self._update(application, updates)


async def get_storage(db: AsyncSession = Depends(get_db)) -> DatabaseStorage:
    """FastAPI dependency: storage bound to the request's session."""
    return DatabaseStorage(db)
