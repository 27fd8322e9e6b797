"""
Q&A forum endpoints.

Route summary
-------------
GET    /api/forum/questions                    — list (category, status, limit, offset)
POST   /api/forum/questions                    — ask a question
GET    /api/forum/questions/{question_id}      — detail; counts one view
PATCH  /api/forum/questions/{question_id}      — edit (author or admin)
POST   /api/forum/questions/{question_id}/vote — {"type": "up" | "down"}

GET    /api/forum/questions/{question_id}/answers — answers, best-voted first
POST   /api/forum/questions/{question_id}/answers — answer a question
PATCH  /api/forum/answers/{answer_id}             — edit / accept / verify
POST   /api/forum/answers/{answer_id}/vote        — {"type": "up" | "down"}
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.config import settings
from app.dependencies.auth import get_or_create_user, is_admin
from app.models.database_models import User, UserRole
from app.models.schemas import (
    DocumentCategorySchema,
    ForumAnswerCreate,
    ForumAnswerResponse,
    ForumAnswerUpdate,
    ForumAnswerWithAuthorResponse,
    ForumQuestionCreate,
    ForumQuestionDetailResponse,
    ForumQuestionResponse,
    ForumQuestionUpdate,
    QuestionStatusSchema,
    UserResponse,
    VoteRequest,
)
from app.services.storage import AnswerWithAuthor, DatabaseStorage, QuestionWithAuthor, get_storage

logger = logging.getLogger(__name__)

router = APIRouter()


# ─── Helpers ──────────────────────────────────────────────────────────────────

def _user_or_none(user: Optional[User]) -> Optional[UserResponse]:
    return UserResponse.model_validate(user) if user is not None else None


def _question_detail(entry: QuestionWithAuthor) -> ForumQuestionDetailResponse:
    base = ForumQuestionResponse.model_validate(entry.question)
    return ForumQuestionDetailResponse(
        **base.model_dump(),
        user=_user_or_none(entry.user),
        answers_count=entry.answers_count,
    )


def _answer_with_author(entry: AnswerWithAuthor) -> ForumAnswerWithAuthorResponse:
    base = ForumAnswerResponse.model_validate(entry.answer)
    return ForumAnswerWithAuthorResponse(**base.model_dump(), user=_user_or_none(entry.user))


def _question_not_found(question_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Question {question_id} not found.",
    )


def _answer_not_found(answer_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Answer {answer_id} not found.",
    )


# ═══════════════════════════════════════════════════════════════════════════════
# QUESTIONS
# ═══════════════════════════════════════════════════════════════════════════════

@router.get("/questions", response_model=List[ForumQuestionDetailResponse])
async def list_questions(
    category: Optional[DocumentCategorySchema] = Query(None),
    status_filter: Optional[QuestionStatusSchema] = Query(None, alias="status"),
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
    storage: DatabaseStorage = Depends(get_storage),
) -> List[ForumQuestionDetailResponse]:
    """Newest questions first, each with author and answer count."""
    entries = await storage.list_forum_questions(
        category=category.value if category else None,
        status=status_filter.value if status_filter else None,
        limit=limit,
        offset=offset,
    )
    return [_question_detail(e) for e in entries]


@router.post(
    "/questions",
    response_model=ForumQuestionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_question(
    body: ForumQuestionCreate,
    user: User = Depends(get_or_create_user),
    storage: DatabaseStorage = Depends(get_storage),
) -> ForumQuestionResponse:
    question = await storage.create_forum_question({**body.model_dump(), "user_id": user.id})
    return ForumQuestionResponse.model_validate(question)


@router.get("/questions/{question_id}", response_model=ForumQuestionDetailResponse)
async def get_question(
    question_id: str,
    storage: DatabaseStorage = Depends(get_storage),
) -> ForumQuestionDetailResponse:
    """Question detail. Every successful fetch counts as one view."""
    entry = await storage.view_forum_question(question_id)
    if entry is None:
        raise _question_not_found(question_id)
    return _question_detail(entry)


@router.patch("/questions/{question_id}", response_model=ForumQuestionResponse)
async def update_question(
    question_id: str,
    body: ForumQuestionUpdate,
    user: User = Depends(get_or_create_user),
    storage: DatabaseStorage = Depends(get_storage),
) -> ForumQuestionResponse:
    """Edit a question. Only its author or an admin may change it."""
    entry = await storage.get_forum_question(question_id)
    if entry is None:
        raise _question_not_found(question_id)
    if entry.question.user_id != user.id and not is_admin(user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the author of a question can edit it.",
        )

    question = await storage.update_forum_question(question_id, body.model_dump(exclude_unset=True))
    if question is None:
        raise _question_not_found(question_id)
    return ForumQuestionResponse.model_validate(question)


@router.post("/questions/{question_id}/vote", response_model=ForumQuestionResponse)
async def vote_question(
    question_id: str,
    body: VoteRequest,
    user: User = Depends(get_or_create_user),
    storage: DatabaseStorage = Depends(get_storage),
) -> ForumQuestionResponse:
    question = await storage.vote_forum_question(question_id, body.type.value)
    if question is None:
        raise _question_not_found(question_id)
    logger.info("User %s voted %s on question %s", user.id, body.type.value, question_id)
    return ForumQuestionResponse.model_validate(question)


# ═══════════════════════════════════════════════════════════════════════════════
# ANSWERS
# ═══════════════════════════════════════════════════════════════════════════════

@router.get("/questions/{question_id}/answers", response_model=List[ForumAnswerWithAuthorResponse])
async def list_answers(
    question_id: str,
    storage: DatabaseStorage = Depends(get_storage),
) -> List[ForumAnswerWithAuthorResponse]:
    """Answers ordered by upvotes, newest first among equals."""
    if await storage.get_forum_question(question_id) is None:
        raise _question_not_found(question_id)
    entries = await storage.list_forum_answers(question_id)
    return [_answer_with_author(e) for e in entries]


@router.post(
    "/questions/{question_id}/answers",
    response_model=ForumAnswerResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_answer(
    question_id: str,
    body: ForumAnswerCreate,
    user: User = Depends(get_or_create_user),
    storage: DatabaseStorage = Depends(get_storage),
) -> ForumAnswerResponse:
    if await storage.get_forum_question(question_id) is None:
        raise _question_not_found(question_id)

    answer = await storage.create_forum_answer(
        {"content": body.content, "question_id": question_id, "user_id": user.id}
    )
    return ForumAnswerResponse.model_validate(answer)


@router.patch("/answers/{answer_id}", response_model=ForumAnswerResponse)
async def update_answer(
    answer_id: str,
    body: ForumAnswerUpdate,
    user: User = Depends(get_or_create_user),
    storage: DatabaseStorage = Depends(get_storage),
) -> ForumAnswerResponse:
    """
    Edit an answer.

    * ``content`` — the answer's author (or an admin)
    * ``is_accepted`` — the author of the question (or an admin)
    * ``expert_verified`` — any lawyer or admin
    """
    answer = await storage.get_forum_answer(answer_id)
    if answer is None:
        raise _answer_not_found(answer_id)

    updates = body.model_dump(exclude_unset=True)
    admin = is_admin(user)

    if "content" in updates and answer.user_id != user.id and not admin:
        raise HTTPException(status_code=403, detail="Only the author of an answer can edit it.")

    if "is_accepted" in updates and not admin:
        entry = await storage.get_forum_question(answer.question_id)
        if entry is None or entry.question.user_id != user.id:
            raise HTTPException(
                status_code=403,
                detail="Only the author of the question can accept an answer.",
            )

    if "expert_verified" in updates and UserRole(user.role) not in (UserRole.LAWYER, UserRole.ADMIN):
        raise HTTPException(status_code=403, detail="Only lawyers can verify answers.")

    updated = await storage.update_forum_answer(answer_id, updates)
    if updated is None:
        raise _answer_not_found(answer_id)
    return ForumAnswerResponse.model_validate(updated)


@router.post("/answers/{answer_id}/vote", response_model=ForumAnswerResponse)
async def vote_answer(
    answer_id: str,
    body: VoteRequest,
    user: User = Depends(get_or_create_user),
    storage: DatabaseStorage = Depends(get_storage),
) -> ForumAnswerResponse:
    answer = await storage.vote_forum_answer(answer_id, body.type.value)
    if answer is None:
        raise _answer_not_found(answer_id)
    logger.info("User %s voted %s on answer %s", user.id, body.type.value, answer_id)
    return ForumAnswerResponse.model_validate(answer)
