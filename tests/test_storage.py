"""Direct tests of DatabaseStorage, below the HTTP layer."""
import asyncio
from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.database_models import (
    CaseStatus,
    ForumQuestion,
    QuestionStatus,
    User,
    UserRole,
)
from app.services.storage import DatabaseStorage, InvalidFieldValue
from tests.conftest import TEST_DATABASE_URL


@pytest.fixture
def storage(db_session: AsyncSession) -> DatabaseStorage:
    return DatabaseStorage(db_session)


async def _user(storage: DatabaseStorage, user_id: str = "u-1", **fields) -> User:
    return await storage.upsert_user({"id": user_id, **fields})


async def _question(storage: DatabaseStorage, user_id: str = "u-1", **fields):
    data = {
        "user_id": user_id,
        "title": "How do I register a business name?",
        "content": "I want to register a small shop in Nakuru and need to know the steps.",
        "category": "business",
    }
    data.update(fields)
    return await storage.create_forum_question(data)


@pytest.mark.asyncio
async def test_upsert_user_is_idempotent(storage: DatabaseStorage, db_session: AsyncSession):
    created = await _user(storage, email="a@example.com", first_name="Achieng")
    assert created.role == UserRole.CITIZEN
    assert created.verified is False

    updated = await _user(storage, email="new@example.com", role="lawyer")
    assert updated.email == "new@example.com"
    assert updated.first_name == "Achieng"
    assert updated.role == UserRole.LAWYER

    count = await db_session.scalar(select(func.count(User.id)))
    assert count == 1


@pytest.mark.asyncio
async def test_upsert_user_rejects_bad_role(storage: DatabaseStorage):
    with pytest.raises(InvalidFieldValue) as exc_info:
        await _user(storage, role="judge")
    assert exc_info.value.field == "role"
    assert "lawyer" in exc_info.value.allowed


@pytest.mark.asyncio
async def test_upsert_user_rejects_timestamps(storage: DatabaseStorage):
    with pytest.raises(InvalidFieldValue) as exc_info:
        await _user(storage, created_at=datetime(2020, 1, 1, tzinfo=timezone.utc))
    assert exc_info.value.field == "created_at"

    with pytest.raises(InvalidFieldValue):
        await _user(storage, updated_at=datetime(2020, 1, 1, tzinfo=timezone.utc))


@pytest.mark.asyncio
async def test_get_missing_rows_return_none(storage: DatabaseStorage):
    assert await storage.get_user("missing") is None
    assert await storage.get_legal_document("missing") is None
    assert await storage.get_forum_question("missing") is None
    assert await storage.view_forum_question("missing") is None
    assert await storage.get_forum_answer("missing") is None
    assert await storage.get_legal_case("missing") is None
    assert await storage.get_document_template("missing") is None
    assert await storage.get_legal_aid_application("missing") is None


@pytest.mark.asyncio
async def test_updates_on_missing_rows_return_none(storage: DatabaseStorage):
    assert await storage.update_legal_document("missing", {"summary": "x"}) is None
    assert await storage.update_forum_question("missing", {"featured": True}) is None
    assert await storage.update_forum_answer("missing", {"content": "x"}) is None
    assert await storage.update_legal_case("missing", "lawyer-1", {"notes": "x"}) is None
    assert await storage.update_legal_aid_application("missing", {"status": "approved"}) is None
    assert await storage.vote_forum_question("missing", "up") is None
    assert await storage.vote_forum_answer("missing", "down") is None


@pytest.mark.asyncio
async def test_create_question_rejects_bad_category(storage: DatabaseStorage):
    await _user(storage)
    with pytest.raises(InvalidFieldValue):
        await _question(storage, category="tax")


@pytest.mark.asyncio
async def test_list_filter_rejects_bad_status(storage: DatabaseStorage):
    with pytest.raises(InvalidFieldValue):
        await storage.list_forum_questions(status="pending")


@pytest.mark.asyncio
async def test_update_rejects_unknown_and_immutable_fields(storage: DatabaseStorage):
    await _user(storage)
    question = await _question(storage)

    with pytest.raises(InvalidFieldValue):
        await storage.update_forum_question(question.id, {"colour": "red"})
    with pytest.raises(InvalidFieldValue):
        await storage.update_forum_question(question.id, {"id": "other"})
    with pytest.raises(InvalidFieldValue):
        await storage.update_forum_question(question.id, {"title": None})


@pytest.mark.asyncio
async def test_update_refreshes_updated_at_only(storage: DatabaseStorage):
    await _user(storage)
    question = await _question(storage)
    created_at = question.created_at
    updated_at = question.updated_at

    updated = await storage.update_forum_question(question.id, {"status": "closed"})
    assert updated.status == QuestionStatus.CLOSED
    assert updated.created_at == created_at
    assert updated.updated_at > updated_at


@pytest.mark.asyncio
async def test_view_and_vote_counters(storage: DatabaseStorage):
    await _user(storage)
    question = await _question(storage)

    for expected in (1, 2, 3):
        viewed = await storage.view_forum_question(question.id)
        assert viewed.question.views_count == expected

    # a pure read never counts as a view
    read = await storage.get_forum_question(question.id)
    assert read.question.views_count == 3

    for _ in range(5):
        voted = await storage.vote_forum_question(question.id, "up")
    assert voted.upvotes == 5
    assert voted.downvotes == 0

    with pytest.raises(InvalidFieldValue):
        await storage.vote_forum_question(question.id, "sideways")


@pytest.mark.asyncio
async def test_answers_count_and_missing_author(storage: DatabaseStorage):
    question = await _question(storage, user_id="ghost")
    await storage.create_forum_answer(
        {"question_id": question.id, "user_id": "ghost", "content": "An answer"}
    )

    [entry] = await storage.list_forum_questions()
    assert entry.user is None
    assert entry.answers_count == 1


@pytest.mark.asyncio
async def test_case_scoping(storage: DatabaseStorage):
    await _user(storage, "lawyer-1", role="lawyer")
    await _user(storage, "lawyer-2", role="lawyer")

    case = await storage.create_legal_case(
        {
            "lawyer_id": "lawyer-1",
            "client_name": "Jane Doe",
            "title": "Land boundary dispute",
            "category": "property",
        }
    )
    assert case.status == CaseStatus.ACTIVE
    assert case.documents == []

    assert [c.id for c in await storage.list_legal_cases("lawyer-1")] == [case.id]
    assert await storage.list_legal_cases("lawyer-2") == []
    assert await storage.get_legal_case(case.id, lawyer_id="lawyer-2") is None
    assert await storage.update_legal_case(case.id, "lawyer-2", {"notes": "x"}) is None

    updated = await storage.update_legal_case(case.id, "lawyer-1", {"status": "appealed"})
    assert updated.status == CaseStatus.APPEALED

    with pytest.raises(InvalidFieldValue):
        await storage.update_legal_case(case.id, "lawyer-1", {"lawyer_id": "lawyer-2"})
    with pytest.raises(InvalidFieldValue):
        await storage.create_legal_case(
            {"client_name": "Jane Doe", "title": "No lawyer", "category": "civil"}
        )


@pytest.mark.asyncio
async def test_legal_aid_application_defaults(storage: DatabaseStorage):
    await _user(storage)
    application = await storage.create_legal_aid_application(
        {
            "user_id": "u-1",
            "case_description": "Eviction notice from landlord",
            "financial_status": {"income": 0},
        }
    )
    assert application.status == "pending"
    assert application.supporting_documents == []

    [entry] = await storage.list_legal_aid_applications(status="pending")
    assert entry.user.id == "u-1"
    assert await storage.list_legal_aid_applications(status="approved") == []


@pytest.mark.asyncio
async def test_jane_doe_case_listing_by_status(storage: DatabaseStorage):
    await _user(storage, "u1", role="lawyer")
    case = await storage.create_legal_case(
        {
            "lawyer_id": "u1",
            "client_name": "Jane Doe",
            "title": "Land dispute",
            "category": "property",
        }
    )
    assert case.status == CaseStatus.ACTIVE

    active = await storage.list_legal_cases("u1", status="active")
    assert [c.id for c in active] == [case.id]
    assert await storage.list_legal_cases("u1", status="closed") == []


@pytest.mark.asyncio
async def test_search_and_pagination_have_no_default_bound(storage: DatabaseStorage):
    for i in range(25):
        await storage.create_legal_document(
            {"title": f"Guide {i}", "content": "Tenancy basics", "category": "property"}
        )

    assert len(await storage.list_legal_documents()) == 25
    assert len(await storage.list_legal_documents(limit=5, offset=22)) == 3
    assert await storage.list_legal_documents(search="Probate") == []


@pytest.mark.asyncio
@pytest.mark.skipif(
    not TEST_DATABASE_URL.startswith("postgresql"),
    reason="needs row locking from a PostgreSQL test database",
)
async def test_concurrent_votes_are_not_lost(storage: DatabaseStorage, db_session: AsyncSession):
    await _user(storage)
    question = await _question(storage)
    await db_session.commit()

    session_factory = async_sessionmaker(db_session.bind, expire_on_commit=False)

    async def _vote() -> None:
        async with session_factory() as session:
            await DatabaseStorage(session).vote_forum_question(question.id, "up")
            await session.commit()

    await asyncio.gather(*(_vote() for _ in range(10)))

    async with session_factory() as session:
        upvotes = await session.scalar(
            select(ForumQuestion.upvotes).where(ForumQuestion.id == question.id)
        )
    assert upvotes == 10
