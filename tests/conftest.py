"""
Shared fixtures for Haki backend integration tests.

Runs against TEST_DATABASE_URL, a throwaway SQLite file via aiosqlite unless
the variable points at a PostgreSQL test database. Each test function gets
its own engine and session; the schema is created with create_all before the
test and dropped afterwards so each test starts with a clean slate.
"""
from __future__ import annotations

import os
from typing import Any, AsyncGenerator, Dict, List

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

# Override DATABASE_URL *before* any app module is imported, so that
# settings.DATABASE_URL and the global engine point at the test DB.
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///./test_haki.db")
os.environ["DATABASE_URL"] = TEST_DATABASE_URL

from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import database_models  # noqa: E402,F401
from app.services.llm_service import LLMServiceError, get_llm_service  # noqa: E402


# ---------------------------------------------------------------------------
# Fake LLM
# ---------------------------------------------------------------------------

class FakeLLMService:
    """Stands in for LLMService; set ``fail`` to simulate an unreachable LLM."""

    def __init__(self) -> None:
        self.fail = False
        self.calls: List[tuple] = []

    async def generate_legal_summary(self, text: str) -> str:
        self.calls.append(("summary", text))
        if self.fail:
            raise LLMServiceError("LLM unavailable")
        return "A plain-language summary."

    async def analyze_legal_question(self, question: str) -> Dict[str, Any]:
        self.calls.append(("analyze", question))
        return {
            "category": "employment",
            "complexity": 2,
            "suggested_resources": ["Employment Act 2007"],
        }

    async def generate_document_content(self, template_type: str, form_data: Dict[str, Any]) -> str:
        self.calls.append(("document", template_type, form_data))
        if self.fail:
            raise LLMServiceError("LLM unavailable")
        return f"DRAFT {template_type}"


# ---------------------------------------------------------------------------
# Per-test fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Provide a DB session for each test. The schema is created fresh and
    dropped after the test.
    """
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def fake_llm() -> FakeLLMService:
    return FakeLLMService()


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession, fake_llm: FakeLLMService
) -> AsyncGenerator[AsyncClient, None]:
    """
    httpx AsyncClient wired to the FastAPI app with the DB and LLM
    dependencies overridden.
    """

    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_llm_service] = lambda: fake_llm

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _login(client: AsyncClient, headers: Dict[str, str], role: str) -> Dict[str, str]:
    resp = await client.post(
        "/api/auth/callback",
        json={
            "id": headers["X-User-Id"],
            "email": headers["X-User-Email"],
            "first_name": headers["X-User-First-Name"],
            "last_name": headers["X-User-Last-Name"],
            "role": role,
        },
    )
    assert resp.status_code == 200, resp.text
    return headers


@pytest_asyncio.fixture
async def lawyer_headers(client: AsyncClient) -> Dict[str, str]:
    return await _login(client, LAWYER_HEADERS, "lawyer")


@pytest_asyncio.fixture
async def lawyer2_headers(client: AsyncClient) -> Dict[str, str]:
    return await _login(client, LAWYER2_HEADERS, "lawyer")


@pytest_asyncio.fixture
async def admin_headers(client: AsyncClient) -> Dict[str, str]:
    return await _login(client, ADMIN_HEADERS, "admin")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

AUTH_HEADERS = {
    "X-User-Id": "test-user-1",
    "X-User-Email": "test1@example.com",
    "X-User-First-Name": "Amina",
    "X-User-Last-Name": "Otieno",
}

AUTH_HEADERS_USER2 = {
    "X-User-Id": "test-user-2",
    "X-User-Email": "test2@example.com",
    "X-User-First-Name": "Brian",
    "X-User-Last-Name": "Kamau",
}

LAWYER_HEADERS = {
    "X-User-Id": "lawyer-1",
    "X-User-Email": "lawyer1@example.com",
    "X-User-First-Name": "Wanjiru",
    "X-User-Last-Name": "Mwangi",
}

LAWYER2_HEADERS = {
    "X-User-Id": "lawyer-2",
    "X-User-Email": "lawyer2@example.com",
    "X-User-First-Name": "Otieno",
    "X-User-Last-Name": "Odhiambo",
}

ADMIN_HEADERS = {
    "X-User-Id": "admin-1",
    "X-User-Email": "admin@example.com",
    "X-User-First-Name": "Grace",
    "X-User-Last-Name": "Njeri",
}

QUESTION_CONTENT = (
    "My employer has not paid my salary for three months and now says "
    "I should resign. What are my rights under Kenyan law?"
)


async def create_question(
    client: AsyncClient,
    headers: Dict[str, str] = AUTH_HEADERS,
    title: str = "Unpaid salary for three months",
    category: str = "employment",
) -> Dict[str, Any]:
    resp = await client.post(
        "/api/forum/questions",
        json={"title": title, "content": QUESTION_CONTENT, "category": category},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()
