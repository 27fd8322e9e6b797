"""Tests for LLMService against a mocked chat-completions endpoint."""
import json

import httpx
import pytest

from app.config import settings
from app.services.llm_service import (
    DEFAULT_ANALYSIS,
    LLMService,
    LLMServiceError,
    get_llm_service,
)


def _completion(content: str) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})


def _service(handler) -> LLMService:
    return LLMService(transport=httpx.MockTransport(handler))


@pytest.fixture(autouse=True)
def llm_key(monkeypatch):
    monkeypatch.setattr(settings, "LLM_API_KEY", "test-key")


@pytest.mark.asyncio
async def test_summary_sends_prompt_and_returns_content():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return _completion("Everyone has dignity.")

    summary = await _service(handler).generate_legal_summary("Article 28 text")

    assert summary == "Everyone has dignity."
    assert seen["url"].endswith("/chat/completions")
    assert seen["auth"] == "Bearer test-key"
    assert seen["body"]["max_tokens"] == 300
    assert "Article 28 text" in seen["body"]["messages"][1]["content"]


@pytest.mark.asyncio
async def test_summary_empty_content_has_fallback_text():
    summary = await _service(lambda r: _completion("")).generate_legal_summary("x")
    assert summary == "Unable to generate summary."


@pytest.mark.asyncio
async def test_summary_http_error_raises():
    with pytest.raises(LLMServiceError):
        await _service(lambda r: httpx.Response(500, text="boom")).generate_legal_summary("x")


@pytest.mark.asyncio
async def test_missing_key_raises(monkeypatch):
    monkeypatch.setattr(settings, "LLM_API_KEY", "")
    with pytest.raises(LLMServiceError):
        await _service(lambda r: _completion("unused")).generate_document_content("Will", {})


@pytest.mark.asyncio
async def test_analysis_parses_fenced_json():
    content = '```json\n{"category": "Family", "complexity": 4, "suggestedResources": ["Marriage Act 2014"]}\n```'
    analysis = await _service(lambda r: _completion(content)).analyze_legal_question("Divorce?")
    assert analysis == {
        "category": "family",
        "complexity": 4,
        "suggested_resources": ["Marriage Act 2014"],
    }


@pytest.mark.asyncio
async def test_analysis_replaces_invalid_fields():
    content = json.dumps({"category": "tax", "complexity": 9, "suggested_resources": []})
    analysis = await _service(lambda r: _completion(content)).analyze_legal_question("?")
    assert analysis == DEFAULT_ANALYSIS


@pytest.mark.asyncio
async def test_analysis_falls_back_on_failure():
    analysis = await _service(lambda r: httpx.Response(503)).analyze_legal_question("?")
    assert analysis == DEFAULT_ANALYSIS

    analysis = await _service(lambda r: _completion("not json")).analyze_legal_question("?")
    assert analysis == DEFAULT_ANALYSIS


@pytest.mark.asyncio
async def test_document_content_empty_raises():
    with pytest.raises(LLMServiceError):
        await _service(lambda r: _completion("")).generate_document_content("Will", {"a": 1})


def test_dependency_shares_one_concurrency_limiter():
    first, second = get_llm_service(), get_llm_service()
    assert first is second
    assert first._semaphore is second._semaphore
