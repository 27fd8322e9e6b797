"""
LLM helpers for legal summaries, question triage and document drafting.

Talks to any OpenAI-compatible ``/chat/completions`` endpoint (LLM_BASE_URL)
over httpx.  Prompts are module-level constants so they can be tuned without
touching logic code.

Public API
----------
LLMService.generate_legal_summary(text)                       -> str
LLMService.analyze_legal_question(question)                   -> Dict
LLMService.generate_document_content(template_type, form_data) -> str
"""
from __future__ import annotations

import asyncio
import functools
import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from app.config import settings
from app.models.database_models import DocumentCategory
from app.utils.helpers import strip_code_fences, truncate_text

logger = logging.getLogger(__name__)


class LLMServiceError(RuntimeError):
    """The LLM endpoint could not produce a usable answer."""


# ---------------------------------------------------------------------------
# Prompt templates
# ---------------------------------------------------------------------------

_SUMMARY_SYSTEM_PROMPT = (
    "You are a legal expert specializing in Kenyan law. Provide clear, concise "
    "summaries of legal documents and constitutional provisions."
)

_SUMMARY_USER_PROMPT = (
    "Please provide a clear summary of this legal text for someone without "
    "legal training: {text}"
)

_ANALYSIS_SYSTEM_PROMPT = """\
You are a legal AI assistant for Kenya. Analyze legal questions and categorize them.
Respond ONLY with JSON in this format, no markdown:
{{"category": "{categories}", "complexity": 1-5, "suggestedResources": ["resource1", "resource2"]}}\
"""

_DOCUMENT_SYSTEM_PROMPT = (
    "You are a legal document generator for Kenya. Create properly formatted legal "
    "documents based on the template type and form data provided. Ensure compliance "
    "with Kenyan law."
)

_DOCUMENT_USER_PROMPT = "Generate a {template_type} document using this form data: {form_data}"

DEFAULT_ANALYSIS: Dict[str, Any] = {
    "category": DocumentCategory.CIVIL.value,
    "complexity": 3,
    "suggested_resources": ["Kenya Law Database", "Constitution of Kenya 2010"],
}


class LLMService:
    """
    Thin chat-completions client.

    Limits concurrency to MAX_CONCURRENT simultaneous LLM calls.  Summary and
    drafting failures raise ``LLMServiceError``; question analysis falls back
    to ``DEFAULT_ANALYSIS`` instead.
    """

    MAX_CONCURRENT: int = 4
    VALID_CATEGORIES = frozenset(c.value for c in DocumentCategory)

    SUMMARY_SYSTEM_PROMPT = _SUMMARY_SYSTEM_PROMPT
    SUMMARY_USER_PROMPT = _SUMMARY_USER_PROMPT
    ANALYSIS_SYSTEM_PROMPT = _ANALYSIS_SYSTEM_PROMPT
    DOCUMENT_SYSTEM_PROMPT = _DOCUMENT_SYSTEM_PROMPT
    DOCUMENT_USER_PROMPT = _DOCUMENT_USER_PROMPT

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.base_url = settings.LLM_BASE_URL.rstrip("/")
        self.api_key = settings.LLM_API_KEY
        self.model = settings.LLM_MODEL
        self.timeout = httpx.Timeout(float(settings.LLM_TIMEOUT), connect=10.0)
        self._transport = transport
        self._semaphore = asyncio.Semaphore(self.MAX_CONCURRENT)

    # ------------------------------------------------------------------
    # Public methods
    # ------------------------------------------------------------------

    async def generate_legal_summary(self, text: str) -> str:
        """Plain-language summary of *text*."""
        content = await self._chat(
            [
                {"role": "system", "content": self.SUMMARY_SYSTEM_PROMPT},
                {"role": "user", "content": self.SUMMARY_USER_PROMPT.format(text=text)},
            ],
            max_tokens=300,
            temperature=0.3,
        )
        return content or "Unable to generate summary."

    async def analyze_legal_question(self, question: str) -> Dict[str, Any]:
        """
        Classify *question* into a legal category with a 1-5 complexity score.

        Returns a dict with keys ``category``, ``complexity`` and
        ``suggested_resources``.  Never raises; any failure or malformed
        field yields the matching value from ``DEFAULT_ANALYSIS``.
        """
        system_prompt = self.ANALYSIS_SYSTEM_PROMPT.format(
            categories="|".join(sorted(self.VALID_CATEGORIES))
        )
        try:
            content = await self._chat(
                [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": question},
                ],
                temperature=0.2,
                json_mode=True,
            )
            raw = json.loads(strip_code_fences(content or "{}"))
        except (LLMServiceError, json.JSONDecodeError, ValueError) as exc:
            logger.error("analyze_legal_question: falling back to default analysis — %s", exc)
            return dict(DEFAULT_ANALYSIS)

        if not isinstance(raw, dict):
            return dict(DEFAULT_ANALYSIS)
        return self._normalise_analysis(raw)

    async def generate_document_content(self, template_type: str, form_data: Dict[str, Any]) -> str:
        """Draft the prose of a *template_type* document filled with *form_data*."""
        content = await self._chat(
            [
                {"role": "system", "content": self.DOCUMENT_SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": self.DOCUMENT_USER_PROMPT.format(
                        template_type=template_type,
                        form_data=json.dumps(form_data, default=str),
                    ),
                },
            ],
            max_tokens=2000,
            temperature=0.1,
        )
        if not content:
            raise LLMServiceError("Error generating document content.")
        return content

    # ------------------------------------------------------------------
    # Response normalisation
    # ------------------------------------------------------------------

    def _normalise_analysis(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        category = str(raw.get("category", "")).lower().strip()
        if category not in self.VALID_CATEGORIES:
            category = DEFAULT_ANALYSIS["category"]

        try:
            complexity = int(raw.get("complexity"))
        except (TypeError, ValueError):
            complexity = DEFAULT_ANALYSIS["complexity"]
        if not 1 <= complexity <= 5:
            complexity = DEFAULT_ANALYSIS["complexity"]

        resources = raw.get("suggestedResources", raw.get("suggested_resources"))
        if not isinstance(resources, list) or not resources:
            resources = list(DEFAULT_ANALYSIS["suggested_resources"])

        return {
            "category": category,
            "complexity": complexity,
            "suggested_resources": [str(r) for r in resources],
        }

    # ------------------------------------------------------------------
    # Core LLM caller
    # ------------------------------------------------------------------

    async def _chat(
        self,
        messages: List[Dict[str, str]],
        max_tokens: Optional[int] = None,
        temperature: float = 0.2,
        json_mode: bool = False,
    ) -> str:
        """
        POST to /chat/completions and return the first choice's text.

        Raises ``LLMServiceError`` on missing credentials, timeouts,
        connection failures and non-200 responses.
        """
        if not self.api_key:
            raise LLMServiceError("LLM_API_KEY is not configured")

        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
        }
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        async with self._semaphore:
            try:
                async with httpx.AsyncClient(
                    timeout=self.timeout, transport=self._transport
                ) as client:
                    resp = await client.post(
                        f"{self.base_url}/chat/completions",
                        headers={"Authorization": f"Bearer {self.api_key}"},
                        json=payload,
                    )
            except httpx.TimeoutException as exc:
                logger.error("_chat: request timed out after %.0f s", settings.LLM_TIMEOUT)
                raise LLMServiceError("LLM request timed out") from exc
            except httpx.HTTPError as exc:
                logger.error("_chat: connection error — %s", exc)
                raise LLMServiceError(f"LLM connection error: {exc}") from exc

        if resp.status_code != 200:
            logger.error(
                "_chat: LLM returned HTTP %d: %s",
                resp.status_code,
                truncate_text(resp.text, 300),
            )
            raise LLMServiceError(f"LLM returned HTTP {resp.status_code}")

        try:
            return resp.json()["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise LLMServiceError("Malformed LLM response") from exc


@functools.lru_cache(maxsize=1)
def get_llm_service() -> LLMService:
    """Process-wide LLMService so every request shares one concurrency limiter."""
    return LLMService()
