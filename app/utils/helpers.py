"""
Common utility functions and helpers.
"""
from datetime import datetime, timezone
from typing import Optional
import re
import uuid


def new_id() -> str:
    """Opaque primary key for every table."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Timezone-aware current time used for created/updated timestamps."""
    return datetime.now(timezone.utc)


def escape_like(term: str, escape: str = "\\") -> str:
    """
    Escape LIKE wildcards so a search term matches literally.

    Args:
        term: Raw user search text
        escape: Escape character passed to ``.like(..., escape=...)``

    Returns:
        Term safe to wrap in ``%...%``
    """
    return (
        term.replace(escape, escape * 2)
        .replace("%", f"{escape}%")
        .replace("_", f"{escape}_")
    )


def strip_code_fences(text: str) -> str:
    """Remove ```json / ``` delimiters that LLMs often wrap output in."""
    text = re.sub(r"^```(?:json)?\s*\n?", "", text.strip(), flags=re.IGNORECASE)
    text = re.sub(r"\n?```\s*$", "", text)
    return text.strip()


def full_name(first_name: Optional[str], last_name: Optional[str]) -> Optional[str]:
    """Join name parts, returning None when both are empty."""
    parts = [p.strip() for p in (first_name, last_name) if p and p.strip()]
    return " ".join(parts) or None


def truncate_text(text: str, max_length: int = 200, suffix: str = "...") -> str:
    """
    Truncate text to maximum length.

    Args:
        text: Text to truncate
        max_length: Maximum length
        suffix: Suffix to add if truncated

    Returns:
        Truncated text
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix
