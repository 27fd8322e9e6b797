"""
Constitution article lookup.

There is no indexed constitution corpus yet; search runs over a small fixed
set of Bill of Rights articles.
"""
from typing import Any, Dict, List

# TODO: replace with a query against the legal_documents table once the
# Constitution of Kenya 2010 articles are imported as constitutional documents.
CONSTITUTION_ARTICLES: List[Dict[str, Any]] = [
    {
        "id": "article-25",
        "title": "Article 25: Fundamental rights and freedoms",
        "content": (
            "Every person has inherent dignity and the right to have that dignity "
            "respected and protected."
        ),
        "chapter": "Chapter 4: Bill of Rights",
        "section": "25",
        "relevance": 0.95,
    },
    {
        "id": "article-47",
        "title": "Article 47: Fair administrative action",
        "content": (
            "Every person has the right to administrative action that is expeditious, "
            "efficient, lawful, reasonable and procedurally fair."
        ),
        "chapter": "Chapter 4: Bill of Rights",
        "section": "47",
        "relevance": 0.87,
    },
]


def search_constitution(query: str) -> List[Dict[str, Any]]:
    """Articles whose title or content contains *query*, ignoring case."""
    needle = query.lower()
    return [
        article
        for article in CONSTITUTION_ARTICLES
        if needle in article["title"].lower() or needle in article["content"].lower()
    ]
