"""
Constitution article search.
"""
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, status

from app.models.schemas import ConstitutionSearchResult
from app.services.constitution import search_constitution

router = APIRouter()


@router.get("/search", response_model=List[ConstitutionSearchResult])
async def search(q: Optional[str] = Query(None, description="Search phrase")) -> List[ConstitutionSearchResult]:
    if not q or not q.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Search query required",
        )
    return [ConstitutionSearchResult(**article) for article in search_constitution(q.strip())]
