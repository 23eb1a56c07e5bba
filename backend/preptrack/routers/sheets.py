"""
Practice sheet, chapter list and recommendation routes.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from ..database import get_db
from ..schemas.sheet import (
    SheetCreate,
    SheetResponse,
    ChaptersConfigResponse,
    RecommendationCreate,
    RecommendationResponse
)
from ..models.user import User
from ..services.sheet_service import SheetService
from ..services.recommendation_service import RecommendationService
from ..utils.security import get_current_user


router = APIRouter(prefix="/api", tags=["Practice"])


@router.post("/sheets", response_model=SheetResponse, status_code=status.HTTP_201_CREATED)
async def create_sheet(
    sheet_data: SheetCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Submit a practice sheet."""
    return await SheetService(db).create_sheet(current_user.id, sheet_data)


@router.get("/my-sheets", response_model=List[SheetResponse])
async def my_sheets(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """The caller's sheets, newest first."""
    return await SheetService(db).list_for_user(current_user.id)


@router.get("/chapters", response_model=ChaptersConfigResponse)
async def get_chapters(db: AsyncSession = Depends(get_db)):
    """This week's chapters per subject."""
    return await SheetService(db).get_chapters()


# ============= Recommendations =============

@router.get("/recommendations", response_model=List[RecommendationResponse])
async def list_recommendations(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Recommendations still open for voting."""
    return await RecommendationService(db).list_pending()


@router.post("/recommendations", response_model=RecommendationResponse, status_code=status.HTTP_201_CREATED)
async def create_recommendation(
    body: RecommendationCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Propose a chapter for a subject."""
    return await RecommendationService(db).create(current_user.id, body.subject, body.chapter_name)


@router.post("/recommendations/{rec_id}/approve", response_model=RecommendationResponse)
async def approve_recommendation(
    rec_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Vote for a recommendation."""
    return await RecommendationService(db).approve(rec_id, current_user.id)


@router.post("/recommendations/{rec_id}/reject", response_model=RecommendationResponse)
async def reject_recommendation(
    rec_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Vote against a recommendation; one rejection decides it."""
    return await RecommendationService(db).reject(rec_id, current_user.id)
