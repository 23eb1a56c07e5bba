"""
Chapter recommendations put to a vote of every registered user.

Approval needs every registered user; a single rejection is final. Voters
are tracked as sets so casting the same vote twice changes nothing, and
once a recommendation is decided further votes leave it as it is.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc, func
from typing import List
import logging

from ..models.user import User
from ..models.sheet import ChapterRecommendation, SUBJECTS
from ..exceptions import NotFoundError, ValidationError
from .sheet_service import SheetService


logger = logging.getLogger(__name__)

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"


class RecommendationService:
    """Service for chapter recommendations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, user_id: int, subject: str, chapter_name: str) -> ChapterRecommendation:
        if subject not in SUBJECTS:
            raise ValidationError(f"Unknown subject: {subject}")
        name = (chapter_name or "").strip()
        if not name:
            raise ValidationError("Chapter name is required")

        rec = ChapterRecommendation(
            user_id=user_id,
            subject=subject,
            chapter_name=name,
            approvals=[],
            rejections=[],
            status=PENDING
        )
        self.db.add(rec)
        await self.db.commit()
        await self.db.refresh(rec)
        return rec

    async def list_pending(self) -> List[ChapterRecommendation]:
        result = await self.db.execute(
            select(ChapterRecommendation)
            .filter(ChapterRecommendation.status == PENDING)
            .order_by(desc(ChapterRecommendation.created_at), desc(ChapterRecommendation.id))
        )
        return list(result.scalars().all())

    async def get(self, rec_id: int) -> ChapterRecommendation:
        result = await self.db.execute(
            select(ChapterRecommendation).filter(ChapterRecommendation.id == rec_id)
        )
        rec = result.scalar_one_or_none()
        if not rec:
            raise NotFoundError("Recommendation", rec_id)
        return rec

    async def count_users(self) -> int:
        result = await self.db.execute(select(func.count(User.id)))
        return result.scalar_one()

    async def approve(self, rec_id: int, user_id: int) -> ChapterRecommendation:
        rec = await self.get(rec_id)
        if rec.status != PENDING or user_id in rec.approvals:
            return rec

        rec.approvals = list(rec.approvals) + [user_id]
        total_users = await self.count_users()
        if len(rec.approvals) >= total_users:
            rec.status = APPROVED
            # Status change and chapter append commit together
            await SheetService(self.db).stage_chapter(rec.subject, rec.chapter_name)

        await self.db.commit()
        await self.db.refresh(rec)

        if rec.status == APPROVED:
            logger.info(f"Recommendation {rec.id} approved by all {total_users} users")
        return rec

    async def reject(self, rec_id: int, user_id: int) -> ChapterRecommendation:
        rec = await self.get(rec_id)
        if rec.status != PENDING:
            return rec

        if user_id not in rec.rejections:
            rec.rejections = list(rec.rejections) + [user_id]
        rec.status = REJECTED

        await self.db.commit()
        await self.db.refresh(rec)
        logger.info(f"Recommendation {rec.id} rejected by user {user_id}")
        return rec
