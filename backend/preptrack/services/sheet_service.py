"""
Practice sheets and the weekly chapter configuration.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from typing import Dict, List
import logging

from ..models.sheet import PracticeSheet, ChaptersConfig, SUBJECTS
from ..schemas.sheet import SheetCreate
from ..config import settings


logger = logging.getLogger(__name__)


class SheetService:
    """Service for practice sheets and chapter lists."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_sheet(self, user_id: int, sheet_data: SheetCreate) -> PracticeSheet:
        sheet = PracticeSheet(
            user_id=user_id,
            name=sheet_data.name.strip(),
            physics=sheet_data.physics.model_dump(),
            chemistry=sheet_data.chemistry.model_dump(),
            biology=sheet_data.biology.model_dump()
        )
        self.db.add(sheet)
        await self.db.commit()
        await self.db.refresh(sheet)
        return sheet

    async def list_for_user(self, user_id: int) -> List[PracticeSheet]:
        result = await self.db.execute(
            select(PracticeSheet)
            .filter(PracticeSheet.user_id == user_id)
            .order_by(desc(PracticeSheet.created_at), desc(PracticeSheet.id))
        )
        return list(result.scalars().all())

    async def _config(self) -> ChaptersConfig:
        """The single config row; a new one is seeded with DEFAULT_CHAPTERS but not committed."""
        result = await self.db.execute(select(ChaptersConfig).order_by(ChaptersConfig.id).limit(1))
        config = result.scalar_one_or_none()
        if config is None:
            config = ChaptersConfig()
            self._assign(config, settings.DEFAULT_CHAPTERS)
            self.db.add(config)
        return config

    @staticmethod
    def _assign(config: ChaptersConfig, chapters: Dict[str, List[str]]) -> None:
        for subject in SUBJECTS:
            names = [n.strip() for n in chapters.get(subject, []) if n and n.strip()]
            # JSON columns are replaced, never mutated in place
            setattr(config, subject, list(dict.fromkeys(names)))

    async def get_chapters(self) -> ChaptersConfig:
        """Current chapter lists, seeded from DEFAULT_CHAPTERS on first read."""
        config = await self._config()
        if config.id is None:
            await self.db.commit()
            await self.db.refresh(config)
        return config

    async def update_chapters(self, chapters: Dict[str, List[str]]) -> ChaptersConfig:
        config = await self._config()
        self._assign(config, chapters)

        await self.db.commit()
        await self.db.refresh(config)
        return config

    async def stage_chapter(self, subject: str, chapter_name: str) -> bool:
        """Append a chapter in the current transaction; the caller commits.
        Returns False when the chapter is already listed."""
        config = await self._config()
        current = list(getattr(config, subject) or [])
        if chapter_name in current:
            return False

        setattr(config, subject, current + [chapter_name])
        logger.info(f"Adding chapter {chapter_name!r} to {subject}")
        return True
