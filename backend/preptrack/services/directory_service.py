"""
Read-only views joining users, practice sheets and presence.
Nothing here is cached; every call reads current state.
"""

from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc, func
from sqlalchemy.orm import selectinload
from typing import Dict, List, Optional

from ..models.user import User, UserPresence
from ..models.sheet import PracticeSheet
from ..exceptions import NotFoundError
from ..utils.timeutils import utcnow, as_utc
from .presence_service import PresenceService, is_live


class DirectoryService:
    """User directory, activity feed and profiles."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _sheet_counts(self) -> Dict[int, int]:
        result = await self.db.execute(
            select(PracticeSheet.user_id, func.count(PracticeSheet.id))
            .group_by(PracticeSheet.user_id)
        )
        return {user_id: count for user_id, count in result.all()}

    async def _users_with_presence(self) -> List[User]:
        result = await self.db.execute(
            select(User)
            .options(selectinload(User.presence))
            .order_by(User.first_name, User.id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def list_users(self, now: Optional[datetime] = None) -> List[dict]:
        """Every user with sheet count and server-evaluated liveness."""
        now = now or utcnow()
        counts = await self._sheet_counts()
        return [
            {
                "id": user.id,
                "username": user.username,
                "first_name": user.first_name,
                "last_name": user.last_name,
                "display_name": user.display_name,
                "created_at": user.created_at,
                "sheet_count": counts.get(user.id, 0),
                "is_online": is_live(user.presence, now),
            }
            for user in await self._users_with_presence()
        ]

    async def activity_feed(self, limit: Optional[int] = None, now: Optional[datetime] = None) -> List[dict]:
        """Sheets of all users, newest first; no limit returns everything."""
        query = (
            select(PracticeSheet)
            .options(selectinload(PracticeSheet.user))
            .order_by(desc(PracticeSheet.created_at), desc(PracticeSheet.id))
        )
        if limit is not None:
            query = query.limit(limit)

        result = await self.db.execute(query)
        sheets = result.scalars().all()
        live = await PresenceService(self.db).live_user_ids(now)

        return [
            {
                "id": sheet.id,
                "user_id": sheet.user_id,
                "name": sheet.name,
                "physics": sheet.physics,
                "chemistry": sheet.chemistry,
                "biology": sheet.biology,
                "created_at": sheet.created_at,
                "user": sheet.user,
                "is_online": sheet.user_id in live,
            }
            for sheet in sheets
        ]

    async def user_profile(self, user_id: int) -> dict:
        result = await self.db.execute(select(User).filter(User.id == user_id))
        user = result.scalar_one_or_none()
        if not user:
            raise NotFoundError("User", user_id)

        result = await self.db.execute(
            select(PracticeSheet)
            .filter(PracticeSheet.user_id == user_id)
            .order_by(desc(PracticeSheet.created_at), desc(PracticeSheet.id))
        )
        return {"user": user, "sheets": list(result.scalars().all())}

    async def moderator_overview(self, now: Optional[datetime] = None) -> List[dict]:
        """Directory rows plus account details; no credential material."""
        now = now or utcnow()
        counts = await self._sheet_counts()
        rows = []
        for user in await self._users_with_presence():
            presence: Optional[UserPresence] = user.presence
            rows.append({
                "id": user.id,
                "username": user.username,
                "first_name": user.first_name,
                "last_name": user.last_name,
                "display_name": user.display_name,
                "email": user.email,
                "is_admin": user.is_admin,
                "created_at": user.created_at,
                "updated_at": user.updated_at,
                "sheet_count": counts.get(user.id, 0),
                "is_online": is_live(presence, now),
                "last_seen": as_utc(presence.last_seen) if presence else None,
            })
        return rows
