"""
Presence store and typing indicator.

Clients send a heartbeat every PRESENCE_HEARTBEAT_INTERVAL_SECONDS and an
offline signal on page unload. Nothing sweeps stale rows: a user counts as
live only while ``is_online`` is set and the last heartbeat is younger than
PRESENCE_OFFLINE_TIMEOUT_SECONDS, evaluated whenever presence is read.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from typing import List, Optional, Set

from ..models.user import User, UserPresence, TypingStatus
from ..exceptions import ValidationError
from ..config import settings
from ..utils.timeutils import utcnow, as_utc


CONVERSATION_CHAT = "conversation"


def offline_timeout() -> timedelta:
    return timedelta(seconds=settings.PRESENCE_OFFLINE_TIMEOUT_SECONDS)


@dataclass(frozen=True)
class PresenceLease:
    """Liveness of ``holder`` until ``expires_at``."""
    holder: int
    expires_at: datetime

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        return (now or utcnow()) < self.expires_at


def lease_for(record: UserPresence) -> Optional[PresenceLease]:
    """Lease granted by the last heartbeat; None when the user signed off."""
    if not record.is_online:
        return None
    return PresenceLease(holder=record.user_id, expires_at=as_utc(record.last_seen) + offline_timeout())


def is_live(record: Optional[UserPresence], now: Optional[datetime] = None) -> bool:
    """is_online and now - last_seen < timeout. No record means never seen."""
    if record is None:
        return False
    lease = lease_for(record)
    return lease is not None and lease.is_valid(as_utc(now) if now else None)


def presence_view(record: UserPresence, now: Optional[datetime] = None) -> dict:
    """Serializable presence row with the liveness computed server-side."""
    last_seen = as_utc(record.last_seen)
    return {
        "user_id": record.user_id,
        "is_online": record.is_online,
        "last_seen": last_seen,
        "is_live": is_live(record, now),
        "lease_expires_at": last_seen + offline_timeout(),
    }


class PresenceService:
    """Upsert and read the per-user presence rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: int) -> Optional[UserPresence]:
        result = await self.db.execute(
            select(UserPresence).filter(UserPresence.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def set_online(self, user_id: int, is_online: bool) -> UserPresence:
        """Insert or overwrite the flag; last_seen always moves to now. Last writer wins."""
        record = await self.get(user_id)
        if record is None:
            self.db.add(UserPresence(user_id=user_id, is_online=is_online, last_seen=utcnow()))
            try:
                await self.db.commit()
                return await self.get(user_id)
            except IntegrityError:
                # Concurrent first heartbeat inserted the row; overwrite it below
                await self.db.rollback()
                record = await self.get(user_id)

        record.is_online = is_online
        record.last_seen = utcnow()

        await self.db.commit()
        await self.db.refresh(record)
        return record

    async def list_online(self) -> List[UserPresence]:
        """Rows flagged online, stale or not."""
        result = await self.db.execute(
            select(UserPresence).filter(UserPresence.is_online == True)  # noqa: E712
        )
        return list(result.scalars().all())

    async def live_user_ids(self, now: Optional[datetime] = None) -> Set[int]:
        now = now or utcnow()
        return {r.user_id for r in await self.list_online() if is_live(r, now)}


class TypingService:
    """Short-lived "is typing" signals for the public chat and conversations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get(self, user_id: int) -> Optional[TypingStatus]:
        result = await self.db.execute(
            select(TypingStatus).filter(TypingStatus.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def set_typing(
        self,
        user_id: int,
        chat_type: str,
        conversation_id: Optional[int] = None,
        is_typing: bool = True
    ) -> Optional[TypingStatus]:
        if not is_typing:
            await self.db.execute(delete(TypingStatus).where(TypingStatus.user_id == user_id))
            await self.db.commit()
            return None

        fields = {"chat_type": chat_type, "conversation_id": conversation_id, "last_typing": utcnow()}
        status = await self._get(user_id)
        if status is None:
            self.db.add(TypingStatus(user_id=user_id, **fields))
            try:
                await self.db.commit()
                return await self._get(user_id)
            except IntegrityError:
                await self.db.rollback()
                status = await self._get(user_id)

        for name, value in fields.items():
            setattr(status, name, value)

        await self.db.commit()
        await self.db.refresh(status)
        return status

    async def list_typing(
        self,
        chat_type: str,
        conversation_id: Optional[int] = None,
        exclude_user_id: Optional[int] = None,
        now: Optional[datetime] = None
    ) -> List[dict]:
        """Users typing within TYPING_TIMEOUT_SECONDS in one chat."""
        if chat_type == CONVERSATION_CHAT and conversation_id is None:
            raise ValidationError("conversation_id is required for conversation typing")
        if chat_type != CONVERSATION_CHAT:
            conversation_id = None

        now = as_utc(now) if now else utcnow()
        cutoff = now - timedelta(seconds=settings.TYPING_TIMEOUT_SECONDS)

        query = (
            select(TypingStatus, User)
            .join(User, User.id == TypingStatus.user_id)
            .filter(TypingStatus.chat_type == chat_type)
        )
        if conversation_id is not None:
            query = query.filter(TypingStatus.conversation_id == conversation_id)
        if exclude_user_id is not None:
            query = query.filter(TypingStatus.user_id != exclude_user_id)

        result = await self.db.execute(query)
        return [
            {
                "user_id": status.user_id,
                "display_name": user.display_name,
                "last_typing": as_utc(status.last_typing),
            }
            for status, user in result.all()
            if as_utc(status.last_typing) > cutoff
        ]
