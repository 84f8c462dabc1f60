"""Relational store for video records."""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.account import Account
from models.video import Video


class VideoStore:
    """Row-level operations on ``videos``; the caller owns the transaction."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert(
        self,
        *,
        title: str,
        description: str,
        locator: str,
        kind: str,
        owner_id: str,
    ) -> Video:
        video = Video(
            title=title,
            description=description,
            locator=locator,
            kind=kind,
            owner_id=owner_id,
        )
        self.db.add(video)
        await self.db.flush()
        await self.db.refresh(video)
        return video

    async def get_by_id(self, video_id: str) -> Optional[Video]:
        result = await self.db.execute(select(Video).where(Video.id == video_id))
        return result.scalar_one_or_none()

    async def get_with_owner_name(self, video_id: str) -> Optional[Tuple[Video, str]]:
        result = await self.db.execute(
            select(Video, Account.name)
            .join(Account, Video.owner_id == Account.id)
            .where(Video.id == video_id)
        )
        row = result.first()
        return (row[0], row[1]) if row else None

    async def fetch_by_owner(self, owner_id: str) -> List[Video]:
        result = await self.db.execute(
            select(Video)
            .where(Video.owner_id == owner_id)
            .order_by(Video.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_all_with_owner_name(self) -> List[Tuple[Video, str]]:
        result = await self.db.execute(
            select(Video, Account.name)
            .join(Account, Video.owner_id == Account.id)
            .order_by(Video.created_at.desc())
        )
        return [(video, owner_name) for video, owner_name in result.all()]

    async def delete_by_id(self, video_id: str) -> int:
        result = await self.db.execute(delete(Video).where(Video.id == video_id))
        return int(result.rowcount or 0)

    async def delete_by_owner(self, owner_id: str) -> int:
        result = await self.db.execute(delete(Video).where(Video.owner_id == owner_id))
        return int(result.rowcount or 0)
