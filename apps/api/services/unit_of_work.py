"""Scoped relational unit of work shared by the account and video stores."""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from services.account_store import AccountStore
from services.errors import TransactionFailedError
from services.video_store import VideoStore

logger = logging.getLogger(__name__)


class UnitOfWork:
    """
    Wrap one session in a transaction that either commits explicitly or rolls back.

    Usage::

        async with UnitOfWork(db) as uow:
            await uow.videos.delete_by_owner(owner_id)
            await uow.commit()

    Leaving the block without ``commit()`` (early return or exception) rolls
    back every relational change made through ``uow.videos``/``uow.accounts``.
    Filesystem side effects are outside its reach.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.videos = VideoStore(db)
        self.accounts = AccountStore(db)
        self._committed = False

    async def __aenter__(self) -> "UnitOfWork":
        if not self.db.in_transaction():
            await self.db.begin()
        self._committed = False
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if not self._committed:
            await self.rollback()
        return False

    async def commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as exc:
            logger.exception("Commit failed, rolling back unit of work")
            await self.rollback()
            raise TransactionFailedError("Failed to commit transaction") from exc
        self._committed = True

    async def rollback(self) -> None:
        if not self.db.in_transaction():
            return
        try:
            await self.db.rollback()
        except SQLAlchemyError as exc:
            raise TransactionFailedError("Failed to roll back transaction") from exc
