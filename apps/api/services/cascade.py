"""
Deletion cascades spanning the relational store and the blob store.

The filesystem has no transactions, so blob deletion is a best-effort side
effect performed before the relational commit point. If the commit later
fails, rows are rolled back but removed blobs stay removed; callers see a
``TransactionFailedError`` and the surviving rows may reference missing
files. That asymmetry is accepted and reported, not masked.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from models.video import Video
from services.blob_store import BlobStore
from services.errors import (
    BlobIoError,
    ForbiddenError,
    NotFoundError,
    ServiceError,
    TransactionFailedError,
)
from services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class AccountDeletionState(str, Enum):
    STARTED = "started"
    VIDEOS_FETCHED = "videos_fetched"
    BLOBS_PROCESSED = "blobs_processed"
    VIDEO_ROWS_DELETED = "video_rows_deleted"
    ACCOUNT_ROW_DELETED = "account_row_deleted"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass
class VideoDeletionResult:
    video_id: str
    file_deleted: bool
    deleted: bool = True


@dataclass
class AccountDeletionResult:
    account_id: str
    videos_deleted: int
    files_deleted: int
    state: AccountDeletionState = AccountDeletionState.COMMITTED


class CascadeCoordinator:
    """Runs video and account deletions as single units of work."""

    def __init__(self, db: AsyncSession, blob_store: BlobStore):
        self.db = db
        self.blob_store = blob_store

    async def _delete_blob(self, video: Video) -> bool:
        """Delete a file-kind video's blob; True only if a file was actually removed."""
        if not video.is_file or not video.locator:
            return False
        try:
            result = await asyncio.to_thread(self.blob_store.delete_if_exists, video.locator)
        except BlobIoError as exc:
            logger.error("Error deleting file for video %s (%s): %s", video.id, exc.locator, exc)
            return False
        if not result.deleted:
            logger.warning("Video file for %s already missing: %s", video.id, video.locator)
        return result.deleted

    async def delete_video(self, actor_id: str, video_id: str) -> VideoDeletionResult:
        try:
            async with UnitOfWork(self.db) as uow:
                video = await uow.videos.get_by_id(video_id)
                if not video:
                    raise NotFoundError("Video not found")
                if video.owner_id != actor_id:
                    raise ForbiddenError("Access denied")

                file_deleted = await self._delete_blob(video)

                if await uow.videos.delete_by_id(video_id) == 0:
                    raise NotFoundError("Video not found")
                await uow.commit()
        except SQLAlchemyError as exc:
            logger.exception("Error deleting video %s from database", video_id)
            raise TransactionFailedError("Failed to delete video from database") from exc

        logger.info("Deleted video %s for account %s", video_id, actor_id)
        return VideoDeletionResult(video_id=video_id, file_deleted=file_deleted)

    async def delete_account(self, actor_id: str) -> AccountDeletionResult:
        state = AccountDeletionState.STARTED
        logger.info("Starting account deletion for account %s", actor_id)

        def advance(next_state: AccountDeletionState) -> AccountDeletionState:
            logger.debug("Account %s deletion: %s -> %s", actor_id, state.value, next_state.value)
            return next_state

        try:
            async with UnitOfWork(self.db) as uow:
                videos = await uow.videos.fetch_by_owner(actor_id)
                state = advance(AccountDeletionState.VIDEOS_FETCHED)
                logger.info("Found %d videos to delete for account %s", len(videos), actor_id)

                files_deleted = 0
                for video in videos:
                    if await self._delete_blob(video):
                        files_deleted += 1
                state = advance(AccountDeletionState.BLOBS_PROCESSED)
                logger.info("Deleted %d video files for account %s", files_deleted, actor_id)

                videos_deleted = await uow.videos.delete_by_owner(actor_id)
                state = advance(AccountDeletionState.VIDEO_ROWS_DELETED)

                if await uow.accounts.delete_by_id(actor_id) == 0:
                    raise NotFoundError("User not found")
                state = advance(AccountDeletionState.ACCOUNT_ROW_DELETED)

                await uow.commit()
                state = advance(AccountDeletionState.COMMITTED)
        except SQLAlchemyError as exc:
            advance(AccountDeletionState.ROLLED_BACK)
            logger.exception("Account %s deletion rolled back after %s", actor_id, state.value)
            raise TransactionFailedError("Failed to delete account", stage=state.value) from exc
        except ServiceError as exc:
            advance(AccountDeletionState.ROLLED_BACK)
            logger.warning("Account %s deletion rolled back after %s: %s", actor_id, state.value, exc)
            if exc.stage is None:
                exc.stage = state.value
            raise

        logger.info(
            "Deleted account %s: videos=%d files=%d",
            actor_id,
            videos_deleted,
            files_deleted,
        )
        return AccountDeletionResult(
            account_id=actor_id,
            videos_deleted=videos_deleted,
            files_deleted=files_deleted,
            state=state,
        )
