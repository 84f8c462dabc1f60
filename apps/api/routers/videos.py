"""
Video router: upload or link videos, list them and delete owned ones.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from models.video import VIDEO_KIND_FILE, VIDEO_KIND_LINK, Video
from routers.auth_scope import AuthContext, get_auth_context
from routers.deps import as_http_error, get_cascade_coordinator
from routers.rate_limit import rate_limit
from services.blob_store import BlobStore, get_blob_store
from services.cascade import CascadeCoordinator
from services.errors import BlobIoError, NotFoundError, ServiceError
from services.unit_of_work import UnitOfWork
from services.video_store import VideoStore

router = APIRouter()
logger = logging.getLogger(__name__)


class VideoResponse(BaseModel):
    id: str
    title: str
    description: str
    video_url: str
    video_type: str
    user_id: str
    user_name: Optional[str] = None
    created_at: Optional[str] = None


class UploadVideoResponse(BaseModel):
    message: str
    video: VideoResponse


class DeleteVideoResponse(BaseModel):
    message: str


def _serialize_video(video: Video, owner_name: Optional[str] = None) -> VideoResponse:
    return VideoResponse(
        id=video.id,
        title=video.title,
        description=video.description or "",
        video_url=video.locator,
        video_type=video.kind,
        user_id=video.owner_id,
        user_name=owner_name,
        created_at=video.created_at.isoformat() if video.created_at else None,
    )


def _discard_blob(blob_store: BlobStore, locator: str) -> None:
    try:
        blob_store.delete_if_exists(locator)
    except BlobIoError as exc:
        logger.warning("Could not cleanup orphaned upload %s: %s", locator, exc)


@router.post("", response_model=UploadVideoResponse)
async def upload_video(
    title: str = Form(""),
    description: str = Form(""),
    video_url: Optional[str] = Form(None),
    video: Optional[UploadFile] = File(None),
    _rate_limit: None = Depends(rate_limit("video_upload", limit=60, window_seconds=3600)),
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    """Store an uploaded video file, or record a link to an external video."""
    title = title.strip()
    if not title:
        raise HTTPException(status_code=400, detail="Title is required")

    # Browsers submit an empty file input as a part with no filename.
    upload = video if video is not None and video.filename else None
    link = (video_url or "").strip()
    if upload is None and not link:
        raise HTTPException(status_code=400, detail="Video URL or file is required")

    if upload is not None:
        try:
            locator = await blob_store.save_upload(upload, settings.MAX_VIDEO_UPLOAD_BYTES)
        except ServiceError as exc:
            raise as_http_error(exc) from exc
        kind = VIDEO_KIND_FILE
    else:
        if not link.startswith("http://") and not link.startswith("https://"):
            raise HTTPException(status_code=400, detail="video_url must be an absolute http(s) URL")
        locator = link
        kind = VIDEO_KIND_LINK

    try:
        async with UnitOfWork(db) as uow:
            if not await uow.accounts.get_by_id(auth.account_id):
                raise NotFoundError("User not found")
            record = await uow.videos.insert(
                title=title,
                description=description or "",
                locator=locator,
                kind=kind,
                owner_id=auth.account_id,
            )
            await uow.commit()
    except (ServiceError, SQLAlchemyError) as exc:
        if kind == VIDEO_KIND_FILE:
            _discard_blob(blob_store, locator)
        if isinstance(exc, ServiceError):
            raise as_http_error(exc) from exc
        logger.exception("Failed to record video for account %s", auth.account_id)
        raise HTTPException(status_code=500, detail="Failed to upload video to database") from exc

    return UploadVideoResponse(message="Video uploaded successfully", video=_serialize_video(record))


@router.get("", response_model=List[VideoResponse])
async def list_videos(db: AsyncSession = Depends(get_db)):
    """List every video with its owner's name, newest first."""
    rows = await VideoStore(db).list_all_with_owner_name()
    return [_serialize_video(video, owner_name) for video, owner_name in rows]


@router.get("/my-videos", response_model=List[VideoResponse])
async def list_my_videos(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """List the authenticated account's videos, newest first."""
    videos = await VideoStore(db).fetch_by_owner(auth.account_id)
    return [_serialize_video(video) for video in videos]


@router.get("/{video_id}", response_model=VideoResponse)
async def get_video(video_id: str, db: AsyncSession = Depends(get_db)):
    """Get one video with its owner's name."""
    row = await VideoStore(db).get_with_owner_name(video_id)
    if not row:
        raise as_http_error(NotFoundError("Video not found"))
    video, owner_name = row
    return _serialize_video(video, owner_name)


@router.delete("/{video_id}", response_model=DeleteVideoResponse)
async def delete_video(
    video_id: str,
    auth: AuthContext = Depends(get_auth_context),
    coordinator: CascadeCoordinator = Depends(get_cascade_coordinator),
):
    """Delete an owned video and, for uploads, its stored file."""
    try:
        await coordinator.delete_video(auth.account_id, video_id)
    except ServiceError as exc:
        raise as_http_error(exc) from exc
    return DeleteVideoResponse(message="Video deleted successfully")
