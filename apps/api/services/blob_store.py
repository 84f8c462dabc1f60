"""Filesystem blob store for uploaded video files."""

from __future__ import annotations

import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path

from fastapi import UploadFile

from config import settings
from services.errors import BlobIoError, UploadRejectedError

logger = logging.getLogger(__name__)

UPLOAD_CHUNK_BYTES = 1024 * 1024
ALLOWED_VIDEO_EXTENSIONS = {".mp4", ".mov", ".m4v", ".webm", ".avi", ".mkv"}
ALLOWED_VIDEO_MIME_PREFIXES = ("video/",)


@dataclass
class BlobDeleteResult:
    locator: str
    deleted: bool


class BlobStore:
    """Maps locators such as ``/uploads/video-<id>.mp4`` to files under ``root``."""

    def __init__(self, root: str | os.PathLike, url_prefix: str = "/uploads"):
        self.root = Path(root)
        self.url_prefix = "/" + url_prefix.strip("/")

    def locator_for(self, filename: str) -> str:
        return f"{self.url_prefix}/{filename}"

    def resolve(self, locator: str) -> Path:
        """Return the on-disk path for a locator, refusing anything outside the root."""
        name = str(locator or "").strip()
        if name.startswith(self.url_prefix + "/"):
            name = name[len(self.url_prefix) + 1:]
        name = name.lstrip("/")
        if not name:
            raise BlobIoError(locator, "Empty blob locator")

        root = self.root.resolve()
        path = (root / name).resolve()
        if path == root or root not in path.parents:
            raise BlobIoError(locator, f"Locator {locator!r} escapes the blob root")
        return path

    def exists(self, locator: str) -> bool:
        try:
            return self.resolve(locator).is_file()
        except BlobIoError:
            return False

    def delete_if_exists(self, locator: str) -> BlobDeleteResult:
        """Remove a blob. A blob that is already gone is not an error."""
        path = self.resolve(locator)
        try:
            path.unlink()
        except FileNotFoundError:
            return BlobDeleteResult(locator=locator, deleted=False)
        except OSError as exc:
            raise BlobIoError(locator, f"Could not delete {path}: {exc}") from exc
        logger.info("Deleted video file %s", path)
        return BlobDeleteResult(locator=locator, deleted=True)

    async def save_upload(self, file: UploadFile, max_bytes: int) -> str:
        """Stream an uploaded video to disk and return its locator."""
        client_name = os.path.basename(file.filename or "")
        suffix = Path(client_name).suffix.lower()
        content_type = (file.content_type or "").lower()
        if suffix not in ALLOWED_VIDEO_EXTENSIONS and not content_type.startswith(ALLOWED_VIDEO_MIME_PREFIXES):
            raise UploadRejectedError("Only video files are allowed!")

        self.root.mkdir(parents=True, exist_ok=True)
        filename = f"video-{uuid.uuid4().hex}{suffix or '.mp4'}"
        destination = self.root / filename

        total_size = 0
        try:
            with destination.open("wb") as out:
                while True:
                    chunk = await file.read(UPLOAD_CHUNK_BYTES)
                    if not chunk:
                        break
                    total_size += len(chunk)
                    if total_size > max_bytes:
                        raise UploadRejectedError(
                            f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB.",
                            status_code=413,
                        )
                    out.write(chunk)
        except Exception:
            destination.unlink(missing_ok=True)
            raise
        finally:
            await file.close()

        logger.info("Stored upload %s (%d bytes)", destination, total_size)
        return self.locator_for(filename)


def get_blob_store() -> BlobStore:
    """FastAPI dependency for the configured upload directory."""
    return BlobStore(settings.UPLOAD_DIR, settings.UPLOAD_URL_PREFIX)
