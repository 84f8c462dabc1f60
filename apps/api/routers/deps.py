"""Shared router dependencies for store-backed services."""

from fastapi import Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from services.blob_store import BlobStore, get_blob_store
from services.cascade import CascadeCoordinator
from services.errors import ServiceError


def get_cascade_coordinator(
    db: AsyncSession = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
) -> CascadeCoordinator:
    return CascadeCoordinator(db, blob_store)


def as_http_error(exc: ServiceError) -> HTTPException:
    """Translate a service-layer error into the HTTP error routers raise."""
    return HTTPException(status_code=exc.status_code, detail=exc.message)
