"""
Account router: cascading deletion of the authenticated account.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from routers.auth_scope import AuthContext, get_auth_context
from routers.deps import as_http_error, get_cascade_coordinator
from services.cascade import CascadeCoordinator
from services.errors import ServiceError

router = APIRouter()


class AccountDeletionDetails(BaseModel):
    videosDeleted: int
    filesDeleted: int


class DeleteAccountResponse(BaseModel):
    message: str
    details: AccountDeletionDetails


@router.delete("", response_model=DeleteAccountResponse)
async def delete_account(
    auth: AuthContext = Depends(get_auth_context),
    coordinator: CascadeCoordinator = Depends(get_cascade_coordinator),
):
    """
    Delete the account, its video rows and its uploaded files.

    ``filesDeleted`` can be lower than ``videosDeleted``: linked videos have
    no file, and missing files are skipped rather than reported as errors.
    """
    try:
        result = await coordinator.delete_account(auth.account_id)
    except ServiceError as exc:
        raise as_http_error(exc) from exc

    return DeleteAccountResponse(
        message="Account and all associated data deleted successfully",
        details=AccountDeletionDetails(
            videosDeleted=result.videos_deleted,
            filesDeleted=result.files_deleted,
        ),
    )
