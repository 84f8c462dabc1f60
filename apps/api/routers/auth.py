"""
Authentication router: registration, login and profile management.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, StringConstraints
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models.account import Account
from routers.auth_scope import AuthContext, get_auth_context
from routers.deps import as_http_error
from routers.rate_limit import rate_limit
from services.account_store import AccountStore
from services.crypto import hash_password, verify_password
from services.errors import InvalidCredentialsError, NotFoundError, ServiceError
from services.session_token import issue_session
from services.unit_of_work import UnitOfWork

router = APIRouter()
logger = logging.getLogger(__name__)


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    password: str = Field(min_length=6)


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UpdateProfileRequest(BaseModel):
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=2)]
    email: Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True, min_length=3)]


class AccountResponse(BaseModel):
    id: str
    name: str
    email: str
    created_at: Optional[str] = None


class SessionResponse(BaseModel):
    token: str
    expires_at: int
    user: AccountResponse


class ProfileResponse(BaseModel):
    message: str
    user: AccountResponse


def _serialize_account(account: Account) -> AccountResponse:
    return AccountResponse(
        id=account.id,
        name=account.name,
        email=account.email,
        created_at=account.created_at.isoformat() if account.created_at else None,
    )


def _session_for(account: Account) -> SessionResponse:
    session = issue_session(account.id)
    return SessionResponse(
        token=session.token,
        expires_at=session.expires_at,
        user=_serialize_account(account),
    )


@router.post("/register", response_model=SessionResponse)
async def register(
    request: RegisterRequest,
    _rate_limit: None = Depends(rate_limit("register", limit=20, window_seconds=3600)),
    db: AsyncSession = Depends(get_db),
):
    """Create an account and return a session token for it."""
    name = request.name.strip()
    email = request.email.strip().lower()
    if not name or not email:
        raise HTTPException(status_code=400, detail="Name, email, and password are required")

    try:
        async with UnitOfWork(db) as uow:
            account = await uow.accounts.insert(
                name=name,
                email=email,
                password_hash=hash_password(request.password),
            )
            await uow.commit()
    except ServiceError as exc:
        raise as_http_error(exc) from exc

    logger.info("Registered account %s", account.id)
    return _session_for(account)


@router.post("/login", response_model=SessionResponse)
async def login(
    request: LoginRequest,
    _rate_limit: None = Depends(rate_limit("login", limit=30, window_seconds=900)),
    db: AsyncSession = Depends(get_db),
):
    """Exchange email and password for a session token."""
    account = await AccountStore(db).get_by_email(request.email.strip().lower())

    if not account or not verify_password(request.password, account.password_hash):
        raise as_http_error(InvalidCredentialsError())
    return _session_for(account)


@router.get("/me", response_model=AccountResponse)
async def get_current_account(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Get the authenticated account's profile."""
    account = await AccountStore(db).get_by_id(auth.account_id)
    if not account:
        raise as_http_error(NotFoundError("User not found"))
    return _serialize_account(account)


@router.put("/profile", response_model=ProfileResponse)
async def update_profile(
    request: UpdateProfileRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Update the authenticated account's name and email."""
    try:
        async with UnitOfWork(db) as uow:
            account = await uow.accounts.update(
                auth.account_id,
                name=request.name,
                email=request.email,
            )
            if not account:
                raise NotFoundError("User not found")
            await uow.commit()
    except ServiceError as exc:
        raise as_http_error(exc) from exc

    return ProfileResponse(
        message="Profile updated successfully",
        user=_serialize_account(account),
    )
