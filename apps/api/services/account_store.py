"""Relational store for accounts."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.account import Account
from services.errors import EmailAlreadyExistsError


class AccountStore:
    """Row-level operations on ``accounts``; the caller owns the transaction."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert(self, *, name: str, email: str, password_hash: str) -> Account:
        account = Account(name=name, email=email, password_hash=password_hash)
        self.db.add(account)
        try:
            await self.db.flush()
        except IntegrityError as exc:
            raise EmailAlreadyExistsError() from exc
        await self.db.refresh(account)
        return account

    async def get_by_email(self, email: str) -> Optional[Account]:
        result = await self.db.execute(select(Account).where(Account.email == email))
        return result.scalar_one_or_none()

    async def get_by_id(self, account_id: str) -> Optional[Account]:
        result = await self.db.execute(select(Account).where(Account.id == account_id))
        return result.scalar_one_or_none()

    async def update(self, account_id: str, *, name: str, email: str) -> Optional[Account]:
        account = await self.get_by_id(account_id)
        if not account:
            return None
        account.name = name
        account.email = email
        try:
            await self.db.flush()
        except IntegrityError as exc:
            raise EmailAlreadyExistsError() from exc
        await self.db.refresh(account)
        return account

    async def delete_by_id(self, account_id: str) -> int:
        result = await self.db.execute(delete(Account).where(Account.id == account_id))
        return int(result.rowcount or 0)
