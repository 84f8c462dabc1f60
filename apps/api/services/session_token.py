"""Signed session tokens identifying the calling account.

A token carries only the account id (``sub``) and a ``kind`` marker; the
account row stays the source of truth for everything else.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt

from config import settings
from services.errors import InvalidSessionError

SESSION_KIND = "videoshare_session"


@dataclass(frozen=True)
class SessionToken:
    token: str
    expires_at: int


def issue_session(account_id: str, ttl_hours: Optional[int] = None) -> SessionToken:
    issued = datetime.now(timezone.utc)
    expires = issued + timedelta(hours=max(ttl_hours or settings.JWT_EXPIRATION_HOURS, 1))
    claims = {
        "sub": account_id,
        "kind": SESSION_KIND,
        "iat": int(issued.timestamp()),
        "exp": int(expires.timestamp()),
    }
    return SessionToken(
        token=jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM),
        expires_at=claims["exp"],
    )


def account_id_from_token(token: str) -> str:
    """Return the account id a session token was issued for.

    Raises ``InvalidSessionError`` for expired, tampered or foreign tokens.
    """
    try:
        claims = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError as exc:
        raise InvalidSessionError("Session expired") from exc
    except JWTError as exc:
        raise InvalidSessionError() from exc

    account_id = claims.get("sub")
    if claims.get("kind") != SESSION_KIND or not account_id:
        raise InvalidSessionError()
    return str(account_id)
