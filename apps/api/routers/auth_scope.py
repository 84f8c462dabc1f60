"""Bearer-token dependency that scopes a request to one account."""

from dataclasses import dataclass

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from routers.deps import as_http_error
from services.errors import InvalidSessionError
from services.session_token import account_id_from_token

bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    account_id: str


async def get_auth_context(
    credentials: HTTPAuthorizationCredentials = Depends(bearer),
) -> AuthContext:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Access token required")
    try:
        return AuthContext(account_id=account_id_from_token(credentials.credentials))
    except InvalidSessionError as exc:
        raise as_http_error(exc) from exc
