"""API dependencies: auth, db session."""
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.exceptions import AuthError
from vidtube.core.security import decode_access_token, parse_subject
from vidtube.db.session import get_db
from vidtube.models.user import User
from vidtube.services.auth_service import get_user_by_id

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"

security = HTTPBearer(auto_error=False)


def _extract_access_token(request: Request, credentials: HTTPAuthorizationCredentials | None) -> str | None:
    return request.cookies.get(ACCESS_COOKIE) or (credentials.credentials if credentials else None)


async def _resolve_user(db: AsyncSession, token: str) -> User:
    payload = decode_access_token(token)
    user_id = parse_subject(payload) if payload else None
    if user_id is None:
        raise AuthError("Invalid access token")
    user = await get_user_by_id(db, user_id)
    if user is None:
        raise AuthError("Invalid access token")
    return user


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    token = _extract_access_token(request, credentials)
    if not token:
        raise AuthError("Unauthorized request")
    return await _resolve_user(db, token)


async def get_current_user_optional(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    token = _extract_access_token(request, credentials)
    if not token:
        return None
    try:
        return await _resolve_user(db, token)
    except AuthError:
        return None
