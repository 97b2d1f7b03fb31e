from uuid import UUID

from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from ...domain.entities import User
from ...infrastructure.db import get_db
from ...infrastructure.repositories import UserRepository
from ...infrastructure.security import decode_token

AUTH_COOKIE = "SID"

bearer = HTTPBearer(auto_error=False)


def get_token(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    sid: str | None = Cookie(default=None, alias=AUTH_COOKIE),
) -> str | None:
    if creds is not None:
        return creds.credentials
    return sid


def get_optional_user(
    token: str | None = Depends(get_token),
    db: Session = Depends(get_db),
) -> User | None:
    if not token:
        return None
    try:
        user_id = UUID(decode_token(token))
    except (JWTError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return UserRepository(db).get_by_id(user_id)


def get_current_user(user: User | None = Depends(get_optional_user)) -> User:
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required.")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin required")
    return user


def check_owner(user: User, owner_id: UUID) -> None:
    # admins may touch any account
    if user.is_admin or user.id == owner_id:
        return
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Resource error, resource forbidden.")
