from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.orm import Session

from ....application.use_cases.register_user import AuthenticateUser, RegisterUser
from ....config import settings
from ....domain.entities import User
from ....domain.errors import ConflictError, InvalidCredentials
from ....infrastructure.db import get_db
from ....infrastructure.ratelimit import limiter
from ....infrastructure.repositories import UserRepository
from ....infrastructure.security import PasswordHasher, create_access_token
from ..authz import AUTH_COOKIE, check_owner, get_current_user, get_optional_user, require_admin
from ..schemas import CredentialsReq, TokenResp, UserPage, UserResp, UserUpdateReq

router = APIRouter(prefix="/api/v1/account", tags=["account"])
logger = structlog.get_logger()


def _set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        AUTH_COOKIE,
        token,
        httponly=True,
        samesite="lax",
        path="/",
        max_age=settings.JWT_TTL_MINUTES * 60,
    )


@router.post("/signup", response_model=UserResp, status_code=status.HTTP_201_CREATED)
@limiter.limit(f"{settings.RATE_LIMIT_PER_MINUTE}/minute")
def signup(request: Request, response: Response, payload: CredentialsReq,
           db: Session = Depends(get_db)):
    uc = RegisterUser(repo=UserRepository(db), hasher=PasswordHasher())
    try:
        user = uc.execute(payload.username, payload.password)
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    _set_auth_cookie(response, create_access_token(sub=str(user.id)))
    logger.info("user_registered", user_id=str(user.id))
    return UserResp(id=user.id, username=user.username, role=user.role)


@router.post("/signin", response_model=TokenResp)
@limiter.limit("10/minute")  # tighter than signup, brute force guard
def signin(request: Request, response: Response, payload: CredentialsReq,
           db: Session = Depends(get_db)):
    uc = AuthenticateUser(repo=UserRepository(db), hasher=PasswordHasher())
    try:
        user = uc.execute(payload.username, payload.password)
    except InvalidCredentials:
        raise HTTPException(
            status_code=401,
            detail="Authentication error, user not found or password is invalid.",
        )
    token = create_access_token(sub=str(user.id))
    _set_auth_cookie(response, token)
    return TokenResp(access_token=token,
                     user=UserResp(id=user.id, username=user.username, role=user.role))


@router.post("/signout", status_code=status.HTTP_204_NO_CONTENT)
def signout(response: Response):
    response.delete_cookie(AUTH_COOKIE, path="/")


@router.get("/verify")
def verify(user: User | None = Depends(get_optional_user)):
    if user is None:
        raise HTTPException(status_code=401, detail="Authentication required.")
    return {"ok": True}


@router.get("/me", response_model=UserResp)
def me(user: User = Depends(get_current_user)):
    return UserResp(id=user.id, username=user.username, role=user.role)


@router.get("/page", response_model=UserPage)
def list_users(_: User = Depends(require_admin),
               db: Session = Depends(get_db),
               limit: int = Query(20, ge=1, le=100),
               offset: int = Query(0, ge=0)):
    repo = UserRepository(db)
    items = [UserResp(id=u.id, username=u.username, role=u.role) for u in repo.page(limit, offset)]
    return UserPage(items=items, total=repo.count(), limit=limit, offset=offset)


@router.put("/{user_id}", response_model=UserResp)
def update_user(user_id: UUID, payload: UserUpdateReq,
                user: User = Depends(get_current_user),
                db: Session = Depends(get_db)):
    repo = UserRepository(db)
    found = repo.get_by_id(user_id)
    if not found: raise HTTPException(404, "user not found")
    check_owner(user, found.id)

    username = payload.username.strip()
    conflict = repo.get_by_username(username)
    if conflict and conflict.id != found.id:
        raise HTTPException(409, "Registration error, user already exists.")

    pwd_hash = PasswordHasher().hash(payload.password) if payload.password else None
    updated = repo.update(found.id, username, pwd_hash)
    return UserResp(id=updated.id, username=updated.username, role=updated.role)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: UUID,
                user: User = Depends(get_current_user),
                db: Session = Depends(get_db)):
    repo = UserRepository(db)
    found = repo.get_by_id(user_id)
    if not found: raise HTTPException(404, "user not found")
    check_owner(user, found.id)
    repo.delete(found.id)
    logger.info("user_deleted", user_id=str(user_id), by=str(user.id))
