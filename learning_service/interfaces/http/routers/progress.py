from datetime import timedelta

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ....application.use_cases.share_progress import IssueProgressToken, ReadSharedProgress
from ....config import settings
from ....domain.entities import User
from ....domain.errors import NotFoundError, TokenExpired
from ....infrastructure.db import get_db
from ....infrastructure.metrics import progress_tokens_issued_total
from ....infrastructure.repositories import ProgressRepository, ProgressTokenRepository
from ....infrastructure.security import generate_progress_token
from ..authz import get_current_user
from ..schemas import ProgressSummaryResp, ProgressTokenResp

router = APIRouter(prefix="/api/v1/progress", tags=["progress"])
logger = structlog.get_logger()


@router.post("/share", response_model=ProgressTokenResp)
def share_progress(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    uc = IssueProgressToken(
        tokens=ProgressTokenRepository(db),
        generate=generate_progress_token,
        ttl=timedelta(minutes=settings.PROGRESS_TOKEN_TTL_MINUTES),
    )
    grant = uc.execute(user.id)
    progress_tokens_issued_total.inc()
    return grant


@router.get("/{token}", response_model=ProgressSummaryResp)
def shared_progress(token: str, db: Session = Depends(get_db)):
    uc = ReadSharedProgress(tokens=ProgressTokenRepository(db), progress=ProgressRepository(db))
    try:
        return uc.execute(token)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except TokenExpired as e:
        logger.debug("progress_token_expired")
        raise HTTPException(status_code=400, detail=str(e))
