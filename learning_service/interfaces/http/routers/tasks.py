from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ....application.use_cases.check_answer import CheckAnswer
from ....domain.entities import User
from ....domain.errors import NotFoundError
from ....infrastructure.cache import delete_cache_pattern
from ....infrastructure.db import get_db
from ....infrastructure.metrics import task_checks_total
from ....infrastructure.models import Lesson, Task
from ....infrastructure.repositories import AnswerRepository, AttemptRepository
from ....infrastructure.uploads import image_url
from ..authz import get_current_user, require_admin
from ..schemas import AttemptOut, TaskCheckReq, TaskCheckResp, TaskCreate, TaskOut, TaskUpdate

router = APIRouter(prefix="/api/v1/tasks", tags=["tasks"])
logger = structlog.get_logger()


@router.post("/check", response_model=TaskCheckResp)
def check_answer(payload: TaskCheckReq,
                 user: User = Depends(get_current_user),
                 db: Session = Depends(get_db)):
    uc = CheckAnswer(answers=AnswerRepository(db), attempts=AttemptRepository(db), image_url=image_url)
    try:
        result = uc.execute(user.id, payload.answer_id, payload.task_type, payload.user_answer)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    task_checks_total.labels(task_type=result.task_type, correct=str(result.is_correct).lower()).inc()
    logger.debug("task_checked", user_id=str(user.id), answer_id=str(payload.answer_id),
                 is_correct=result.is_correct)
    return TaskCheckResp(is_correct=result.is_correct, explanation=result.explanation, image=result.image)


@router.get("/attempts", response_model=list[AttemptOut])
def my_attempts(user: User = Depends(get_current_user),
                db: Session = Depends(get_db),
                limit: int = Query(50, ge=1, le=200),
                offset: int = Query(0, ge=0)):
    return AttemptRepository(db).list_for_user(user.id, limit, offset)

# --- Admin-only CRUD:

@router.post("/", response_model=TaskOut, status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
def create_task(payload: TaskCreate, db: Session = Depends(get_db)):
    if not db.get(Lesson, payload.lesson_id): raise HTTPException(404, "lesson not found")
    row = Task(lesson_id=payload.lesson_id, task_type=payload.task_type,
               question=payload.question, explanation=payload.explanation)
    db.add(row); db.commit(); db.refresh(row)
    delete_cache_pattern(f"lesson:{payload.lesson_id}:tasks")
    return row

@router.get("/{task_id}", response_model=TaskOut, dependencies=[Depends(require_admin)])
def get_task(task_id: UUID, db: Session = Depends(get_db)):
    row = db.get(Task, task_id)
    if not row: raise HTTPException(404, "task not found")
    return row

@router.put("/{task_id}", response_model=TaskOut, dependencies=[Depends(require_admin)])
def update_task(task_id: UUID, payload: TaskUpdate, db: Session = Depends(get_db)):
    row = db.get(Task, task_id)
    if not row: raise HTTPException(404, "task not found")
    old_lesson_id = row.lesson_id
    if payload.lesson_id is not None:
        if not db.get(Lesson, payload.lesson_id): raise HTTPException(404, "lesson not found")
        row.lesson_id = payload.lesson_id
    if payload.task_type is not None: row.task_type = payload.task_type
    if payload.question is not None: row.question = payload.question
    if payload.explanation is not None: row.explanation = payload.explanation
    db.commit(); db.refresh(row)
    delete_cache_pattern(f"lesson:{old_lesson_id}:tasks")
    delete_cache_pattern(f"lesson:{row.lesson_id}:tasks")
    return row

@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(require_admin)])
def delete_task(task_id: UUID, db: Session = Depends(get_db)):
    row = db.get(Task, task_id)
    if not row: raise HTTPException(404, "task not found")
    lesson_id = row.lesson_id
    db.delete(row); db.commit()
    delete_cache_pattern(f"lesson:{lesson_id}:tasks")
