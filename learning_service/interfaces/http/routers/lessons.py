from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ....domain.entities import STRING_CMP, User
from ....infrastructure.cache import delete_cache_pattern, get_cache, set_cache
from ....infrastructure.db import get_db
from ....infrastructure.metrics import cache_hits_total, cache_misses_total, lessons_completed_total
from ....infrastructure.models import Lesson, Module
from ....infrastructure.repositories import LessonRepository, ProgressRepository
from ..authz import get_current_user, require_admin
from ..schemas import AnswerShort, LessonCreate, LessonOut, LessonResp, LessonUpdate, TaskResp

router = APIRouter(prefix="/api/v1/lessons", tags=["lessons"])


def _lesson_resp(row: Lesson, done: bool) -> LessonResp:
    return LessonResp(id=row.id, module_id=row.module_id, title=row.title,
                      content=row.content, status=done, order_index=row.order_index)


@router.get("/{lesson_id}", response_model=LessonResp)
def get_lesson(lesson_id: UUID, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    repo = LessonRepository(db)
    row = repo.get(lesson_id)
    if not row: raise HTTPException(404, "lesson not found")
    return _lesson_resp(row, repo.is_done(user.id, row.id))


@router.post("/{lesson_id}/done")
def mark_done(lesson_id: UUID, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if not LessonRepository(db).get(lesson_id):
        raise HTTPException(404, "lesson not found")
    ProgressRepository(db).mark_done(user.id, lesson_id)
    lessons_completed_total.inc()
    return {"ok": True, "lesson_id": lesson_id}


@router.get("/{lesson_id}/tasks", response_model=list[TaskResp])
def lesson_tasks(lesson_id: UUID, _: User = Depends(get_current_user), db: Session = Depends(get_db)):
    # tasks are the same for every learner, so they are cached per lesson
    cache_key = f"lesson:{lesson_id}:tasks"
    cached = get_cache(cache_key)
    if cached is not None:
        cache_hits_total.inc()
        return cached

    cache_misses_total.inc()
    repo = LessonRepository(db)
    if not repo.get(lesson_id): raise HTTPException(404, "lesson not found")
    result = []
    for task in repo.tasks_with_answers(lesson_id):
        hide_text = task.task_type == STRING_CMP
        result.append(TaskResp(
            id=task.id,
            question=task.question,
            task_type=task.task_type,
            answers=[AnswerShort(id=a.id, answer_text=None if hide_text else a.answer_text)
                     for a in task.answers],
        ))
    set_cache(cache_key, [r.model_dump(mode="json") for r in result])
    return result


@router.get("/{lesson_id}/next", response_model=LessonResp)
def next_lesson(lesson_id: UUID, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    repo = LessonRepository(db)
    current = repo.get(lesson_id)
    if not current: raise HTTPException(404, "lesson not found")
    nxt = repo.next_uncompleted(user.id, current)
    if not nxt: raise HTTPException(404, "no uncompleted lesson left in this module")
    return _lesson_resp(nxt, False)

# --- Admin-only CRUD:

@router.post("/", response_model=LessonOut, status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
def create_lesson(payload: LessonCreate, db: Session = Depends(get_db)):
    if not db.get(Module, payload.module_id): raise HTTPException(404, "module not found")
    row = Lesson(module_id=payload.module_id, title=payload.title,
                 content=payload.content, order_index=payload.order_index)
    db.add(row); db.commit(); db.refresh(row)
    return row

@router.put("/{lesson_id}", response_model=LessonOut, dependencies=[Depends(require_admin)])
def update_lesson(lesson_id: UUID, payload: LessonUpdate, db: Session = Depends(get_db)):
    row = db.get(Lesson, lesson_id)
    if not row: raise HTTPException(404, "lesson not found")
    if payload.module_id is not None:
        if not db.get(Module, payload.module_id): raise HTTPException(404, "module not found")
        row.module_id = payload.module_id
    if payload.title is not None: row.title = payload.title
    if payload.content is not None: row.content = payload.content
    if payload.order_index is not None: row.order_index = payload.order_index
    db.commit(); db.refresh(row)
    return row

@router.delete("/{lesson_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(require_admin)])
def delete_lesson(lesson_id: UUID, db: Session = Depends(get_db)):
    row = db.get(Lesson, lesson_id)
    if not row: raise HTTPException(404, "lesson not found")
    db.delete(row); db.commit()
    delete_cache_pattern(f"lesson:{lesson_id}:*")
