from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ....infrastructure.cache import delete_cache_pattern
from ....infrastructure.db import get_db
from ....infrastructure.models import Task, TaskAnswer
from ..authz import require_admin
from ..schemas import AnswerCreate, AnswerOut, AnswerUpdate

router = APIRouter(prefix="/api/v1/answers", tags=["answers"], dependencies=[Depends(require_admin)])


def _invalidate(db: Session, task_id: UUID) -> None:
    task = db.get(Task, task_id)
    if task:
        delete_cache_pattern(f"lesson:{task.lesson_id}:tasks")


@router.post("/", response_model=AnswerOut, status_code=status.HTTP_201_CREATED)
def create_answer(payload: AnswerCreate, db: Session = Depends(get_db)):
    if not db.get(Task, payload.task_id): raise HTTPException(404, "task not found")
    row = TaskAnswer(task_id=payload.task_id, answer_text=payload.answer_text,
                     image=payload.image, is_correct=payload.is_correct)
    db.add(row); db.commit(); db.refresh(row)
    _invalidate(db, row.task_id)
    return row

@router.get("/{answer_id}", response_model=AnswerOut)
def get_answer(answer_id: UUID, db: Session = Depends(get_db)):
    row = db.get(TaskAnswer, answer_id)
    if not row: raise HTTPException(404, "answer not found")
    return row

@router.put("/{answer_id}", response_model=AnswerOut)
def update_answer(answer_id: UUID, payload: AnswerUpdate, db: Session = Depends(get_db)):
    row = db.get(TaskAnswer, answer_id)
    if not row: raise HTTPException(404, "answer not found")
    if payload.answer_text is not None: row.answer_text = payload.answer_text
    if payload.image is not None: row.image = payload.image
    if payload.is_correct is not None: row.is_correct = payload.is_correct
    db.commit(); db.refresh(row)
    _invalidate(db, row.task_id)
    return row

@router.delete("/{answer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_answer(answer_id: UUID, db: Session = Depends(get_db)):
    row = db.get(TaskAnswer, answer_id)
    if not row: raise HTTPException(404, "answer not found")
    task_id = row.task_id
    db.delete(row); db.commit()
    _invalidate(db, task_id)
