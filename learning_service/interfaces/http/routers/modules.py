from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ....domain.entities import User
from ....infrastructure.cache import delete_cache_pattern
from ....infrastructure.db import get_db
from ....infrastructure.models import Module
from ....infrastructure.repositories import LessonRepository
from ..authz import get_current_user, require_admin
from ..schemas import ModuleCreate, ModuleOut, ModuleUpdate, ModuleWithLessons

router = APIRouter(prefix="/api/v1/modules", tags=["modules"])


@router.get("/", response_model=list[ModuleWithLessons])
def list_modules(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return LessonRepository(db).modules_with_lessons(user.id)

# --- Admin-only CRUD:

@router.post("/", response_model=ModuleOut, status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
def create_module(payload: ModuleCreate, db: Session = Depends(get_db)):
    row = Module(title=payload.title, description=payload.description, order_index=payload.order_index)
    db.add(row); db.commit(); db.refresh(row)
    return row

@router.get("/{module_id}", response_model=ModuleOut, dependencies=[Depends(get_current_user)])
def get_module(module_id: UUID, db: Session = Depends(get_db)):
    row = db.get(Module, module_id)
    if not row: raise HTTPException(404, "module not found")
    return row

@router.put("/{module_id}", response_model=ModuleOut, dependencies=[Depends(require_admin)])
def update_module(module_id: UUID, payload: ModuleUpdate, db: Session = Depends(get_db)):
    row = db.get(Module, module_id)
    if not row: raise HTTPException(404, "module not found")
    if payload.title is not None: row.title = payload.title
    if payload.description is not None: row.description = payload.description
    if payload.order_index is not None: row.order_index = payload.order_index
    db.commit(); db.refresh(row)
    return row

@router.delete("/{module_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(require_admin)])
def delete_module(module_id: UUID, db: Session = Depends(get_db)):
    row = db.get(Module, module_id)
    if not row: raise HTTPException(404, "module not found")
    lesson_ids = [l.id for l in row.lessons]
    db.delete(row); db.commit()
    for lesson_id in lesson_ids:
        delete_cache_pattern(f"lesson:{lesson_id}:*")
