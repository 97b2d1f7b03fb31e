from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from ..application.use_cases.check_answer import IAnswerRepository, IAttemptRepository
from ..application.use_cases.register_user import IUserRepository
from ..application.use_cases.share_progress import IProgressReader, IProgressTokenRepository
from ..domain.entities import Answer, ProgressTokenGrant, User
from .models import (
    LessonORM,
    ModuleORM,
    ProgressTokenORM,
    TaskAnswerORM,
    TaskORM,
    UserORM,
    UserProgressORM,
    UserTaskAttemptORM,
)


def to_domain(u: UserORM) -> User:
    return User(id=u.id, username=u.username, role=u.role)


class UserRepository(IUserRepository):
    def __init__(self, db: Session): self.db = db

    def get_row(self, user_id: UUID) -> UserORM | None:
        return self.db.get(UserORM, user_id)

    def get_by_id(self, user_id: UUID) -> User | None:
        row = self.get_row(user_id)
        return to_domain(row) if row else None

    def get_by_username(self, username: str) -> User | None:
        row = self.db.query(UserORM).filter(UserORM.username == username).first()
        return to_domain(row) if row else None

    def get_password_hash(self, username: str) -> tuple[User, str] | None:
        row = self.db.query(UserORM).filter(UserORM.username == username).first()
        return (to_domain(row), row.password_hash) if row else None

    def create(self, username: str, password_hash: str, role: str = "user") -> User:
        row = UserORM(username=username, password_hash=password_hash, role=role)
        self.db.add(row); self.db.commit(); self.db.refresh(row)
        return to_domain(row)

    def update(self, user_id: UUID, username: str, password_hash: str | None = None) -> User | None:
        row = self.get_row(user_id)
        if not row:
            return None
        row.username = username
        if password_hash is not None:
            row.password_hash = password_hash
        self.db.commit(); self.db.refresh(row)
        return to_domain(row)

    def delete(self, user_id: UUID) -> bool:
        row = self.get_row(user_id)
        if not row:
            return False
        self.db.delete(row); self.db.commit()
        return True

    def page(self, limit: int, offset: int) -> list[User]:
        rows = (self.db.query(UserORM)
                .order_by(UserORM.username)
                .limit(limit).offset(offset).all())
        return [to_domain(r) for r in rows]

    def count(self) -> int:
        return self.db.scalar(select(func.count()).select_from(UserORM))


class LessonRepository:
    """Read side of the module -> lesson hierarchy, joined with one user's progress."""

    def __init__(self, db: Session): self.db = db

    def _done_lesson_ids(self, user_id: UUID) -> set[UUID]:
        q = (select(UserProgressORM.lesson_id)
             .where(UserProgressORM.user_id == user_id, UserProgressORM.status == "done"))
        return set(self.db.scalars(q).all())

    def modules_with_lessons(self, user_id: UUID) -> list[dict]:
        done = self._done_lesson_ids(user_id)
        modules = self.db.scalars(
            select(ModuleORM).order_by(ModuleORM.order_index, ModuleORM.title)
        ).all()
        result = []
        for m in modules:
            result.append({
                "id": m.id,
                "title": m.title,
                "description": m.description,
                "order_index": m.order_index,
                "lessons": [
                    {"id": l.id, "title": l.title, "completed": l.id in done,
                     "order_index": l.order_index}
                    for l in m.lessons
                ],
            })
        return result

    def get(self, lesson_id: UUID) -> LessonORM | None:
        return self.db.get(LessonORM, lesson_id)

    def is_done(self, user_id: UUID, lesson_id: UUID) -> bool:
        q = select(UserProgressORM.status).where(
            UserProgressORM.user_id == user_id, UserProgressORM.lesson_id == lesson_id
        )
        return self.db.scalar(q) == "done"

    def next_uncompleted(self, user_id: UUID, lesson: LessonORM) -> LessonORM | None:
        done = (select(UserProgressORM.lesson_id)
                .where(UserProgressORM.user_id == user_id, UserProgressORM.status == "done"))
        q = (select(LessonORM)
             .where(LessonORM.module_id == lesson.module_id,
                    LessonORM.order_index > lesson.order_index,
                    LessonORM.id.not_in(done))
             .order_by(LessonORM.order_index)
             .limit(1))
        return self.db.scalar(q)

    def tasks_with_answers(self, lesson_id: UUID) -> list[TaskORM]:
        q = select(TaskORM).where(TaskORM.lesson_id == lesson_id).order_by(TaskORM.id)
        return list(self.db.scalars(q).all())


class ProgressRepository(IProgressReader):
    def __init__(self, db: Session): self.db = db

    def mark_done(self, user_id: UUID, lesson_id: UUID) -> UserProgressORM:
        # idempotent UPSERT: concurrent calls for the same (user, lesson) end on one "done" row
        insert = sqlite_insert if self.db.get_bind().dialect.name == "sqlite" else pg_insert
        stmt = insert(UserProgressORM).values(user_id=user_id, lesson_id=lesson_id, status="done")
        stmt = stmt.on_conflict_do_update(index_elements=["user_id", "lesson_id"], set_={"status": "done"})
        self.db.execute(stmt)
        self.db.commit()
        return self.db.scalar(
            select(UserProgressORM).where(UserProgressORM.user_id == user_id,
                                          UserProgressORM.lesson_id == lesson_id)
        )

    def count_lessons(self) -> int:
        return self.db.scalar(select(func.count()).select_from(LessonORM))

    def count_completed(self, user_id: UUID) -> int:
        q = (select(func.count()).select_from(UserProgressORM)
             .where(UserProgressORM.user_id == user_id, UserProgressORM.status == "done"))
        return self.db.scalar(q)

    def count_attempts(self, user_id: UUID) -> int:
        q = (select(func.count()).select_from(UserTaskAttemptORM)
             .where(UserTaskAttemptORM.user_id == user_id))
        return self.db.scalar(q)

    def count_correct_attempts(self, user_id: UUID) -> int:
        q = (select(func.count()).select_from(UserTaskAttemptORM)
             .where(UserTaskAttemptORM.user_id == user_id,
                    UserTaskAttemptORM.is_correct.is_(True)))
        return self.db.scalar(q)

    def get_username(self, user_id: UUID) -> str | None:
        return self.db.scalar(select(UserORM.username).where(UserORM.id == user_id))


class AnswerRepository(IAnswerRepository):
    def __init__(self, db: Session): self.db = db

    def get(self, answer_id: UUID) -> Answer | None:
        row = self.db.get(TaskAnswerORM, answer_id)
        if not row:
            return None
        return Answer(id=row.id, task_id=row.task_id, answer_text=row.answer_text,
                      image=row.image, is_correct=row.is_correct)

    def get_task(self, task_id: UUID) -> TaskORM | None:
        return self.db.get(TaskORM, task_id)


class AttemptRepository(IAttemptRepository):
    def __init__(self, db: Session): self.db = db

    def record(self, user_id: UUID, task_id: UUID, answer_id: UUID, is_correct: bool) -> UserTaskAttemptORM:
        row = UserTaskAttemptORM(user_id=user_id, task_id=task_id,
                                 selected_answer_id=answer_id, is_correct=is_correct)
        self.db.add(row); self.db.commit(); self.db.refresh(row)
        return row

    def list_for_user(self, user_id: UUID, limit: int, offset: int) -> list[UserTaskAttemptORM]:
        q = (select(UserTaskAttemptORM)
             .where(UserTaskAttemptORM.user_id == user_id)
             .order_by(UserTaskAttemptORM.created_at.desc())
             .limit(limit).offset(offset))
        return list(self.db.scalars(q).all())


def _grant(row: ProgressTokenORM) -> ProgressTokenGrant:
    return ProgressTokenGrant(id=row.id, token=row.token, user_id=row.user_id,
                              expires_at=row.expires_at, created_at=row.created_at)


class ProgressTokenRepository(IProgressTokenRepository):
    def __init__(self, db: Session): self.db = db

    def create(self, user_id: UUID, token: str, expires_at: datetime) -> ProgressTokenGrant:
        row = ProgressTokenORM(user_id=user_id, token=token, expires_at=expires_at)
        self.db.add(row); self.db.commit(); self.db.refresh(row)
        return _grant(row)

    def find_by_token(self, token: str) -> ProgressTokenGrant | None:
        row = self.db.query(ProgressTokenORM).filter(ProgressTokenORM.token == token).first()
        return _grant(row) if row else None

    def delete(self, token_id: UUID) -> None:
        self.db.execute(delete(ProgressTokenORM).where(ProgressTokenORM.id == token_id))
        self.db.commit()

    def cleanup_expired(self, now: datetime | None = None) -> int:
        now = now or datetime.now(timezone.utc)
        result = self.db.execute(delete(ProgressTokenORM).where(ProgressTokenORM.expires_at < now))
        self.db.commit()
        return result.rowcount
