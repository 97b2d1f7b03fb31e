# learning_service/infrastructure/models.py
from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserORM(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[str] = mapped_column(Text, nullable=False, default="user")

    progress: Mapped[list["UserProgressORM"]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    attempts: Mapped[list["UserTaskAttemptORM"]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    progress_tokens: Mapped[list["ProgressTokenORM"]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (CheckConstraint("role IN ('admin', 'user')", name="ck_users_role"),)

    def __repr__(self) -> str:
        return f"UserORM(id={self.id!r}, username={self.username!r}, role={self.role!r})"


class ModuleORM(Base):
    __tablename__ = "modules"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    lessons: Mapped[list["LessonORM"]] = relationship(
        back_populates="module",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="LessonORM.order_index",
    )

    __table_args__ = (Index("idx_modules_order_index", "order_index"),)

    def __repr__(self) -> str:
        return f"ModuleORM(id={self.id!r}, title={self.title!r})"


class LessonORM(Base):
    __tablename__ = "lessons"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    module_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("modules.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    module: Mapped["ModuleORM"] = relationship(back_populates="lessons")
    tasks: Mapped[list["TaskORM"]] = relationship(
        back_populates="lesson", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        Index("idx_lessons_module_id", "module_id"),
        Index("idx_lessons_order_index", "order_index"),
        Index("idx_lessons_module_order", "module_id", "order_index"),
    )

    def __repr__(self) -> str:
        return f"LessonORM(id={self.id!r}, module_id={self.module_id!r}, title={self.title!r})"


TASK_TYPES = ("fill_code", "multiple_choice", "debug_code", "string_cmp")


class TaskORM(Base):
    __tablename__ = "tasks"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    lesson_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False
    )
    task_type: Mapped[str] = mapped_column(Text, nullable=False)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    explanation: Mapped[str] = mapped_column(Text, nullable=False)

    lesson: Mapped["LessonORM"] = relationship(back_populates="tasks")
    answers: Mapped[list["TaskAnswerORM"]] = relationship(
        back_populates="task", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint(
            "task_type IN ('fill_code', 'multiple_choice', 'debug_code', 'string_cmp')",
            name="ck_tasks_task_type",
        ),
        Index("idx_tasks_lesson_id", "lesson_id"),
    )

    def __repr__(self) -> str:
        return f"TaskORM(id={self.id!r}, task_type={self.task_type!r})"


class TaskAnswerORM(Base):
    __tablename__ = "task_answers"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    task_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False
    )
    answer_text: Mapped[str] = mapped_column(Text, nullable=False)
    image: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    task: Mapped["TaskORM"] = relationship(back_populates="answers")


class UserProgressORM(Base):
    __tablename__ = "user_progress"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    lesson_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(Text, nullable=False, default="done")

    user: Mapped["UserORM"] = relationship(back_populates="progress")

    __table_args__ = (
        UniqueConstraint("user_id", "lesson_id", name="uq_user_progress_user_lesson"),
        CheckConstraint("status IN ('done', 'in_progress')", name="ck_user_progress_status"),
        Index("idx_user_progress_lesson_user", "lesson_id", "user_id"),
        Index("idx_user_progress_user_status", "user_id", "status"),
    )


class UserTaskAttemptORM(Base):
    __tablename__ = "user_task_attempts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    task_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False
    )
    selected_answer_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("task_answers.id", ondelete="CASCADE"), nullable=False
    )
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), default=utcnow
    )

    user: Mapped["UserORM"] = relationship(back_populates="attempts")


class ProgressTokenORM(Base):
    __tablename__ = "progress_tokens"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    token: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), default=utcnow
    )

    user: Mapped["UserORM"] = relationship(back_populates="progress_tokens")


User = UserORM
Module = ModuleORM
Lesson = LessonORM
Task = TaskORM
TaskAnswer = TaskAnswerORM
UserProgress = UserProgressORM
UserTaskAttempt = UserTaskAttemptORM
ProgressToken = ProgressTokenORM

__all__ = [
    "Base",
    "TASK_TYPES",
    "UserORM",
    "ModuleORM",
    "LessonORM",
    "TaskORM",
    "TaskAnswerORM",
    "UserProgressORM",
    "UserTaskAttemptORM",
    "ProgressTokenORM",
    "User",
    "Module",
    "Lesson",
    "Task",
    "TaskAnswer",
    "UserProgress",
    "UserTaskAttempt",
    "ProgressToken",
]
