from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

TaskType = Literal["fill_code", "multiple_choice", "debug_code", "string_cmp"]

# --- account

class CredentialsReq(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=1)

class UserUpdateReq(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    password: str | None = Field(default=None, min_length=1)

class UserResp(BaseModel):
    id: UUID
    username: str
    role: str
    model_config = ConfigDict(from_attributes=True)

class TokenResp(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResp

class UserPage(BaseModel):
    items: list[UserResp]
    total: int
    limit: int
    offset: int

# --- modules

class LessonShort(BaseModel):
    id: UUID
    title: str
    completed: bool
    order_index: int

class ModuleWithLessons(BaseModel):
    id: UUID
    title: str
    description: str
    order_index: int
    lessons: list[LessonShort]

class ModuleCreate(BaseModel):
    title: str
    description: str
    order_index: int = 0

class ModuleUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    order_index: int | None = None

class ModuleOut(BaseModel):
    id: UUID
    title: str
    description: str
    order_index: int
    model_config = ConfigDict(from_attributes=True)

# --- lessons

class LessonResp(BaseModel):
    id: UUID
    module_id: UUID
    title: str
    content: str
    status: bool
    order_index: int

class LessonCreate(BaseModel):
    module_id: UUID
    title: str
    content: str
    order_index: int = 0

class LessonUpdate(BaseModel):
    module_id: UUID | None = None
    title: str | None = None
    content: str | None = None
    order_index: int | None = None

class LessonOut(BaseModel):
    id: UUID
    module_id: UUID
    title: str
    content: str
    order_index: int
    model_config = ConfigDict(from_attributes=True)

# --- tasks

class AnswerShort(BaseModel):
    id: UUID
    answer_text: str | None = None

class TaskResp(BaseModel):
    id: UUID
    question: str
    task_type: str
    answers: list[AnswerShort]

class TaskCreate(BaseModel):
    lesson_id: UUID
    task_type: TaskType
    question: str
    explanation: str

class TaskUpdate(BaseModel):
    lesson_id: UUID | None = None
    task_type: TaskType | None = None
    question: str | None = None
    explanation: str | None = None

class TaskOut(BaseModel):
    id: UUID
    lesson_id: UUID
    task_type: str
    question: str
    explanation: str
    model_config = ConfigDict(from_attributes=True)

class TaskCheckReq(BaseModel):
    answer_id: UUID
    task_type: TaskType | None = None
    user_answer: str | None = None

class TaskCheckResp(BaseModel):
    is_correct: bool
    explanation: str
    image: str

class AttemptOut(BaseModel):
    id: UUID
    task_id: UUID
    selected_answer_id: UUID
    is_correct: bool
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)

# --- answers

class AnswerCreate(BaseModel):
    task_id: UUID
    answer_text: str
    image: str = ""
    is_correct: bool = False

class AnswerUpdate(BaseModel):
    answer_text: str | None = None
    image: str | None = None
    is_correct: bool | None = None

class AnswerOut(BaseModel):
    id: UUID
    task_id: UUID
    answer_text: str
    image: str
    is_correct: bool
    model_config = ConfigDict(from_attributes=True)

# --- progress

class ProgressTokenResp(BaseModel):
    id: UUID
    token: str
    user_id: UUID
    expires_at: datetime
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)

class ProgressSummaryResp(BaseModel):
    total_lessons: int
    completed_lessons: int
    correct_answers: int
    total_answers: int
    username: str
    model_config = ConfigDict(from_attributes=True)
