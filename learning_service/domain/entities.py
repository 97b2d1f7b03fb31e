from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

ROLE_ADMIN = "admin"
ROLE_USER = "user"
ROLES = (ROLE_ADMIN, ROLE_USER)

STRING_CMP = "string_cmp"


@dataclass(frozen=True)
class User:
    id: UUID | None
    username: str
    role: str = ROLE_USER

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


@dataclass(frozen=True)
class Answer:
    id: UUID
    task_id: UUID
    answer_text: str
    image: str
    is_correct: bool


@dataclass(frozen=True)
class ProgressTokenGrant:
    id: UUID
    token: str
    user_id: UUID
    expires_at: datetime
    created_at: datetime
