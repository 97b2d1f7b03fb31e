from datetime import datetime, timedelta, timezone
from typing import Callable
from uuid import UUID

from ...domain.entities import ProgressTokenGrant
from ...domain.errors import NotFoundError, TokenExpired
from ..dto import ProgressSummary


class IProgressTokenRepository:
    def create(self, user_id: UUID, token: str, expires_at: datetime) -> ProgressTokenGrant: ...
    def find_by_token(self, token: str) -> ProgressTokenGrant | None: ...
    def delete(self, token_id: UUID) -> None: ...
    def cleanup_expired(self, now: datetime | None = None) -> int: ...


class IProgressReader:
    def count_lessons(self) -> int: ...
    def count_completed(self, user_id: UUID) -> int: ...
    def count_attempts(self, user_id: UUID) -> int: ...
    def count_correct_attempts(self, user_id: UUID) -> int: ...
    def get_username(self, user_id: UUID) -> str | None: ...


def as_utc(value: datetime) -> datetime:
    # sqlite hands timestamps back naive; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class IssueProgressToken:
    def __init__(self, tokens: IProgressTokenRepository, generate: Callable[[], str],
                 ttl: timedelta = timedelta(minutes=30)):
        self.tokens = tokens
        self.generate = generate
        self.ttl = ttl

    def execute(self, user_id: UUID) -> ProgressTokenGrant:
        expires_at = datetime.now(timezone.utc) + self.ttl
        return self.tokens.create(user_id, self.generate(), expires_at)


class ReadSharedProgress:
    def __init__(self, tokens: IProgressTokenRepository, progress: IProgressReader,
                 clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        self.tokens = tokens
        self.progress = progress
        self.clock = clock

    def execute(self, token: str) -> ProgressSummary:
        now = self.clock()
        grant = self.tokens.find_by_token(token)
        # sweep the rest after the lookup so a stale token still reports as expired
        self.tokens.cleanup_expired(now)
        if grant is None:
            raise NotFoundError("progress token not found")
        if as_utc(grant.expires_at) <= now:
            self.tokens.delete(grant.id)
            raise TokenExpired("This token has been expired")

        username = self.progress.get_username(grant.user_id)
        if username is None:
            raise NotFoundError("user not found")

        return ProgressSummary(
            total_lessons=self.progress.count_lessons(),
            completed_lessons=self.progress.count_completed(grant.user_id),
            correct_answers=self.progress.count_correct_attempts(grant.user_id),
            total_answers=self.progress.count_attempts(grant.user_id),
            username=username,
        )
