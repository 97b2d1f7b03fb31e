from typing import Callable
from uuid import UUID

from ...domain.entities import STRING_CMP, Answer
from ...domain.errors import NotFoundError
from ..dto import AnswerCheckResult


class IAnswerRepository:
    def get(self, answer_id: UUID) -> Answer | None: ...
    def get_task(self, task_id: UUID): ...


class IAttemptRepository:
    def record(self, user_id: UUID, task_id: UUID, answer_id: UUID, is_correct: bool): ...


def normalize(text: str) -> str:
    return text.strip().casefold()


class CheckAnswer:
    """Grades a submitted answer and stores the attempt.

    For ``string_cmp`` tasks the learner types the answer, so the referenced
    answer's text is compared against ``user_answer`` ignoring case and
    surrounding whitespace. All other task types are graded by the
    ``is_correct`` flag of the selected answer.
    """

    def __init__(self, answers: IAnswerRepository, attempts: IAttemptRepository,
                 image_url: Callable[[str], str] = lambda path: path):
        self.answers = answers
        self.attempts = attempts
        self.image_url = image_url

    def execute(self, user_id: UUID, answer_id: UUID, task_type: str | None = None,
                user_answer: str | None = None) -> AnswerCheckResult:
        answer = self.answers.get(answer_id)
        if answer is None:
            raise NotFoundError("answer not found")
        task = self.answers.get_task(answer.task_id)
        if task is None:
            raise NotFoundError("task not found")

        if task_type is not None and task_type != task.task_type:
            raise ValueError(f"task_type mismatch: answer belongs to a {task.task_type} task")

        if task.task_type == STRING_CMP:
            if user_answer is None:
                raise ValueError(
                    "invalid user_answer field passed. You should pass some value "
                    "in it if you're checking string_cmp task"
                )
            is_correct = normalize(answer.answer_text) == normalize(user_answer)
        else:
            is_correct = answer.is_correct

        self.attempts.record(user_id, task.id, answer.id, is_correct)
        return AnswerCheckResult(
            is_correct=is_correct,
            explanation=task.explanation,
            image=self.image_url(answer.image),
            task_type=task.task_type,
        )
