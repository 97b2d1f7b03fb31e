from dataclasses import dataclass


@dataclass
class AnswerCheckResult:
    is_correct: bool
    explanation: str
    image: str
    task_type: str


@dataclass
class ProgressSummary:
    total_lessons: int
    completed_lessons: int
    correct_answers: int
    total_answers: int
    username: str
