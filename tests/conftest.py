import os
import sys
from types import SimpleNamespace

import pytest

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# settings are read on import, so the environment has to be ready first
os.environ["LEARNING_CONFIG"] = os.path.join(CURRENT_DIR, "config.test.toml")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.pop("REDIS_URL", None)

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from learning_service.infrastructure import db as db_module
from learning_service.infrastructure.db import Base, get_db
from learning_service.infrastructure.models import Lesson, Module, Task, TaskAnswer, User
from learning_service.infrastructure.ratelimit import limiter
from learning_service.infrastructure.security import PasswordHasher, create_access_token

# In-memory DB shared by every session of a test
test_engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

db_module.engine = test_engine
db_module.SessionLocal = TestingSessionLocal


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


from learning_service.main import app

app.dependency_overrides[get_db] = override_get_db
limiter.enabled = False


@pytest.fixture(autouse=True)
def tables():
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield


@pytest.fixture
def session_factory():
    return TestingSessionLocal


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_user():
    """Creates a user straight in the DB and returns (id, auth headers)."""
    hasher = PasswordHasher()

    def _make(username="alice", password="secret", role="user"):
        with TestingSessionLocal() as s:
            row = User(username=username, password_hash=hasher.hash(password), role=role)
            s.add(row)
            s.commit()
            user_id = row.id
        token = create_access_token(sub=str(user_id))
        return user_id, {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def user_headers(make_user):
    return make_user("learner", "learner-pass")[1]


@pytest.fixture
def admin_headers(make_user):
    return make_user("root", "root-pass", role="admin")[1]


@pytest.fixture
def course():
    """One module with three ordered lessons; the second lesson carries two tasks."""
    with TestingSessionLocal() as s:
        module = Module(title="Basics", description="First steps", order_index=1)
        s.add(module)
        s.flush()
        lessons = [
            Lesson(module_id=module.id, title=f"Lesson {i}", content=f"Body {i}", order_index=i)
            for i in range(3)
        ]
        s.add_all(lessons)
        s.flush()

        choice = Task(lesson_id=lessons[1].id, task_type="multiple_choice",
                      question="Pick the keyword", explanation="def declares a function")
        typed = Task(lesson_id=lessons[1].id, task_type="string_cmp",
                     question="Type the builtin that prints", explanation="print writes to stdout")
        s.add_all([choice, typed])
        s.flush()

        right = TaskAnswer(task_id=choice.id, answer_text="def", is_correct=True)
        wrong = TaskAnswer(task_id=choice.id, answer_text="fun", is_correct=False)
        typed_answer = TaskAnswer(task_id=typed.id, answer_text="print", image="img/print.png",
                                  is_correct=True)
        s.add_all([right, wrong, typed_answer])
        s.commit()

        return SimpleNamespace(
            module_id=module.id,
            lesson_ids=[l.id for l in lessons],
            choice_task_id=choice.id,
            typed_task_id=typed.id,
            right_answer_id=right.id,
            wrong_answer_id=wrong.id,
            typed_answer_id=typed_answer.id,
        )
