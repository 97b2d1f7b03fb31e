import threading

from sqlalchemy.orm import sessionmaker

from learning_service.infrastructure.db import Base, build_engine
from learning_service.infrastructure.models import Lesson, Module, User, UserProgress
from learning_service.infrastructure.repositories import ProgressRepository


def _seed(Session):
    with Session() as s:
        user = User(username="neo", password_hash="x")
        module = Module(title="m", description="d")
        s.add_all([user, module])
        s.flush()
        lesson = Lesson(module_id=module.id, title="l", content="c")
        s.add(lesson)
        s.commit()
        return user.id, lesson.id


def test_mark_done_concurrent_requests(tmp_path):
    """Simultaneous 'done' calls for one lesson end on a single row without errors"""
    engine = build_engine(f"sqlite:///{tmp_path / 'progress.db'}")
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    try:
        user_id, lesson_id = _seed(Session)
        workers = 6
        barrier = threading.Barrier(workers)
        errors = []

        def mark():
            with Session() as s:
                barrier.wait()
                try:
                    ProgressRepository(s).mark_done(user_id, lesson_id)
                except Exception as e:
                    errors.append(type(e).__name__)

        threads = [threading.Thread(target=mark) for _ in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        with Session() as s:
            rows = s.query(UserProgress).filter_by(user_id=user_id, lesson_id=lesson_id).all()
            assert [r.status for r in rows] == ["done"]
    finally:
        engine.dispose()


def test_mark_done_upgrades_in_progress(session_factory):
    user_id, lesson_id = _seed(session_factory)
    with session_factory() as s:
        s.add(UserProgress(user_id=user_id, lesson_id=lesson_id, status="in_progress"))
        s.commit()

    with session_factory() as s:
        row = ProgressRepository(s).mark_done(user_id, lesson_id)
        assert row.status == "done"
        assert s.query(UserProgress).count() == 1
