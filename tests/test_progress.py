from datetime import datetime, timedelta, timezone

from learning_service.infrastructure.models import ProgressToken


def _store_token(session_factory, user_id, token, expires_at):
    with session_factory() as s:
        s.add(ProgressToken(user_id=user_id, token=token, expires_at=expires_at))
        s.commit()


def test_share_returns_token(client, user_headers):
    resp = client.post("/api/v1/progress/share", headers=user_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert len(body["token"]) == 44
    assert set(body) == {"id", "token", "user_id", "expires_at", "created_at"}


def test_share_requires_auth(client):
    assert client.post("/api/v1/progress/share").status_code == 401


def test_tokens_are_unique(client, user_headers):
    tokens = {client.post("/api/v1/progress/share", headers=user_headers).json()["token"] for _ in range(5)}
    assert len(tokens) == 5


def test_read_shared_progress(client, make_user, course):
    _, headers = make_user("neo")
    client.post(f"/api/v1/lessons/{course.lesson_ids[0]}/done", headers=headers)
    client.post("/api/v1/tasks/check", headers=headers, json={"answer_id": str(course.right_answer_id)})
    client.post("/api/v1/tasks/check", headers=headers, json={"answer_id": str(course.wrong_answer_id)})
    token = client.post("/api/v1/progress/share", headers=headers).json()["token"]

    # public, no auth headers
    resp = client.get(f"/api/v1/progress/{token}")
    assert resp.status_code == 200
    assert resp.json() == {
        "total_lessons": 3,
        "completed_lessons": 1,
        "correct_answers": 1,
        "total_answers": 2,
        "username": "neo",
    }


def test_unknown_token(client):
    resp = client.get("/api/v1/progress/does-not-exist")
    assert resp.status_code == 404


def test_expired_token_rejected_and_removed(client, make_user, session_factory):
    user_id, _ = make_user("neo")
    _store_token(session_factory, user_id, "stale-token",
                 datetime.now(timezone.utc) - timedelta(minutes=1))

    resp = client.get("/api/v1/progress/stale-token")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "This token has been expired"

    with session_factory() as s:
        assert s.query(ProgressToken).count() == 0
    assert client.get("/api/v1/progress/stale-token").status_code == 404


def test_reading_sweeps_expired_tokens(client, make_user, session_factory):
    user_id, headers = make_user("neo")
    past = datetime.now(timezone.utc) - timedelta(hours=1)
    _store_token(session_factory, user_id, "old-1", past)
    _store_token(session_factory, user_id, "old-2", past)
    token = client.post("/api/v1/progress/share", headers=headers).json()["token"]

    assert client.get(f"/api/v1/progress/{token}").status_code == 200
    with session_factory() as s:
        assert [t.token for t in s.query(ProgressToken).all()] == [token]
