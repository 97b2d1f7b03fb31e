from unittest.mock import MagicMock, patch

from learning_service.infrastructure.cache import delete_cache_pattern, get_cache, get_redis, set_cache


def test_cache_disabled_without_redis_url():
    assert get_redis() is None
    assert get_cache("anything") is None
    assert set_cache("anything", 1) is False
    assert delete_cache_pattern("any*") == 0


@patch("learning_service.infrastructure.cache.get_redis")
def test_get_cache_hit(mock_redis):
    """Cache hit decodes the stored JSON"""
    mock_client = MagicMock()
    mock_client.get.return_value = '[{"id": "1", "question": "q"}]'
    mock_redis.return_value = mock_client

    assert get_cache("lesson:1:tasks") == [{"id": "1", "question": "q"}]
    mock_client.get.assert_called_once_with("lesson:1:tasks")


@patch("learning_service.infrastructure.cache.get_redis")
def test_get_cache_miss(mock_redis):
    mock_client = MagicMock()
    mock_client.get.return_value = None
    mock_redis.return_value = mock_client

    assert get_cache("lesson:1:tasks") is None


@patch("learning_service.infrastructure.cache.get_redis")
def test_get_cache_error(mock_redis):
    """Redis failures degrade to a miss"""
    mock_redis.side_effect = Exception("Redis error")
    assert get_cache("lesson:1:tasks") is None


@patch("learning_service.infrastructure.cache.get_redis")
def test_set_cache(mock_redis):
    mock_client = MagicMock()
    mock_redis.return_value = mock_client

    assert set_cache("lesson:1:tasks", [], ttl=60) is True
    mock_client.setex.assert_called_once_with("lesson:1:tasks", 60, "[]")


@patch("learning_service.infrastructure.cache.get_redis")
def test_set_cache_error(mock_redis):
    mock_redis.side_effect = Exception("Redis error")
    assert set_cache("lesson:1:tasks", []) is False


@patch("learning_service.infrastructure.cache.get_redis")
def test_delete_cache_pattern(mock_redis):
    mock_client = MagicMock()
    mock_client.keys.return_value = ["lesson:1:tasks"]
    mock_client.delete.return_value = 1
    mock_redis.return_value = mock_client

    assert delete_cache_pattern("lesson:1:*") == 1
    mock_client.keys.assert_called_once_with("lesson:1:*")


@patch("learning_service.interfaces.http.routers.lessons.get_cache")
def test_lesson_tasks_served_from_cache(mock_get_cache, client, user_headers, course):
    cached = [{"id": str(course.choice_task_id), "question": "cached", "task_type": "multiple_choice",
               "answers": []}]
    mock_get_cache.return_value = cached

    resp = client.get(f"/api/v1/lessons/{course.lesson_ids[1]}/tasks", headers=user_headers)
    assert resp.status_code == 200
    assert resp.json() == cached
    mock_get_cache.assert_called_once_with(f"lesson:{course.lesson_ids[1]}:tasks")


@patch("learning_service.interfaces.http.routers.tasks.delete_cache_pattern")
def test_task_change_invalidates_lesson_cache(mock_delete, client, admin_headers, course):
    client.delete(f"/api/v1/tasks/{course.choice_task_id}", headers=admin_headers)
    mock_delete.assert_called_once_with(f"lesson:{course.lesson_ids[1]}:tasks")


@patch("learning_service.interfaces.http.routers.lessons.get_cache")
def test_cached_empty_task_list_is_a_hit(mock_get_cache, client, user_headers, course):
    """An empty cached list is served as is, not recomputed"""
    mock_get_cache.return_value = []

    resp = client.get(f"/api/v1/lessons/{course.lesson_ids[1]}/tasks", headers=user_headers)
    assert resp.status_code == 200
    assert resp.json() == []
