import re
from unittest.mock import patch

from click.testing import CliRunner

from learning_service.cli import cli
from learning_service.infrastructure.models import Lesson, Task, TaskAnswer, User
from learning_service.infrastructure.security import PasswordHasher

UUID_RE = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}")


def _created_id(result):
    assert result.exit_code == 0, result.output
    return UUID_RE.search(result.output).group(0)


def test_user_add(session_factory):
    runner = CliRunner()
    result = runner.invoke(cli, ["user", "add", "--username", "admin", "--password", "pw", "--role", "admin"])
    assert result.exit_code == 0, result.output

    with session_factory() as s:
        row = s.query(User).filter_by(username="admin").one()
        assert row.role == "admin"
        assert PasswordHasher().verify("pw", row.password_hash)


def test_user_add_duplicate():
    runner = CliRunner()
    runner.invoke(cli, ["user", "add", "--username", "neo", "--password", "pw"])
    result = runner.invoke(cli, ["user", "add", "--username", "neo", "--password", "pw"])
    assert result.exit_code == 1
    assert "already exists" in result.output


def test_content_hierarchy(session_factory, tmp_path):
    runner = CliRunner()
    module_id = _created_id(runner.invoke(cli, ["module", "add", "--title", "Basics", "--description", "d"]))

    body = tmp_path / "lesson.md"
    body.write_text("# Variables\n", encoding="utf-8")
    lesson_id = _created_id(runner.invoke(cli, [
        "lesson", "add", "--module-id", module_id, "--title", "Variables", "--content-file", str(body),
    ]))
    task_id = _created_id(runner.invoke(cli, [
        "task", "add", "--lesson-id", lesson_id, "--task-type", "string_cmp",
        "--question", "Name the builtin", "--explanation", "print",
    ]))
    _created_id(runner.invoke(cli, ["answer", "add", "--task-id", task_id, "--text", "print", "--correct"]))

    with session_factory() as s:
        assert s.query(Lesson).one().content == "# Variables\n"
        assert s.query(Task).one().task_type == "string_cmp"
        assert s.query(TaskAnswer).one().is_correct is True


def test_lesson_add_needs_content():
    result = CliRunner().invoke(cli, [
        "lesson", "add", "--module-id", "00000000-0000-0000-0000-000000000000", "--title", "t",
    ])
    assert result.exit_code == 2


def test_lesson_add_unknown_module():
    result = CliRunner().invoke(cli, [
        "lesson", "add", "--module-id", "00000000-0000-0000-0000-000000000000",
        "--title", "t", "--content", "c",
    ])
    assert result.exit_code == 1
    assert "constraint violated" in result.output


def test_task_add_rejects_unknown_type():
    result = CliRunner().invoke(cli, [
        "task", "add", "--lesson-id", "00000000-0000-0000-0000-000000000000", "--task-type", "essay",
        "--question", "q", "--explanation", "e",
    ])
    assert result.exit_code == 2


@patch("learning_service.migrations.upgrade")
def test_db_upgrade(mock_upgrade):
    result = CliRunner().invoke(cli, ["db", "upgrade"])
    assert result.exit_code == 0, result.output
    mock_upgrade.assert_called_once_with("head")
