"""Command-line interface for filling the learning database."""

from pathlib import Path
from uuid import UUID

import click
from sqlalchemy.exc import IntegrityError

from .application.use_cases.register_user import RegisterUser
from .domain.entities import ROLES
from .infrastructure import db
from .infrastructure.models import TASK_TYPES, Lesson, Module, Task, TaskAnswer
from .infrastructure.repositories import UserRepository
from .infrastructure.security import PasswordHasher


def _session():
    return db.SessionLocal()


def _add(row):
    session = _session()
    try:
        session.add(row)
        session.commit()
        session.refresh(row)
        return row
    except IntegrityError as e:
        session.rollback()
        raise click.ClickException(f"constraint violated: {e.orig}")
    finally:
        session.close()


@click.group()
def cli():
    """Manage users and learning content."""


@cli.group()
def user():
    """Manage users."""


@user.command("add")
@click.option("--username", required=True)
@click.option("--password", required=True)
@click.option("--role", type=click.Choice(ROLES), default="user", show_default=True)
def user_add(username: str, password: str, role: str):
    session = _session()
    try:
        created = RegisterUser(UserRepository(session), PasswordHasher()).execute(username, password, role)
    except ValueError as e:
        raise click.ClickException(str(e))
    finally:
        session.close()
    click.echo(f"user {created.username} ({created.role}) created: {created.id}")


@cli.group()
def module():
    """Manage modules."""


@module.command("add")
@click.option("--title", required=True)
@click.option("--description", required=True)
@click.option("--order-index", type=int, default=0, show_default=True)
def module_add(title: str, description: str, order_index: int):
    row = _add(Module(title=title, description=description, order_index=order_index))
    click.echo(f"module created: {row.id}")


@cli.group()
def lesson():
    """Manage lessons."""


@lesson.command("add")
@click.option("--module-id", type=click.UUID, required=True)
@click.option("--title", required=True)
@click.option("--content", help="Lesson body text.")
@click.option("--content-file", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="Read the lesson body from a file.")
@click.option("--order-index", type=int, default=0, show_default=True)
def lesson_add(module_id: UUID, title: str, content: str | None, content_file: Path | None, order_index: int):
    if content_file is not None:
        content = content_file.read_text(encoding="utf-8")
    if content is None:
        raise click.UsageError("either --content or --content-file is required")
    row = _add(Lesson(module_id=module_id, title=title, content=content, order_index=order_index))
    click.echo(f"lesson created: {row.id}")


@cli.group()
def task():
    """Manage tasks."""


@task.command("add")
@click.option("--lesson-id", type=click.UUID, required=True)
@click.option("--task-type", type=click.Choice(TASK_TYPES), required=True)
@click.option("--question", required=True)
@click.option("--explanation", required=True)
def task_add(lesson_id: UUID, task_type: str, question: str, explanation: str):
    row = _add(Task(lesson_id=lesson_id, task_type=task_type, question=question, explanation=explanation))
    click.echo(f"task created: {row.id}")


@cli.group()
def answer():
    """Manage task answers."""


@answer.command("add")
@click.option("--task-id", type=click.UUID, required=True)
@click.option("--text", "answer_text", required=True)
@click.option("--image", default="", help="Path relative to the uploads dir.")
@click.option("--correct/--wrong", "is_correct", default=False, show_default=True)
def answer_add(task_id: UUID, answer_text: str, image: str, is_correct: bool):
    row = _add(TaskAnswer(task_id=task_id, answer_text=answer_text, image=image, is_correct=is_correct))
    click.echo(f"answer created: {row.id}")


@cli.group("db")
def db_group():
    """Database schema."""


@db_group.command("upgrade")
@click.option("--revision", default="head", show_default=True)
def db_upgrade(revision: str):
    """Apply migrations up to REVISION."""
    from .migrations import upgrade

    upgrade(revision)
    click.echo(f"database upgraded to {revision}")


if __name__ == "__main__":
    cli()
