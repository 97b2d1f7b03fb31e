"""lookup indexes for lessons, progress, modules and tasks

Revision ID: 0003_indexes
Revises: 0002_progress_tokens
Create Date: 2025-10-05 14:06:20
"""
from alembic import op

revision = "0003_indexes"
down_revision = "0002_progress_tokens"
branch_labels = None
depends_on = None

# (name, table, columns); user_progress(user_id, lesson_id) is covered by its unique constraint
INDEXES = [
    ("idx_lessons_module_id", "lessons", ["module_id"]),
    ("idx_lessons_order_index", "lessons", ["order_index"]),
    ("idx_lessons_module_order", "lessons", ["module_id", "order_index"]),
    ("idx_user_progress_lesson_user", "user_progress", ["lesson_id", "user_id"]),
    ("idx_user_progress_user_status", "user_progress", ["user_id", "status"]),
    ("idx_modules_order_index", "modules", ["order_index"]),
    ("idx_tasks_lesson_id", "tasks", ["lesson_id"]),
]


def upgrade() -> None:
    for name, table, columns in INDEXES:
        op.create_index(name, table, columns)


def downgrade() -> None:
    for name, table, _ in reversed(INDEXES):
        op.drop_index(name, table_name=table)
