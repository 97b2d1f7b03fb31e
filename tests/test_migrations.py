from sqlalchemy import create_engine, inspect

from learning_service.infrastructure.db import Base
from learning_service.migrations import downgrade, upgrade


def test_upgrade_builds_full_schema(tmp_path):
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    upgrade("head", url=url)

    engine = create_engine(url)
    try:
        insp = inspect(engine)
        tables = set(insp.get_table_names()) - {"alembic_version"}
        assert tables == set(Base.metadata.tables)

        lesson_indexes = {ix["name"] for ix in insp.get_indexes("lessons")}
        assert {"idx_lessons_module_id", "idx_lessons_order_index", "idx_lessons_module_order"} <= lesson_indexes
    finally:
        engine.dispose()


def test_downgrade_to_base(tmp_path):
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    upgrade("head", url=url)
    downgrade("base", url=url)

    engine = create_engine(url)
    try:
        assert set(inspect(engine).get_table_names()) == {"alembic_version"}
    finally:
        engine.dispose()
