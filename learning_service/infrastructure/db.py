import sqlite3

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from ..config import settings


class Base(DeclarativeBase): pass


def build_engine(url: str) -> Engine:
    connect_args = {}
    pool_args = {}
    if url.startswith("postgresql"):
        connect_args = {"client_encoding": "utf8"}
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
    else:
        pool_args = {"pool_size": 10, "max_overflow": 20, "pool_recycle": 3600}

    return create_engine(
        url,
        pool_pre_ping=True,
        connect_args=connect_args,
        echo=False,
        **pool_args,
    )


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # cascades on sqlite only fire with this pragma on
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = build_engine(settings.app.database_uri)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def init_db(bind: Engine | None = None) -> None:
    from . import models  # noqa: F401  registers tables on Base.metadata

    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    with bind.connect() as conn:
        conn.execute(text("SELECT 1"))


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
