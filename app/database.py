from datetime import datetime, timezone

from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from app.config import settings


def _use_immediate_transactions(engine) -> None:
    """Let SQLAlchemy own SQLite transactions instead of pysqlite.

    Each transaction starts with BEGIN IMMEDIATE so the write lock is held
    before the first read; a count followed by an insert cannot interleave
    with another writer. Taking over BEGIN also makes SAVEPOINT work.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def make_engine(url: str, **kwargs):
    connect_args = kwargs.pop("connect_args", {})
    if url.startswith("sqlite"):
        connect_args.setdefault("check_same_thread", False)
    engine = create_engine(url, connect_args=connect_args, **kwargs)
    if engine.dialect.name == "sqlite":
        _use_immediate_transactions(engine)
    return engine


engine = make_engine(settings.database_url)
SessionLocal = sessionmaker(bind=engine)


class Base(DeclarativeBase):
    pass


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what CURRENT_TIMESTAMP stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
