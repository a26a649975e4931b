"""
SQL engine and the two tables behind the SQL key-value store.

kv_records holds one JSON value per key (streak records, task lists, day
markers). kv_list_items holds append-only JSON entries per key (the
activity log), ordered by insertion id.

The engine is created lazily from TEST_DATABASE_URL (when set) or
DATABASE_URL. SQLite URLs are accepted for local runs and tests.
"""
import logging
import os
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import JSON, Column, DateTime, Index, Integer, MetaData, String, Table, create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.sql import func

from nutritrack.core.config import settings

logger = logging.getLogger("nutritrack")

metadata = MetaData()

kv_records = Table(
    "kv_records",
    metadata,
    Column("key", String(255), primary_key=True),
    Column("value", JSON, nullable=True),
    Column("updated_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
)

kv_list_items = Table(
    "kv_list_items",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("key", String(255), nullable=False, index=True),
    Column("value", JSON, nullable=False),
    Column("created_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
    Index("idx_kv_list_items_key_id", "key", "id"),
)

# Pool sizing for server databases; SQLite keeps SQLAlchemy's defaults
SERVER_POOL_OPTIONS = {
    "pool_size": 5,
    "max_overflow": 10,
    "pool_timeout": 30,
    "pool_recycle": 1800,
    "pool_pre_ping": True,
}

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def get_database_url() -> Optional[str]:
    """TEST_DATABASE_URL wins over DATABASE_URL so tests never touch real data."""
    return os.getenv("TEST_DATABASE_URL") or settings.DATABASE_URL


def init_engine(database_url: Optional[str] = None) -> Engine:
    global _engine, _session_factory

    url = database_url or get_database_url()
    if not url:
        raise ValueError("No database configured: set DATABASE_URL (or TEST_DATABASE_URL in tests)")

    options = {} if url.startswith("sqlite") else SERVER_POOL_OPTIONS
    _engine = create_engine(url, **options)
    _session_factory = sessionmaker(bind=_engine, autoflush=False)
    logger.info("database.engine_ready", extra={"dialect": _engine.dialect.name})
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        return init_engine()
    return _engine


def dispose_engine() -> None:
    """Drop the cached engine so the next call rebuilds it. FOR TESTING ONLY."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


@contextmanager
def get_db_session() -> Iterator[Session]:
    """One transaction: commit on success, roll back and re-raise on error."""
    if _session_factory is None:
        init_engine()
    session = _session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def create_all_tables() -> None:
    metadata.create_all(bind=get_engine())


def check_connection() -> bool:
    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as exc:
        logger.warning("database.unreachable", extra={"error_message": str(exc)})
        return False
    return True
