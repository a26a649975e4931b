"""
SQL adapter for the persistence facade.

Single values live in kv_records (one row per key, upserted); list values
are rows in kv_list_items so an append is a single INSERT.
"""

import logging
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from sqlalchemy import select, update, insert
from sqlalchemy.exc import SQLAlchemyError

from nutritrack.core.database import create_all_tables, get_db_session, kv_list_items, kv_records
from nutritrack.core.errors import PersistenceError

logger = logging.getLogger("nutritrack")


class SqlStore:
    def __init__(self, create_tables: bool = True):
        if create_tables:
            try:
                create_all_tables()
            except SQLAlchemyError as exc:
                raise PersistenceError(f"Could not create storage tables: {exc}") from exc

    def read(self, key: str) -> Optional[Any]:
        try:
            with get_db_session() as session:
                row = session.execute(
                    select(kv_records.c.value).where(kv_records.c.key == key)
                ).first()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Read failed for {key}: {exc}") from exc
        return row[0] if row is not None else None

    def write(self, key: str, value: Any) -> bool:
        now = datetime.now(timezone.utc)
        try:
            with get_db_session() as session:
                result = session.execute(
                    update(kv_records)
                    .where(kv_records.c.key == key)
                    .values(value=value, updated_at=now)
                )
                if result.rowcount == 0:
                    session.execute(insert(kv_records).values(key=key, value=value, updated_at=now))
        except (SQLAlchemyError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Write failed for {key}: {exc}") from exc
        return True

    def append(self, key: str, item: Any) -> bool:
        try:
            with get_db_session() as session:
                session.execute(
                    insert(kv_list_items).values(key=key, value=item, created_at=datetime.now(timezone.utc))
                )
        except (SQLAlchemyError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Append failed for {key}: {exc}") from exc
        return True

    def read_list(self, key: str, match: Optional[Mapping[str, str]] = None) -> List[Any]:
        query = select(kv_list_items.c.value).where(kv_list_items.c.key == key)
        for field, value in (match or {}).items():
            query = query.where(kv_list_items.c.value[field].as_string() == value)
        try:
            with get_db_session() as session:
                rows = session.execute(query.order_by(kv_list_items.c.id)).all()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Read failed for {key}: {exc}") from exc
        return [row[0] for row in rows]
