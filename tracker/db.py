"""
SQL-backed document and credential stores.

Accepts any SQLAlchemy URL (Postgres/Supabase in production, SQLite for
tests). Each tenant has its own `<key>_progress` table holding a single row
with id 1; saves upsert that row so concurrent writers resolve last-write-wins.
"""

from __future__ import annotations

import re
import threading
import time
from typing import Dict, Optional

from sqlalchemy import (
    JSON,
    Column,
    Float,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    select,
)
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from tracker.tenants import Identity

PROGRESS_ROW_ID = 1
_TABLE_NAME_RE = re.compile(r"^[A-Za-z0-9_]+$")


def _make_engine(database_url: str):
    if not database_url:
        raise ValueError("database_url is required for the SQL stores")
    return create_engine(
        database_url,
        future=True,
        pool_pre_ping=True,
        pool_recycle=1800,
    )


class SqlDocumentStore:
    """Per-tenant progress tables, created on first use."""

    def __init__(self, database_url: str):
        self.engine = _make_engine(database_url)
        self.metadata = MetaData()
        self._tables: Dict[str, Table] = {}
        self._tables_lock = threading.Lock()

    @staticmethod
    def table_name(key: str) -> str:
        if not _TABLE_NAME_RE.match(key):
            raise ValueError(f"Unsafe tenant key for table name: {key!r}")
        return f"{key}_progress"

    def _table(self, key: str) -> Table:
        name = self.table_name(key)
        with self._tables_lock:
            table = self._tables.get(key)
            if table is not None:
                return table
            table = Table(
                name,
                self.metadata,
                Column("id", Integer, primary_key=True, autoincrement=False),
                Column("data", JSON, nullable=False),
                Column("updated_at", Float, nullable=False),
            )
            table.create(self.engine, checkfirst=True)
            self._tables[key] = table
            return table

    def load(self, key: str) -> Optional[dict]:
        table = self._table(key)
        with self.engine.connect() as conn:
            row = conn.execute(
                select(table.c.data).where(table.c.id == PROGRESS_ROW_ID)
            ).first()
        return row.data if row else None

    def save(self, key: str, doc: dict) -> None:
        table = self._table(key)
        values = {"id": PROGRESS_ROW_ID, "data": doc, "updated_at": time.time()}
        dialect = self.engine.dialect.name
        with self.engine.begin() as conn:
            if dialect in ("postgresql", "sqlite"):
                insert = postgresql_insert if dialect == "postgresql" else sqlite_insert
                stmt = insert(table).values(**values)
                conn.execute(
                    stmt.on_conflict_do_update(
                        index_elements=[table.c.id],
                        set_={
                            "data": stmt.excluded["data"],
                            "updated_at": stmt.excluded["updated_at"],
                        },
                    )
                )
                return
            existing = conn.execute(
                select(table.c.id).where(table.c.id == PROGRESS_ROW_ID)
            ).first()
            if existing:
                conn.execute(
                    table.update()
                    .where(table.c.id == PROGRESS_ROW_ID)
                    .values(data=doc, updated_at=values["updated_at"])
                )
            else:
                conn.execute(table.insert().values(**values))


Base = declarative_base()


class UserRow(Base):
    __tablename__ = "users"

    username = Column(String, primary_key=True)
    password = Column(String, nullable=False)
    user_type = Column(String, nullable=False)


class SqlCredentialStore:
    """Looks up login accounts in the `users` table."""

    def __init__(self, database_url: str):
        self.engine = _make_engine(database_url)
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def add_user(self, username: str, password: str, user_type: str) -> None:
        with self.Session() as session:
            existing = session.get(UserRow, username)
            if existing:
                existing.password = password
                existing.user_type = user_type
            else:
                session.add(
                    UserRow(username=username, password=password, user_type=user_type)
                )
            session.commit()

    def find(self, username: str, password: str) -> Optional[Identity]:
        # Plaintext comparison, matching how the accounts are stored.
        with self.Session() as session:
            stmt = select(UserRow).where(
                UserRow.username == username, UserRow.password == password
            )
            row = session.execute(stmt).scalar_one_or_none()
            if not row:
                return None
            return Identity(username=row.username, user_type=row.user_type)
