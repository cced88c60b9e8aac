# project_service/db.py
# Database abstraction layer supporting PostgreSQL (production) and SQLite (dev)

import sqlite3
from contextlib import contextmanager
from pathlib import Path as FsPath
from typing import Any, Dict, Generator, Optional, Union
from urllib.parse import urlparse

from sqlalchemy import create_engine, pool, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError as SAIntegrityError

from project_service.config import DATABASE_PATH, DATABASE_URL, IS_POSTGRES

# Global engine (SQLAlchemy) or None for SQLite
_engine: Union[Engine, None] = None

# Constraint violations from either backend (unique live project_code)
INTEGRITY_ERRORS = (sqlite3.IntegrityError, SAIntegrityError)


def init_engine() -> None:
    """Initialize SQLAlchemy engine for PostgreSQL if DATABASE_URL is set."""
    global _engine

    if not IS_POSTGRES:
        # SQLite mode - no engine needed
        _engine = None
        print("[DB] Using SQLite (local dev mode)")
        return

    parsed = urlparse(DATABASE_URL)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(f"Invalid DATABASE_URL: {DATABASE_URL[:20]}...")

    # SQLAlchemy only accepts the postgresql:// dialect name
    url = DATABASE_URL
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]

    _engine = create_engine(
        url,
        poolclass=pool.QueuePool,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        echo=False,
    )

    print(f"[DB] Using PostgreSQL ({parsed.hostname})")


def resolve_sqlite_path(db_path: Optional[str] = None) -> str:
    """Resolve the SQLite file; relative paths live next to this package."""
    path = FsPath(db_path or DATABASE_PATH)
    if not path.is_absolute():
        path = FsPath(__file__).resolve().parent / path
    return str(path)


@contextmanager
def get_db_connection(db_path: Optional[str] = None) -> Generator[Union[sqlite3.Connection, Connection], None, None]:
    """
    Context manager for database connections.
    Returns sqlite3.Connection for SQLite or sqlalchemy.Connection for Postgres.

    Args:
        db_path: SQLite file override (ignored in Postgres mode)
    """
    if IS_POSTGRES:
        if _engine is None:
            init_engine()

        with _engine.connect() as conn:
            yield conn
    else:
        conn = sqlite3.connect(resolve_sqlite_path(db_path), check_same_thread=False)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()


def execute_query(
    conn: Union[sqlite3.Connection, Connection],
    query: str,
    params: Optional[Dict[str, Any]] = None,
) -> Any:
    """
    Execute a query with named parameters (:name).
    Both sqlite3 and SQLAlchemy's text() accept the same placeholder style,
    so callers write their SQL once.

    Returns:
        Cursor (SQLite) or Result (PostgreSQL)
    """
    if IS_POSTGRES:
        return conn.execute(text(query), params or {})

    cur = conn.cursor()
    return cur.execute(query, params or {})


def insert_returning_id(
    conn: Union[sqlite3.Connection, Connection],
    query: str,
    params: Dict[str, Any],
) -> int:
    """Run an INSERT and return the generated primary key."""
    if IS_POSTGRES:
        result = conn.execute(text(query + " RETURNING id"), params)
        return int(result.scalar_one())

    cur = conn.cursor()
    cur.execute(query, params)
    return int(cur.lastrowid)


def commit(conn: Union[sqlite3.Connection, Connection]) -> None:
    """Commit transaction (sqlite3 and SQLAlchemy 2.x connections share the call)."""
    conn.commit()


def rollback(conn: Union[sqlite3.Connection, Connection]) -> None:
    """Rollback transaction."""
    conn.rollback()


def row_to_dict(row: Any) -> dict:
    """
    Convert a sqlite3.Row or SQLAlchemy Row to a plain dict.
    Returns {} for None.
    """
    if row is None:
        return {}
    if hasattr(row, "_mapping"):
        return dict(row._mapping)
    return dict(row)


# ---------------------------------------------------------
# Schema
# ---------------------------------------------------------
def init_db(db_path: Optional[str] = None) -> None:
    """Create the projects table and its indexes (idempotent)."""
    id_column = "id SERIAL PRIMARY KEY" if IS_POSTGRES else "id INTEGER PRIMARY KEY AUTOINCREMENT"

    with get_db_connection(db_path) as conn:
        execute_query(
            conn,
            f"""
            CREATE TABLE IF NOT EXISTS projects (
                {id_column},
                project_code TEXT NOT NULL,
                project_name TEXT NOT NULL,
                assigned_manager TEXT NOT NULL,
                start_date TEXT,
                end_date TEXT,
                project_detail TEXT,
                project_status TEXT NOT NULL,
                is_deleted INTEGER NOT NULL DEFAULT 0,
                inserted_at TEXT,
                inserted_by TEXT,
                last_updated_at TEXT,
                last_updated_by TEXT
            )
            """,
        )

        # Codes are unique among live rows only; deleted rows carry "<code>-<id>"
        execute_query(
            conn,
            "CREATE UNIQUE INDEX IF NOT EXISTS idx_projects_live_code "
            "ON projects(project_code) WHERE is_deleted = 0",
        )
        execute_query(
            conn,
            "CREATE INDEX IF NOT EXISTS idx_projects_manager ON projects(assigned_manager)",
        )
        commit(conn)

    print("[MIGRATION] Ensured projects table and indexes")


# Initialize engine on module import if Postgres mode
if IS_POSTGRES and _engine is None:
    init_engine()
