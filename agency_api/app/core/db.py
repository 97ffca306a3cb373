"""
SQLite storage and a simple migration system.

This module provides connection helpers (``get_connection``,
``get_cursor``, ``immediate_transaction``), applies migrations on
application start (``init_db``) and records the applied versions in
the ``migrations`` table.

Entities are stored one row per document.  Users are referenced by id
everywhere without foreign keys, and list-valued fields such as a
project's ``employee_ids`` are stored as JSON text and queried with
SQLite's ``json_each``.

Every connection is opened with ``settings.db_timeout_seconds`` as its
busy timeout, which is the uniform per-operation storage timeout.
Driver errors are converted to ``ServiceError`` subclasses by the
context managers so callers only ever see the structured error kinds.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from .config import settings
from .errors import wrap_storage_error


logger = logging.getLogger(__name__)


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    If ``settings.database_url`` is an absolute path, use it directly.
    Otherwise resolve it relative to the package root.
    """
    db_url = settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # agency_api/
    return str((base_dir / db_url).resolve())


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` so columns can be accessed by
    name.  Timestamps are stored and returned as strings.
    """
    conn = sqlite3.connect(get_database_path(), timeout=settings.db_timeout_seconds)
    conn.row_factory = sqlite3.Row
    return conn


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string, the stored timestamp format."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


@contextmanager
def get_cursor(context: str = "storage") -> Iterator[sqlite3.Cursor]:
    """Yield a cursor, commit on success and close the connection on exit.

    ``context`` names the operation in wrapped storage errors.
    """
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    except sqlite3.Error as exc:
        conn.rollback()
        raise wrap_storage_error(exc, context) from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def immediate_transaction(context: str = "storage") -> Iterator[sqlite3.Cursor]:
    """Yield a cursor inside a ``BEGIN IMMEDIATE`` transaction.

    The write lock is taken before the first read, so a read-modify-write
    sequence executed on the cursor cannot interleave with another
    writer.  Everything is rolled back if the block raises.
    """
    conn = get_connection()
    try:
        cursor = conn.cursor()
        cursor.execute("BEGIN IMMEDIATE")
        yield cursor
        conn.commit()
    except sqlite3.Error as exc:
        conn.rollback()
        raise wrap_storage_error(exc, context) from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: initial schema
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS counters (
            name TEXT PRIMARY KEY,
            sequence INTEGER NOT NULL
        );

        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            email TEXT NOT NULL UNIQUE,
            password TEXT NOT NULL,
            name TEXT NOT NULL,
            phone TEXT,
            role TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'active',
            department TEXT,
            salary INTEGER,
            company TEXT,
            address TEXT,
            hide INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS projects (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            client_id TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'pending',
            progress INTEGER NOT NULL DEFAULT 0 CHECK (progress BETWEEN 0 AND 100),
            employee_ids TEXT NOT NULL DEFAULT '[]',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS service_requests (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            client_id TEXT NOT NULL,
            project_id TEXT,
            status TEXT NOT NULL DEFAULT 'pending',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS messages (
            id TEXT PRIMARY KEY,
            content TEXT NOT NULL,
            sender_id TEXT NOT NULL,
            project_id TEXT NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS service_types (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            status TEXT NOT NULL DEFAULT 'active',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );
        """,
    ),
    # Migration 2: lookup indices for scoped listings
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_users_role ON users(role);
        CREATE INDEX IF NOT EXISTS idx_projects_client_id ON projects(client_id);
        CREATE INDEX IF NOT EXISTS idx_service_requests_client_id ON service_requests(client_id);
        CREATE INDEX IF NOT EXISTS idx_messages_project_id ON messages(project_id);
        """,
    ),
]


def init_db() -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version and applies any newer entries of
    ``MIGRATIONS`` in order.  New migrations are appended with an
    incremented version number.
    """
    with get_cursor("apply migrations") as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        row = cursor.execute("SELECT MAX(version) AS version FROM migrations").fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
                logger.info("Applied migration %s", version)
                current_version = version


def like_pattern(term: str) -> str:
    """Escape ``term`` for a case-insensitive substring ``LIKE ... ESCAPE '\\'``."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def fetch_page(
    cursor: sqlite3.Cursor,
    table: str,
    where: list[str],
    params: list,
    order_by: str,
    page: int,
    page_size: int,
) -> tuple[list[sqlite3.Row], int]:
    """Run a filtered, ordered, paginated ``SELECT *`` on ``table``.

    ``where`` holds SQL conditions joined with ``AND``; ``params`` their
    positional values.  Returns the rows of the requested page and the
    total number of matching rows.
    """
    clause = f" WHERE {' AND '.join(where)}" if where else ""
    total = cursor.execute(f"SELECT COUNT(*) AS total FROM {table}{clause}", params).fetchone()["total"]
    rows = cursor.execute(
        f"SELECT * FROM {table}{clause} ORDER BY {order_by} LIMIT ? OFFSET ?",
        [*params, page_size, (page - 1) * page_size],
    ).fetchall()
    return rows, int(total)
