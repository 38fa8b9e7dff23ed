"""
SQLite database integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``), applying migrations on application start
(``init_db``) and the ``get_db`` dependency that hands each request
its own connection.  Identifiers are opaque strings generated by
``new_id``; timestamps are stored as ISO 8601 text normalised to UTC
so that lexical ordering matches chronological ordering.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from enum import Enum
from typing import Iterator, Optional

from fastapi import Request


logger = logging.getLogger(__name__)

SQLITE_URL_PREFIXES = ("sqlite:///", "file:")


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: Initial schema
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            email TEXT NOT NULL UNIQUE,
            password TEXT NOT NULL,
            name TEXT NOT NULL,
            avatar TEXT,
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS events (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            description TEXT,
            location TEXT,
            start_date TEXT NOT NULL,
            end_date TEXT,
            image_url TEXT,
            is_public INTEGER NOT NULL DEFAULT 0,
            owner_id TEXT NOT NULL,
            created_at TEXT NOT NULL,
            FOREIGN KEY(owner_id) REFERENCES users(id)
        );

        CREATE TABLE IF NOT EXISTS event_attendees (
            id TEXT PRIMARY KEY,
            event_id TEXT NOT NULL,
            user_id TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'PENDING',
            created_at TEXT NOT NULL,
            UNIQUE(event_id, user_id),
            FOREIGN KEY(event_id) REFERENCES events(id) ON DELETE CASCADE,
            FOREIGN KEY(user_id) REFERENCES users(id)
        );

        CREATE TABLE IF NOT EXISTS tasks (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            description TEXT,
            due_date TEXT,
            priority TEXT NOT NULL DEFAULT 'MEDIUM',
            is_completed INTEGER NOT NULL DEFAULT 0,
            event_id TEXT NOT NULL,
            assignee_id TEXT,
            created_at TEXT NOT NULL,
            FOREIGN KEY(event_id) REFERENCES events(id) ON DELETE CASCADE,
            FOREIGN KEY(assignee_id) REFERENCES users(id)
        );

        CREATE TABLE IF NOT EXISTS plans (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            description TEXT,
            due_date TEXT,
            priority TEXT NOT NULL DEFAULT 'MEDIUM',
            completed INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS categories (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL UNIQUE,
            color TEXT
        );

        CREATE TABLE IF NOT EXISTS event_categories (
            event_id TEXT NOT NULL,
            category_id TEXT NOT NULL,
            PRIMARY KEY(event_id, category_id),
            FOREIGN KEY(event_id) REFERENCES events(id) ON DELETE CASCADE,
            FOREIGN KEY(category_id) REFERENCES categories(id) ON DELETE CASCADE
        );
        """,
    ),
    # Migration 2: indices for the lookups the handlers perform
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_events_owner_id ON events(owner_id);
        CREATE INDEX IF NOT EXISTS idx_event_attendees_user_id ON event_attendees(user_id);
        CREATE INDEX IF NOT EXISTS idx_tasks_event_id ON tasks(event_id);
        CREATE INDEX IF NOT EXISTS idx_plans_created_at ON plans(created_at);
        """,
    ),
]


def get_database_path(database_url: str) -> str:
    """Turn ``DATABASE_URL`` into a filesystem path for ``sqlite3``.

    Accepts a bare path or one prefixed with ``sqlite:///``.  Each
    request opens its own connection, so in-memory databases are not
    supported.
    """
    for prefix in SQLITE_URL_PREFIXES:
        if database_url.startswith(prefix):
            database_url = database_url[len(prefix):]
            break
    return os.path.abspath(database_url)


def get_connection(database_url: str) -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` so columns can be accessed by
    name, and foreign key enforcement is switched on for the lifetime
    of the connection.

    FastAPI may open a request's connection on one threadpool worker
    and run the handler on another, so the same-thread check is off.
    A connection is still never shared between requests.
    """
    conn = sqlite3.connect(get_database_path(database_url), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def transaction(database_url: str) -> Iterator[sqlite3.Connection]:
    """Yield a short-lived connection for work outside a request.

    Commits when the block succeeds, rolls back when it raises, and
    always closes the connection.  Used by migrations and the CLI.
    """
    conn = get_connection(database_url)
    try:
        with conn:
            yield conn
    finally:
        conn.close()


def init_db(database_url: str) -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version and applies any entry of ``MIGRATIONS``
    with a higher version number.
    """
    with transaction(database_url) as conn:
        conn.execute("CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)")
        current_version = conn.execute("SELECT COALESCE(MAX(version), 0) FROM migrations").fetchone()[0]
        for version, sql in MIGRATIONS:
            if version <= current_version:
                continue
            conn.executescript(sql)
            conn.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
            logger.info("Applied migration %s", version)


def get_db(request: Request) -> Iterator[sqlite3.Connection]:
    """FastAPI dependency yielding a connection for the current request."""
    conn = get_connection(request.app.state.settings.database_url)
    try:
        yield conn
    finally:
        conn.close()


def update_row(conn: sqlite3.Connection, table: str, row_id: str, updates: dict) -> None:
    """Write ``updates`` (column -> value) to the row ``row_id`` of ``table``.

    Only the given columns are touched.  Booleans are stored as 0/1 and
    datetimes through ``to_db_datetime``.  Column names come from
    schema field names, never from client-supplied keys.
    """
    if not updates:
        return
    fields = []
    values = []
    for key, value in updates.items():
        fields.append(f"{key} = ?")
        if isinstance(value, bool):
            values.append(1 if value else 0)
        elif isinstance(value, datetime):
            values.append(to_db_datetime(value))
        elif isinstance(value, Enum):
            values.append(value.value)
        else:
            values.append(value)
    values.append(row_id)
    conn.execute(f"UPDATE {table} SET {', '.join(fields)} WHERE id = ?", tuple(values))
    conn.commit()


def new_id() -> str:
    return uuid.uuid4().hex


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def to_db_datetime(value: Optional[datetime]) -> Optional[str]:
    """Serialise a datetime for storage; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()
