"""SQLite database connection and schema management.

Provides connection management, explicit transactions and schema
initialization for the students, grades and attendance tables.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

from schoolbook.config.app_config import load_app_config
from schoolbook.utils.validators import StorageError

logger = structlog.get_logger(__name__)

# Current database file (module-level for simplicity in CLI context)
_db_path: Path | None = None


def get_db_path() -> Path:
    """Return the active database path (set by init_db, else from config)."""
    return _db_path or load_app_config().database.path


def init_db(db_path: Path | None = None) -> None:
    """Initialize database with schema.

    Creates the database file and all required tables if they don't exist.
    Safe to call on every startup: existing tables and rows are untouched.
    On failure the previously active database stays active.

    Args:
        db_path: Path to database file. Defaults to the configured path

    Raises:
        StorageError: If the schema cannot be created
    """
    global _db_path
    path = Path(db_path) if db_path is not None else load_app_config().database.path

    with get_db(path) as conn:
        _create_schema(conn)

    # Only a usable database becomes the active one
    _db_path = path
    logger.info("database.initialized", path=str(path))


@contextmanager
def get_db(db_path: Path | None = None) -> Generator[sqlite3.Connection, None, None]:
    """Get database connection as context manager.

    Commits on success, rolls back on any exception. SQLite errors are
    re-raised as StorageError; schoolbook errors pass through unchanged.

    Args:
        db_path: Database file to open. Defaults to the active path

    Yields:
        SQLite connection with row factory set to sqlite3.Row

    Example:
        with get_db() as conn:
            rows = conn.execute("SELECT * FROM students").fetchall()
    """
    db_path = db_path if db_path is not None else get_db_path()

    try:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(db_path)
    except (OSError, sqlite3.Error) as e:
        raise StorageError(f"Cannot open database {db_path}: {e}") from e

    conn.row_factory = sqlite3.Row

    try:
        conn.execute("PRAGMA foreign_keys = ON")
        yield conn
        conn.commit()
    except sqlite3.Error as e:
        conn.rollback()
        logger.warning("database.error", path=str(db_path), error=str(e))
        raise StorageError(str(e)) from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def transaction(conn: sqlite3.Connection) -> Generator[sqlite3.Connection, None, None]:
    """Run a block of statements as one explicit transaction.

    Switches the connection to autocommit mode, issues BEGIN, then COMMIT
    on success or ROLLBACK on any exception. The connection's previous
    isolation level is restored on every exit path.

    Example:
        with get_db() as conn, transaction(conn):
            conn.execute("DELETE FROM grades WHERE student_id = ?", (sid,))
            conn.execute("DELETE FROM students WHERE id = ?", (sid,))
    """
    previous = conn.isolation_level
    conn.commit()
    conn.isolation_level = None

    try:
        conn.execute("BEGIN")
        try:
            yield conn
        except BaseException:
            # The block may already have ended the transaction itself
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            logger.debug("database.rolled_back")
            raise
        conn.execute("COMMIT")
    finally:
        conn.isolation_level = previous


def _create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency.
    """
    conn.executescript(
        """
        -- Table: students (id is assigned by the caller, never generated)
        CREATE TABLE IF NOT EXISTS students (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            grade_level TEXT NOT NULL
        );

        -- Table: grades (one row per recorded score, history kept)
        CREATE TABLE IF NOT EXISTS grades (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            student_id TEXT NOT NULL,
            subject TEXT NOT NULL,
            score INTEGER NOT NULL CHECK(score BETWEEN 0 AND 100),
            FOREIGN KEY (student_id) REFERENCES students (id)
        );

        -- Table: attendance (one status per student and day)
        CREATE TABLE IF NOT EXISTS attendance (
            student_id TEXT NOT NULL,
            date TEXT NOT NULL,
            status TEXT NOT NULL CHECK(status IN ('PRESENT', 'ABSENT', 'LATE')),
            PRIMARY KEY (student_id, date),
            FOREIGN KEY (student_id) REFERENCES students (id)
        );

        -- Indexes
        CREATE INDEX IF NOT EXISTS idx_grades_student ON grades(student_id);
        CREATE INDEX IF NOT EXISTS idx_grades_student_subject ON grades(student_id, subject);
        CREATE INDEX IF NOT EXISTS idx_attendance_date ON attendance(date);
        """
    )
