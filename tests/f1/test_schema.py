"""Tests for schema initialization and connection handling (F1)."""

import sqlite3

import pytest

from schoolbook.db.database import get_db, get_db_path, init_db, transaction
from schoolbook.db.students_repository import add_student, find_student_by_id
from schoolbook.utils.validators import StorageError


def _table_names(path) -> set[str]:
    conn = sqlite3.connect(path)
    try:
        rows = conn.execute(
            "SELECT name FROM sqlite_master WHERE type = 'table'"
        ).fetchall()
    finally:
        conn.close()
    return {row[0] for row in rows}


class TestInitDb:
    """Tests for init_db."""

    def test_creates_tables(self, db_path):
        """Creates students, grades and attendance tables."""
        assert {"students", "grades", "attendance"} <= _table_names(db_path)

    def test_sets_active_path(self, db_path):
        """Active path points at the initialized file."""
        assert get_db_path() == db_path

    def test_creates_parent_directory(self, tmp_path):
        """Missing parent directories are created."""
        path = tmp_path / "nested" / "dir" / "school.db"
        init_db(path)
        assert path.exists()

    def test_repeated_init_keeps_data(self, db_path):
        """Calling init_db again doesn't drop or alter existing rows."""
        add_student("S1", "Ann", "10")

        init_db(db_path)
        init_db(db_path)

        assert find_student_by_id("S1").name == "Ann"

    def test_unusable_path_raises_storage_error(self, tmp_path):
        """Schema failure is surfaced, not swallowed."""
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("x")

        with pytest.raises(StorageError):
            init_db(blocker / "school.db")

    def test_failed_init_keeps_previous_path(self, db_path, tmp_path):
        """A database that cannot be initialized never becomes the active one."""
        add_student("S1", "Ann", "10")
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("x")

        with pytest.raises(StorageError):
            init_db(blocker / "school.db")

        assert get_db_path() == db_path
        assert find_student_by_id("S1").name == "Ann"


class TestGetDb:
    """Tests for get_db context manager."""

    def test_foreign_keys_enabled(self, db_path):
        """Connections enforce foreign keys."""
        with get_db() as conn:
            assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1

    def test_sqlite_error_becomes_storage_error(self, db_path):
        """SQLite failures are re-raised as StorageError."""
        with pytest.raises(StorageError):
            with get_db() as conn:
                conn.execute("SELECT * FROM no_such_table")

    def test_exception_rolls_back(self, db_path):
        """Writes are discarded when the block raises."""
        with pytest.raises(RuntimeError):
            with get_db() as conn:
                conn.execute(
                    "INSERT INTO students (id, name, grade_level) VALUES ('S9', 'X', '1')"
                )
                raise RuntimeError("boom")

        with get_db() as conn:
            assert conn.execute("SELECT COUNT(*) FROM students").fetchone()[0] == 0

    def test_score_check_constraint(self, db_path):
        """Out-of-range scores are rejected by the table itself."""
        add_student("S1", "Ann", "10")
        with pytest.raises(StorageError):
            with get_db() as conn:
                conn.execute(
                    "INSERT INTO grades (student_id, subject, score) VALUES ('S1', 'Math', 101)"
                )


class TestTransaction:
    """Tests for explicit transactions."""

    def test_commit_on_success(self, db_path):
        """Statements are committed when the block completes."""
        conn = sqlite3.connect(db_path)
        try:
            with transaction(conn):
                conn.execute(
                    "INSERT INTO students (id, name, grade_level) VALUES ('S1', 'Ann', '10')"
                )
        finally:
            conn.close()

        assert find_student_by_id("S1").name == "Ann"

    def test_rollback_on_error(self, db_path):
        """Every statement in the block is undone on error."""
        conn = sqlite3.connect(db_path)
        try:
            with pytest.raises(RuntimeError):
                with transaction(conn):
                    conn.execute(
                        "INSERT INTO students (id, name, grade_level) VALUES ('S1', 'Ann', '10')"
                    )
                    conn.execute(
                        "INSERT INTO students (id, name, grade_level) VALUES ('S2', 'Bob', '11')"
                    )
                    raise RuntimeError("boom")
            count = conn.execute("SELECT COUNT(*) FROM students").fetchone()[0]
        finally:
            conn.close()

        assert count == 0

    @pytest.mark.parametrize("fail", [False, True])
    def test_isolation_level_restored(self, db_path, fail):
        """Previous isolation level is restored on every exit path."""
        conn = sqlite3.connect(db_path)
        conn.isolation_level = "DEFERRED"
        try:
            try:
                with transaction(conn):
                    assert conn.isolation_level is None
                    if fail:
                        raise ValueError("boom")
            except ValueError:
                pass
            assert conn.isolation_level == "DEFERRED"
        finally:
            conn.close()

    def test_block_that_ended_transaction_keeps_its_error(self, db_path):
        """An error raised after the block rolled back itself is not masked."""
        conn = sqlite3.connect(db_path)
        try:
            with pytest.raises(RuntimeError, match="after rollback"):
                with transaction(conn):
                    conn.execute(
                        "INSERT INTO students (id, name, grade_level) VALUES ('S1', 'Ann', '10')"
                    )
                    conn.execute("ROLLBACK")
                    raise RuntimeError("after rollback")
            count = conn.execute("SELECT COUNT(*) FROM students").fetchone()[0]
        finally:
            conn.close()

        assert count == 0
