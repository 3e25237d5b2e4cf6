"""Fixtures for F2 tests - Aggregation Engine."""

import pytest

from schoolbook.db.attendance_repository import record_attendance
from schoolbook.db.database import init_db
from schoolbook.db.grades_repository import record_grade
from schoolbook.db.students_repository import add_student


@pytest.fixture
def db_path(tmp_path):
    """Fresh database with schema in a temporary directory."""
    path = tmp_path / "school.db"
    init_db(path)
    return path


@pytest.fixture
def classroom(db_path):
    """Two students: S1 with grades and attendance, S2 with neither.

    S1 'Ann': Math=80, Science=90; PRESENT on 2024-01-01, ABSENT on 2024-01-02
    S2 'Bob': nothing recorded
    """
    add_student("S1", "Ann", "10")
    add_student("S2", "Bob", "10")

    record_grade("S1", "Math", 80)
    record_grade("S1", "Science", 90)
    record_attendance("S1", "2024-01-01", "PRESENT")
    record_attendance("S1", "2024-01-02", "ABSENT")

    return db_path
