"""Fixtures for F3 tests - Reports, Configuration and CLI."""

import pytest

from schoolbook.config.app_config import clear_config_cache
from schoolbook.db.attendance_repository import record_attendance
from schoolbook.db.database import init_db
from schoolbook.db.grades_repository import record_grade
from schoolbook.db.students_repository import add_student


@pytest.fixture(autouse=True)
def fresh_config():
    """Reload configuration for every test."""
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def db_path(tmp_path):
    """Fresh database with schema in a temporary directory."""
    path = tmp_path / "school.db"
    init_db(path)
    return path


@pytest.fixture
def school(db_path):
    """Three students, two named Ann, with grades and January attendance.

    S1 'Ann': Math=80, Science=90; 2024-01-01 PRESENT, 2024-01-02 ABSENT
    S3 'Ann': Math=70;             2024-01-03 LATE
    S2 'Bob': nothing recorded
    """
    add_student("S2", "Bob", "11")
    add_student("S3", "Ann", "10")
    add_student("S1", "Ann", "10")

    record_grade("S1", "Math", 80)
    record_grade("S1", "Science", 90)
    record_grade("S3", "Math", 70)

    record_attendance("S1", "2024-01-01", "PRESENT")
    record_attendance("S1", "2024-01-02", "ABSENT")
    record_attendance("S3", "2024-01-03", "late")

    return db_path
