"""Fixtures for F1 tests - Schema and Record Store."""

from pathlib import Path

import pytest

from schoolbook.db.database import init_db
from schoolbook.db.students_repository import add_student


@pytest.fixture
def db_path(tmp_path) -> Path:
    """Fresh database with schema in a temporary directory."""
    path = tmp_path / "school.db"
    init_db(path)
    return path


@pytest.fixture
def ann(db_path):
    """Student S1 'Ann' in grade 10."""
    return add_student("S1", "Ann", "10")


@pytest.fixture
def bob(db_path):
    """Student S2 'Bob' in grade 11."""
    return add_student("S2", "Bob", "11")
