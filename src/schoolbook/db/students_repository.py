"""Repository functions for the students table.

Provides CRUD operations for students. Every StudentRecord returned here is
fully populated with its grades and attendance, so callers never see a
partially loaded student.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from datetime import date

import structlog

from schoolbook.db.database import get_db, transaction
from schoolbook.utils.validators import (
    DuplicateIdError,
    NotFoundError,
    normalize_student_id,
    require_text,
)

logger = structlog.get_logger(__name__)


@dataclass
class StudentRecord:
    """Student record from database, with dependent rows loaded."""

    student_id: str
    name: str
    grade_level: str
    grades: dict[str, list[int]] = field(default_factory=dict)
    attendance: dict[date, str] = field(default_factory=dict)

    @property
    def grade_count(self) -> int:
        """Total number of scores recorded across all subjects."""
        return sum(len(scores) for scores in self.grades.values())

    def add_grade(self, subject: str, score: int) -> None:
        self.grades.setdefault(subject, []).append(score)


def require_student(conn: sqlite3.Connection, student_id: str) -> None:
    """Check that a student exists on the given connection.

    Raises:
        NotFoundError: If no student has this ID
    """
    student_id = normalize_student_id(student_id)
    row = conn.execute(
        "SELECT 1 FROM students WHERE id = ?", (student_id,)
    ).fetchone()
    if row is None:
        raise NotFoundError(student_id)


def add_student(student_id: str, name: str, grade_level: str) -> StudentRecord:
    """Insert a new student.

    Args:
        student_id: Caller-assigned unique ID
        name: Student name
        grade_level: Grade band (e.g. "10")

    Returns:
        The new StudentRecord (no grades or attendance yet)

    Raises:
        ValidationError: If any field is empty
        DuplicateIdError: If student_id already exists
    """
    student_id = normalize_student_id(student_id)
    name = require_text(name, "Name")
    grade_level = require_text(grade_level, "Grade level")

    with get_db() as conn:
        existing = conn.execute(
            "SELECT 1 FROM students WHERE id = ?", (student_id,)
        ).fetchone()
        if existing is not None:
            raise DuplicateIdError(student_id)

        conn.execute(
            "INSERT INTO students (id, name, grade_level) VALUES (?, ?, ?)",
            (student_id, name, grade_level),
        )

    logger.debug("students.inserted", student_id=student_id)
    return StudentRecord(student_id=student_id, name=name, grade_level=grade_level)


def get_student(student_id: str) -> StudentRecord | None:
    """Get a fully populated student by ID.

    Args:
        student_id: Student identifier

    Returns:
        StudentRecord if found, None otherwise
    """
    student_id = normalize_student_id(student_id)

    with get_db() as conn:
        row = conn.execute(
            "SELECT id, name, grade_level FROM students WHERE id = ?",
            (student_id,),
        ).fetchone()

        if row is None:
            return None

        record = _row_to_record(row)

        grade_rows = conn.execute(
            "SELECT subject, score FROM grades WHERE student_id = ? ORDER BY id",
            (student_id,),
        ).fetchall()
        attendance_rows = conn.execute(
            "SELECT date, status FROM attendance WHERE student_id = ? ORDER BY date",
            (student_id,),
        ).fetchall()

    for grade_row in grade_rows:
        record.add_grade(grade_row["subject"], grade_row["score"])
    for att_row in attendance_rows:
        record.attendance[date.fromisoformat(att_row["date"])] = att_row["status"]

    return record


def find_student_by_id(student_id: str) -> StudentRecord:
    """Get a fully populated student by ID.

    Raises:
        NotFoundError: If no student has this ID
    """
    student_id = normalize_student_id(student_id)
    record = get_student(student_id)
    if record is None:
        raise NotFoundError(student_id)
    return record


def list_all_students() -> list[StudentRecord]:
    """Get all students with their grades and attendance.

    Runs one query per table and joins the rows in memory, so the number
    of queries does not grow with the number of students.

    Returns:
        List of StudentRecord ordered by name, then ID
    """
    with get_db() as conn:
        student_rows = conn.execute(
            "SELECT id, name, grade_level FROM students ORDER BY name, id"
        ).fetchall()
        grade_rows = conn.execute(
            "SELECT student_id, subject, score FROM grades ORDER BY id"
        ).fetchall()
        attendance_rows = conn.execute(
            "SELECT student_id, date, status FROM attendance ORDER BY date"
        ).fetchall()

    records = [_row_to_record(row) for row in student_rows]
    by_id = {record.student_id: record for record in records}

    for row in grade_rows:
        record = by_id.get(row["student_id"])
        if record is not None:
            record.add_grade(row["subject"], row["score"])

    for row in attendance_rows:
        record = by_id.get(row["student_id"])
        if record is not None:
            record.attendance[date.fromisoformat(row["date"])] = row["status"]

    return records


def update_student(student_id: str, name: str, grade_level: str) -> StudentRecord:
    """Update a student's name and grade level. The ID never changes.

    Returns:
        The updated, fully populated StudentRecord

    Raises:
        ValidationError: If name or grade_level is empty
        NotFoundError: If student doesn't exist
    """
    student_id = normalize_student_id(student_id)
    name = require_text(name, "Name")
    grade_level = require_text(grade_level, "Grade level")

    with get_db() as conn:
        cursor = conn.execute(
            "UPDATE students SET name = ?, grade_level = ? WHERE id = ?",
            (name, grade_level, student_id),
        )

        if cursor.rowcount == 0:
            raise NotFoundError(student_id)

    logger.debug("students.updated", student_id=student_id)
    return find_student_by_id(student_id)


def delete_student(student_id: str) -> None:
    """Delete a student together with all of its grades and attendance.

    The three deletes run in one transaction: if any of them fails,
    nothing is removed.

    Raises:
        NotFoundError: If student doesn't exist
        StorageError: If the database fails mid-sequence (all rolled back)
    """
    student_id = normalize_student_id(student_id)

    with get_db() as conn, transaction(conn):
        require_student(conn, student_id)

        grades = conn.execute(
            "DELETE FROM grades WHERE student_id = ?", (student_id,)
        ).rowcount
        attendance = conn.execute(
            "DELETE FROM attendance WHERE student_id = ?", (student_id,)
        ).rowcount
        conn.execute("DELETE FROM students WHERE id = ?", (student_id,))

    logger.debug(
        "students.deleted",
        student_id=student_id,
        grades=grades,
        attendance=attendance,
    )


def _row_to_record(row) -> StudentRecord:
    """Convert database row to StudentRecord."""
    return StudentRecord(
        student_id=row["id"],
        name=row["name"],
        grade_level=row["grade_level"],
    )
