"""Repository functions for the attendance table.

Attendance is keyed on (student_id, date): recording a day twice replaces
the earlier status.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

import structlog

from schoolbook.db.database import get_db
from schoolbook.db.students_repository import require_student
from schoolbook.utils.validators import (
    normalize_status,
    normalize_student_id,
    parse_date,
)

logger = structlog.get_logger(__name__)


@dataclass
class AttendanceRow:
    """One attendance fact joined with its student's name."""

    student_id: str
    name: str
    day: date
    status: str


def record_attendance(student_id: str, day: date | str, status: str) -> str:
    """Record (or replace) a student's status for one day.

    Args:
        student_id: Existing student ID
        day: Calendar date or 'YYYY-MM-DD' string
        status: PRESENT, ABSENT or LATE in any case

    Returns:
        Canonical status that was stored

    Raises:
        ValidationError: If status or date is invalid
        NotFoundError: If student doesn't exist
    """
    student_id = normalize_student_id(student_id)
    canonical = normalize_status(status)
    day = parse_date(day)

    with get_db() as conn:
        require_student(conn, student_id)
        conn.execute(
            """
            INSERT INTO attendance (student_id, date, status) VALUES (?, ?, ?)
            ON CONFLICT (student_id, date) DO UPDATE SET status = excluded.status
            """,
            (student_id, day.isoformat(), canonical),
        )

    logger.debug(
        "attendance.upserted",
        student_id=student_id,
        date=day.isoformat(),
        status=canonical,
    )
    return canonical


def get_attendance_in_range(
    student_id: str, start: date, end: date
) -> list[tuple[date, str]]:
    """Get one student's attendance within an inclusive range.

    Returns:
        List of (date, status) in ascending date order

    Raises:
        NotFoundError: If student doesn't exist
    """
    student_id = normalize_student_id(student_id)

    with get_db() as conn:
        require_student(conn, student_id)
        rows = conn.execute(
            """
            SELECT date, status FROM attendance
            WHERE student_id = ? AND date BETWEEN ? AND ?
            ORDER BY date ASC
            """,
            (student_id, start.isoformat(), end.isoformat()),
        ).fetchall()

    return [(date.fromisoformat(row["date"]), row["status"]) for row in rows]


def get_attendance_joined_in_range(start: date, end: date) -> list[AttendanceRow]:
    """Get attendance for all students within an inclusive range.

    Inner join: students without rows in the range are not returned.

    Returns:
        List of AttendanceRow ordered by name, student ID, then date
    """
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT s.id, s.name, a.date, a.status
            FROM students s
            JOIN attendance a ON s.id = a.student_id
            WHERE a.date BETWEEN ? AND ?
            ORDER BY s.name ASC, s.id ASC, a.date ASC
            """,
            (start.isoformat(), end.isoformat()),
        ).fetchall()

    return [
        AttendanceRow(
            student_id=row["id"],
            name=row["name"],
            day=date.fromisoformat(row["date"]),
            status=row["status"],
        )
        for row in rows
    ]


def count_attendance(student_id: str) -> int:
    """Count attendance rows referencing a student (existing or not)."""
    student_id = normalize_student_id(student_id)
    with get_db() as conn:
        row = conn.execute(
            "SELECT COUNT(*) AS n FROM attendance WHERE student_id = ?",
            (student_id,),
        ).fetchone()
    return row["n"]
