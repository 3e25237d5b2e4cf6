"""Repository functions for the grades table.

Grades are stored one row per recorded score. Several rows for the same
subject form that subject's score history.
"""

from __future__ import annotations

import structlog

from schoolbook.db.database import get_db
from schoolbook.db.students_repository import require_student
from schoolbook.utils.validators import (
    normalize_student_id,
    require_text,
    validate_score,
)

logger = structlog.get_logger(__name__)


def record_grade(student_id: str, subject: str, score: int) -> None:
    """Append one score for a student and subject.

    Args:
        student_id: Existing student ID
        subject: Subject name (e.g. "Math")
        score: Integer score in [0, 100]

    Raises:
        ValidationError: If score is out of range or subject is empty
        NotFoundError: If student doesn't exist
    """
    student_id = normalize_student_id(student_id)
    score = validate_score(score)
    subject = require_text(subject, "Subject")

    with get_db() as conn:
        require_student(conn, student_id)
        conn.execute(
            "INSERT INTO grades (student_id, subject, score) VALUES (?, ?, ?)",
            (student_id, subject, score),
        )

    logger.debug("grades.recorded", student_id=student_id, subject=subject, score=score)


def get_scores(student_id: str, subject: str | None = None) -> list[int]:
    """Get raw scores for a student in the order they were recorded.

    Args:
        student_id: Student ID
        subject: Restrict to one subject; None returns all subjects

    Returns:
        List of scores (empty if none recorded)

    Raises:
        NotFoundError: If student doesn't exist
    """
    student_id = normalize_student_id(student_id)

    with get_db() as conn:
        require_student(conn, student_id)

        if subject is None:
            rows = conn.execute(
                "SELECT score FROM grades WHERE student_id = ? ORDER BY id",
                (student_id,),
            ).fetchall()
        else:
            rows = conn.execute(
                "SELECT score FROM grades WHERE student_id = ? AND subject = ? ORDER BY id",
                (student_id, subject.strip()),
            ).fetchall()

    return [row["score"] for row in rows]


def count_grades(student_id: str) -> int:
    """Count grade rows referencing a student (existing or not)."""
    student_id = normalize_student_id(student_id)
    with get_db() as conn:
        row = conn.execute(
            "SELECT COUNT(*) AS n FROM grades WHERE student_id = ?", (student_id,)
        ).fetchone()
    return row["n"]
