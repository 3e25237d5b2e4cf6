"""Grade averages and attendance pivots.

Averages are computed from the raw grade rows (one row per recorded score):
- overall average: mean of every score across all subjects
- subject average: mean of the scores recorded for one subject
Both are 0.0 when nothing has been recorded.

The attendance pivot and the grade summary use different strategies on
purpose. The pivot is an inner join, so students without attendance in the
range are left out. The summary scans every student, so students without
grades are listed with a 0.0 average.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

import structlog

from schoolbook.db.attendance_repository import (
    get_attendance_in_range,
    get_attendance_joined_in_range,
)
from schoolbook.db.students_repository import (
    StudentRecord,
    find_student_by_id,
    list_all_students,
)
from schoolbook.utils.validators import ATTENDANCE_STATUSES, validate_date_range

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StudentRef:
    """Hashable student identity used as a pivot key."""

    student_id: str
    name: str


@dataclass
class GradeSummary:
    """Aggregated grades for one student."""

    student: StudentRecord
    overall_average: float
    subject_averages: dict[str, float] = field(default_factory=dict)


def mean_score(scores: Iterable[int]) -> float:
    """Arithmetic mean of scores, 0.0 for an empty sequence."""
    values = list(scores)
    if not values:
        return 0.0
    return sum(values) / len(values)


def record_overall_average(record: StudentRecord) -> float:
    """Overall average of an already loaded student."""
    return mean_score(score for scores in record.grades.values() for score in scores)


def subject_averages(record: StudentRecord) -> dict[str, float]:
    """Per-subject averages of an already loaded student, by subject name."""
    return {
        subject: mean_score(scores)
        for subject, scores in sorted(record.grades.items())
    }


def overall_average(student_id: str) -> float:
    """Mean of all scores recorded for a student, across subjects.

    Raises:
        NotFoundError: If student doesn't exist
    """
    return record_overall_average(find_student_by_id(student_id))


def subject_average(student_id: str, subject: str) -> float:
    """Mean of the scores recorded for one subject, 0.0 if none.

    Raises:
        NotFoundError: If student doesn't exist
    """
    record = find_student_by_id(student_id)
    return mean_score(record.grades.get(subject.strip(), []))


def attendance_in_range(
    student_id: str, start: date | str, end: date | str
) -> list[tuple[date, str]]:
    """One student's attendance within an inclusive date range.

    Returns:
        List of (date, status) in ascending date order

    Raises:
        ValidationError: If a date is malformed or start is after end
        NotFoundError: If student doesn't exist
    """
    start_date, end_date = validate_date_range(start, end)
    return get_attendance_in_range(student_id, start_date, end_date)


def pivot_attendance_across_students(
    start: date | str, end: date | str
) -> dict[StudentRef, dict[date, str]]:
    """Group attendance in a range by student.

    Only students with at least one record in the range appear, and each
    inner mapping only holds the dates that have a recorded status.

    Raises:
        ValidationError: If a date is malformed or start is after end
    """
    start_date, end_date = validate_date_range(start, end)

    pivot: dict[StudentRef, dict[date, str]] = {}
    for row in get_attendance_joined_in_range(start_date, end_date):
        ref = StudentRef(student_id=row.student_id, name=row.name)
        pivot.setdefault(ref, {})[row.day] = row.status

    logger.debug(
        "aggregation.attendance_pivoted",
        start=start_date.isoformat(),
        end=end_date.isoformat(),
        students=len(pivot),
    )
    return pivot


def grade_summary_across_students() -> list[GradeSummary]:
    """Overall and per-subject averages for every known student.

    Students without grades are included with a 0.0 average.
    """
    return [
        GradeSummary(
            student=record,
            overall_average=record_overall_average(record),
            subject_averages=subject_averages(record),
        )
        for record in list_all_students()
    ]


def attendance_counts(statuses: Iterable[str]) -> dict[str, int]:
    """Tally statuses, always reporting PRESENT, ABSENT and LATE."""
    counts = {status: 0 for status in ATTENDANCE_STATUSES}
    for status in statuses:
        counts[status] = counts.get(status, 0) + 1
    return counts
