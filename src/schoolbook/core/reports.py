"""Report rows for display.

Turns aggregation results into flat, display-ready rows sorted by student
name (ties broken by student ID). Missing attendance cells are filled with
the configured mark ("-" by default).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta

from schoolbook.config.app_config import load_app_config
from schoolbook.core.aggregation import (
    attendance_counts,
    grade_summary_across_students,
    pivot_attendance_across_students,
    record_overall_average,
    subject_averages,
)
from schoolbook.db.students_repository import StudentRecord, find_student_by_id
from schoolbook.utils.validators import validate_date_range


@dataclass
class GradeSummaryRow:
    """One row of the grade summary report."""

    student_id: str
    name: str
    grade_level: str
    overall_average: float
    subject_averages: dict[str, float] = field(default_factory=dict)


@dataclass
class AttendanceReportRow:
    """One student's row in the attendance report, one cell per date."""

    student_id: str
    name: str
    cells: list[str]


@dataclass
class AttendanceReport:
    """Attendance pivot laid out as a table."""

    start: date
    end: date
    dates: list[date]
    rows: list[AttendanceReportRow]

    @property
    def days(self) -> int:
        return len(self.dates)


@dataclass
class StudentReport:
    """Details and averages for a single student."""

    student: StudentRecord
    overall_average: float
    subject_averages: dict[str, float]
    attendance_counts: dict[str, int]


def format_average(value: float, decimals: int | None = None) -> str:
    """Format an average for display (e.g. 85.0 -> '85.00')."""
    if decimals is None:
        decimals = load_app_config().reports.average_decimals
    return f"{value:.{decimals}f}"


def date_columns(start: date, end: date) -> list[date]:
    """Every calendar day from start to end, inclusive."""
    return [start + timedelta(days=n) for n in range((end - start).days + 1)]


def default_report_range(today: date | None = None) -> tuple[date, date]:
    """Default report window: the configured number of days ending today."""
    end = today or date.today()
    days = load_app_config().reports.default_range_days
    return end - timedelta(days=days), end


def grade_summary_report() -> list[GradeSummaryRow]:
    """Grade summary rows for every student, sorted by name then ID."""
    rows = [
        GradeSummaryRow(
            student_id=summary.student.student_id,
            name=summary.student.name,
            grade_level=summary.student.grade_level,
            overall_average=summary.overall_average,
            subject_averages=summary.subject_averages,
        )
        for summary in grade_summary_across_students()
    ]
    rows.sort(key=lambda row: (row.name, row.student_id))
    return rows


def attendance_report(
    start: date | str,
    end: date | str,
    missing_mark: str | None = None,
) -> AttendanceReport:
    """Attendance pivot over an inclusive range as display rows.

    Only students with attendance in the range get a row. Dates without a
    recorded status show missing_mark.

    Raises:
        ValidationError: If a date is malformed or start is after end
    """
    start_date, end_date = validate_date_range(start, end)
    if missing_mark is None:
        missing_mark = load_app_config().reports.missing_mark

    dates = date_columns(start_date, end_date)
    pivot = pivot_attendance_across_students(start_date, end_date)

    rows = [
        AttendanceReportRow(
            student_id=ref.student_id,
            name=ref.name,
            cells=[statuses.get(day, missing_mark) for day in dates],
        )
        for ref, statuses in pivot.items()
    ]
    rows.sort(key=lambda row: (row.name, row.student_id))

    return AttendanceReport(start=start_date, end=end_date, dates=dates, rows=rows)


def student_report(student_id: str) -> StudentReport:
    """Details, averages and attendance tally for one student.

    Raises:
        NotFoundError: If student doesn't exist
    """
    record = find_student_by_id(student_id)
    return StudentReport(
        student=record,
        overall_average=record_overall_average(record),
        subject_averages=subject_averages(record),
        attendance_counts=attendance_counts(record.attendance.values()),
    )
