"""Error taxonomy and input validation helpers.

Every failure raised by the store, the aggregation engine or the reports
belongs to one of four kinds:
- NotFoundError: referenced student is absent
- DuplicateIdError: student_id collision on create
- ValidationError: score out of range, unknown status, malformed date
- StorageError: underlying SQLite failure

ConfigError covers an unreadable or malformed configuration file.

Functions:
- require_text(value, field) -> str: Reject empty required fields
- normalize_student_id(student_id) -> str: Canonical form of a student ID
- validate_score(score) -> int: Check score is an integer in [0, 100]
- normalize_status(status) -> str: Case-normalize an attendance status
- parse_date(value) -> date: Accept date or ISO 'YYYY-MM-DD' string
- validate_date_range(start, end) -> tuple[date, date]
"""

from __future__ import annotations

from datetime import date, datetime

MIN_SCORE = 0
MAX_SCORE = 100

ATTENDANCE_STATUSES = ("PRESENT", "ABSENT", "LATE")

DATE_FORMAT = "%Y-%m-%d"


class SchoolbookError(Exception):
    """Base exception for all schoolbook errors."""

    pass


class NotFoundError(SchoolbookError):
    """Raised when a referenced student does not exist."""

    def __init__(self, student_id: str):
        self.student_id = student_id
        super().__init__(f"Student not found: '{student_id}'")


class DuplicateIdError(SchoolbookError):
    """Raised when adding a student whose ID is already taken."""

    def __init__(self, student_id: str):
        self.student_id = student_id
        super().__init__(f"Student with ID '{student_id}' already exists")


class ValidationError(SchoolbookError):
    """Raised when an argument fails domain validation."""

    pass


class StorageError(SchoolbookError):
    """Raised when the database itself fails (connection, constraint, I/O)."""

    pass


class ConfigError(SchoolbookError):
    """Raised when the configuration file cannot be read or parsed."""

    pass


def require_text(value: str | None, field: str) -> str:
    """Strip a required text field and reject it if empty.

    Raises:
        ValidationError: If value is None or blank
    """
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required")
    return str(value).strip()


def normalize_student_id(student_id: str | None) -> str:
    """Canonical form of a student ID: surrounding whitespace removed.

    Every store operation goes through this, so " S1 " and "S1" name the
    same student on writes and lookups alike.

    Raises:
        ValidationError: If student_id is None or blank
    """
    return require_text(student_id, "Student ID")


def validate_score(score) -> int:
    """Validate a grade score.

    Args:
        score: Candidate score

    Returns:
        The score as int

    Raises:
        ValidationError: If score is not an integer in [0, 100]
    """
    # bool is an int subclass; True must not sneak in as 1
    if isinstance(score, bool) or not isinstance(score, int):
        raise ValidationError(f"Score must be an integer, got {score!r}")
    if score < MIN_SCORE or score > MAX_SCORE:
        raise ValidationError(
            f"Score must be between {MIN_SCORE} and {MAX_SCORE}, got {score}"
        )
    return score


def normalize_status(status: str | None) -> str:
    """Normalize an attendance status to its canonical upper-case form.

    Examples:
        "present" -> "PRESENT"
        " Late " -> "LATE"

    Raises:
        ValidationError: If status is not PRESENT, ABSENT or LATE
    """
    if status is None:
        raise ValidationError("Attendance status is required")
    canonical = str(status).strip().upper()
    if canonical not in ATTENDANCE_STATUSES:
        raise ValidationError(
            f"Unknown attendance status '{status}'. "
            f"Expected one of: {', '.join(ATTENDANCE_STATUSES)}"
        )
    return canonical


def parse_date(value: date | str) -> date:
    """Parse a calendar date.

    Accepts a datetime.date (a datetime is truncated to its date) or a
    strict 'YYYY-MM-DD' string.

    Raises:
        ValidationError: If the value is not a valid date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"Invalid date: {value!r}")

    try:
        return datetime.strptime(value.strip(), DATE_FORMAT).date()
    except ValueError as e:
        raise ValidationError(
            f"Invalid date '{value}'. Use YYYY-MM-DD"
        ) from e


def validate_date_range(start: date | str, end: date | str) -> tuple[date, date]:
    """Parse both ends of an inclusive date range and check start <= end.

    Raises:
        ValidationError: If either date is malformed or start is after end
    """
    start_date = parse_date(start)
    end_date = parse_date(end)
    if start_date > end_date:
        raise ValidationError(
            f"Start date {start_date.isoformat()} is after end date {end_date.isoformat()}"
        )
    return start_date, end_date
