"""CLI commands for schoolbook.

Commands:
- init: Create the database schema
- add-student / update-student / delete-student: Manage students
- show / list: Inspect students with averages
- grade: Record a score
- attend: Record attendance for a day
- attendance: One student's attendance over a date range
- attendance-report: Attendance of all students over a date range
- grade-summary: Averages for every student

The commands only collect arguments and render results; all validation
and persistence happens in schoolbook.db and schoolbook.core.
"""

from datetime import date
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from schoolbook.config.app_config import load_app_config
from schoolbook.core.aggregation import attendance_in_range
from schoolbook.core.reports import (
    attendance_report,
    default_report_range,
    format_average,
    grade_summary_report,
    student_report,
)
from schoolbook.db.attendance_repository import count_attendance, record_attendance
from schoolbook.db.database import get_db_path, init_db
from schoolbook.db.grades_repository import count_grades, record_grade
from schoolbook.db.students_repository import (
    add_student as do_add_student,
    delete_student as do_delete_student,
    find_student_by_id,
    list_all_students,
    update_student as do_update_student,
)
from schoolbook.utils.validators import (
    ConfigError,
    DuplicateIdError,
    SchoolbookError,
    StorageError,
    ValidationError,
)

app = typer.Typer(
    name="school",
    help="Track students, grades and attendance in a local SQLite database.",
    no_args_is_help=True,
)

console = Console()

STATUS_COLORS = {
    "PRESENT": "green",
    "ABSENT": "red",
    "LATE": "yellow",
}


def _fail(error: Exception) -> None:
    """Print a domain error and exit with code 1."""
    if isinstance(error, DuplicateIdError):
        console.print(f"[yellow]⚠ {escape(str(error))}[/yellow]")
    else:
        console.print(f"[red]✗ {escape(str(error))}[/red]")
    raise typer.Exit(code=1)


def _resolve_range(start: str | None, end: str | None) -> tuple[date | str, date | str]:
    """Fill missing range ends from the configured default window."""
    default_start, default_end = default_report_range()
    return start or default_start, end or default_end


def _colored(status: str) -> str:
    color = STATUS_COLORS.get(status)
    return f"[{color}]{status}[/{color}]" if color else escape(status)


@app.callback()
def main(
    db: Path | None = typer.Option(
        None, "--db", help="Path to the SQLite database (default from config)"
    ),
) -> None:
    """Load the config and open the database, creating the schema on first use."""
    try:
        load_app_config()
    except ConfigError as e:
        console.print(f"[red]✗ Cannot load configuration: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    try:
        init_db(db)
    except StorageError as e:
        console.print(f"[red]✗ Cannot initialize database: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)


@app.command()
def init() -> None:
    """Create the database schema (safe to run repeatedly)."""
    console.print(f"[green]✓ Database ready[/green]: {get_db_path()}")


# =============================================================================
# STUDENTS
# =============================================================================


@app.command(name="add-student")
def add_student(
    student_id: str = typer.Argument(..., help="Unique student ID (e.g. 'S1')"),
    name: str = typer.Argument(..., help="Student name"),
    grade_level: str = typer.Argument(..., help="Grade level (e.g. '10')"),
) -> None:
    """Add a new student."""
    try:
        record = do_add_student(student_id, name, grade_level)
    except SchoolbookError as e:
        _fail(e)

    console.print(
        f"[green]✓ Student added:[/green] {escape(record.name)} ({escape(record.student_id)})"
    )


@app.command(name="update-student")
def update_student(
    student_id: str = typer.Argument(..., help="Existing student ID"),
    name: str = typer.Option(..., "--name", "-n", help="New name"),
    grade_level: str = typer.Option(..., "--grade-level", "-g", help="New grade level"),
) -> None:
    """Update a student's name and grade level."""
    try:
        record = do_update_student(student_id, name, grade_level)
    except SchoolbookError as e:
        _fail(e)

    console.print(
        f"[green]✓ Student updated:[/green] {escape(record.name)} ({escape(record.student_id)})"
    )


@app.command(name="delete-student")
def delete_student(
    student_id: str = typer.Argument(..., help="Student ID to delete"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a student together with all grades and attendance."""
    try:
        record = find_student_by_id(student_id)
    except SchoolbookError as e:
        _fail(e)
    student_id = record.student_id

    if not yes:
        console.print(
            f"[yellow]⚠ This removes {escape(record.name)} ({escape(student_id)}), "
            f"{count_grades(student_id)} grade(s) and "
            f"{count_attendance(student_id)} attendance record(s).[/yellow]"
        )
        expected = f"DELETE {student_id}"
        typed = typer.prompt(f"Type '{expected}' to confirm")
        if typed.strip() != expected:
            console.print("[dim]Cancelled[/dim]")
            raise typer.Exit(code=1)

    try:
        do_delete_student(student_id)
    except SchoolbookError as e:
        _fail(e)

    console.print(f"[green]✓ Deleted student {escape(student_id)} with grades and attendance[/green]")


@app.command()
def show(
    student_id: str = typer.Argument(..., help="Student ID"),
) -> None:
    """Show a student's details, averages and attendance tally."""
    try:
        report = student_report(student_id)
    except SchoolbookError as e:
        _fail(e)

    student = report.student
    console.print(f"\n[bold]{escape(student.name)}[/bold] ({escape(student.student_id)})")
    console.print(f"  [dim]grade level:[/dim] {escape(student.grade_level)}")
    console.print(f"  [dim]overall average:[/dim] {format_average(report.overall_average)}")

    if report.subject_averages:
        console.print("  [dim]subject averages:[/dim]")
        for subject, average in report.subject_averages.items():
            count = len(student.grades[subject])
            console.print(f"    - {escape(subject)}: {format_average(average)} ({count} score(s))")
    else:
        console.print("  [dim]No grades recorded yet[/dim]")

    tally = ", ".join(
        f"{_colored(status)} {count}" for status, count in report.attendance_counts.items()
    )
    console.print(f"  [dim]attendance:[/dim] {tally}")


@app.command(name="list")
def list_students() -> None:
    """List all students."""
    try:
        students = list_all_students()
    except StorageError as e:
        _fail(e)

    if not students:
        console.print("[yellow]No students registered yet[/yellow]")
        console.print("  Use: school add-student <id> <name> <grade-level>")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Grade")
    table.add_column("Scores", justify="right")
    table.add_column("Attendance", justify="right")

    for s in students:
        table.add_row(
            escape(s.student_id),
            escape(s.name),
            escape(s.grade_level),
            str(s.grade_count),
            str(len(s.attendance)),
        )

    console.print(f"\n[bold]Students ({len(students)}):[/bold]")
    console.print(table)


# =============================================================================
# GRADES AND ATTENDANCE
# =============================================================================


@app.command()
def grade(
    student_id: str = typer.Argument(..., help="Student ID"),
    subject: str = typer.Argument(..., help="Subject name (e.g. 'Math')"),
    score: int = typer.Argument(..., help="Score between 0 and 100"),
) -> None:
    """Record a score for a subject."""
    try:
        record_grade(student_id, subject, score)
    except SchoolbookError as e:
        _fail(e)

    console.print(f"[green]✓ Recorded {escape(subject)}={score} for {escape(student_id)}[/green]")


@app.command()
def attend(
    student_id: str = typer.Argument(..., help="Student ID"),
    status: str = typer.Argument(..., help="PRESENT, ABSENT or LATE"),
    day: str | None = typer.Option(
        None, "--date", "-d", help="Date as YYYY-MM-DD (default: today)"
    ),
) -> None:
    """Record attendance for a day (replaces an earlier record for that day)."""
    when = day or date.today()
    try:
        stored = record_attendance(student_id, when, status)
    except SchoolbookError as e:
        _fail(e)

    console.print(f"[green]✓ {escape(student_id)}:[/green] {_colored(stored)} on {when}")


@app.command()
def attendance(
    student_id: str = typer.Argument(..., help="Student ID"),
    start: str | None = typer.Option(None, "--start", "-s", help="Start date YYYY-MM-DD"),
    end: str | None = typer.Option(None, "--end", "-e", help="End date YYYY-MM-DD"),
) -> None:
    """Show one student's attendance over a date range."""
    range_start, range_end = _resolve_range(start, end)
    try:
        records = attendance_in_range(student_id, range_start, range_end)
    except SchoolbookError as e:
        _fail(e)

    if not records:
        console.print(f"[yellow]No attendance for {escape(student_id)} in range[/yellow]")
        return

    for day, status in records:
        console.print(f"  {day.isoformat()}  {_colored(status)}")


@app.command(name="attendance-report")
def attendance_report_command(
    start: str | None = typer.Option(None, "--start", "-s", help="Start date YYYY-MM-DD"),
    end: str | None = typer.Option(None, "--end", "-e", help="End date YYYY-MM-DD"),
) -> None:
    """Attendance of every student over a date range, one column per day."""
    range_start, range_end = _resolve_range(start, end)
    try:
        report = attendance_report(range_start, range_end)
    except (ValidationError, StorageError) as e:
        _fail(e)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Student", style="cyan")
    for day in report.dates:
        table.add_column(day.strftime("%m-%d"), justify="center")

    for row in report.rows:
        table.add_row(escape(row.name), *[_colored(cell) for cell in row.cells])

    console.print(table)
    console.print(
        f"[dim]{len(report.rows)} student(s) listed across {report.days} day(s)[/dim]"
    )


@app.command(name="grade-summary")
def grade_summary() -> None:
    """Overall and per-subject averages for every student."""
    try:
        rows = grade_summary_report()
    except StorageError as e:
        _fail(e)

    subjects = sorted({s for row in rows for s in row.subject_averages})

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Average", justify="right")
    for subject in subjects:
        table.add_column(escape(subject), justify="right")

    for row in rows:
        cells = [
            format_average(row.subject_averages[s]) if s in row.subject_averages else "-"
            for s in subjects
        ]
        table.add_row(
            escape(row.student_id),
            escape(row.name),
            format_average(row.overall_average),
            *cells,
        )

    console.print(table)
    console.print(f"[dim]Grade summary loaded for {len(rows)} student(s)[/dim]")


if __name__ == "__main__":
    app()
