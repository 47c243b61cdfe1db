"""Grade aggregation: matrix building, final grades and class statistics.

Everything here is pure: the functions take the roster, assignment list and
submissions as plain read schemas and return freshly built derived views.
Nothing is cached or mutated.
"""

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Sequence

from classsync.core.config import (
    FAILING_LETTER,
    HIGH_BAND_MIN,
    LETTER_GRADE_BREAKPOINTS,
    LETTERS,
    MID_BAND_MIN,
)
from classsync.core.errors import ValidationError
from classsync.schemas.assignment import AssignmentRead
from classsync.schemas.gradebook import (
    AssignmentStats,
    FinalGrade,
    GradebookData,
    GradebookSummary,
    GradeCell,
    StudentRow,
)
from classsync.schemas.submission import SubmissionRead, SubmissionStatus
from classsync.schemas.user import UserRead


class GradeBand(str, Enum):
    HIGH = "high"
    MID = "mid"
    LOW = "low"
    UNGRADED = "ungraded"


def round_half_up(value: float) -> int:
    # round() would give banker's rounding (round(82.5) == 82)
    return int(math.floor(value + 0.5))


def percent(part: float, whole: float) -> int:
    """Rounded percentage in 0..100; 0 when the denominator is 0."""
    if whole <= 0:
        return 0
    return min(100, round_half_up(part * 100 / whole))


def as_utc(dt: datetime) -> datetime:
    # SQLite returns naive datetimes; treat as UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def sort_assignments(assignments: Iterable[AssignmentRead]) -> list[AssignmentRead]:
    """Due date ascending, assignment id as a stable tie-break."""
    return sorted(assignments, key=lambda a: (as_utc(a.due_at), a.id))


def letter_grade(percentage: float) -> str:
    for minimum, letter in LETTER_GRADE_BREAKPOINTS:
        if percentage >= minimum:
            return letter
    return FAILING_LETTER


def grade_totals(
    cells: Sequence[GradeCell],
    assignments: Sequence[AssignmentRead],
) -> tuple[int, int]:
    """(earned, possible) summed over graded cells only."""
    points_by_id = {a.id: a.points for a in assignments}

    total_earned = 0
    total_possible = 0
    for cell in cells:
        if cell.grade is None or cell.assignment_id not in points_by_id:
            continue
        total_earned += cell.grade
        total_possible += points_by_id[cell.assignment_id]
    return total_earned, total_possible


def calculate_final_grade(
    cells: Sequence[GradeCell],
    assignments: Sequence[AssignmentRead],
) -> FinalGrade:
    """
    Running grade over graded work only.

    Ungraded assignments are left out of both numerator and denominator, so
    they never pull the percentage down.
    """
    total_earned, total_possible = grade_totals(cells, assignments)
    if total_possible == 0:
        return FinalGrade(percentage=0, letter=FAILING_LETTER, points="0/0")

    percentage = percent(total_earned, total_possible)
    return FinalGrade(
        percentage=percentage,
        letter=letter_grade(percentage),
        points=f"{total_earned}/{total_possible}",
    )


def classify_grade_cell(grade: int | float | None, max_points: int) -> GradeBand:
    """
    Display band for a single cell.

    60-69% shares the LOW band with everything below 60; the letter grade
    (D) stays distinct.
    """
    if grade is None:
        return GradeBand.UNGRADED
    if max_points <= 0:
        return GradeBand.LOW

    pct = grade * 100 / max_points
    if pct >= HIGH_BAND_MIN:
        return GradeBand.HIGH
    if pct >= MID_BAND_MIN:
        return GradeBand.MID
    return GradeBand.LOW


def validate_grade(raw, max_points: float) -> int | float:
    """Parse a manually entered grade and check it against 0..max_points."""
    if isinstance(raw, bool):
        raise ValidationError("Grade must be a number")

    if isinstance(raw, str):
        raw = raw.strip()

    try:
        value = float(raw)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError("Grade must be a number")

    if not math.isfinite(value):
        raise ValidationError("Grade must be a number")
    if value < 0:
        raise ValidationError("Grade cannot be negative")
    if value > max_points:
        raise ValidationError(f"Grade cannot exceed {max_points} points")

    return int(value) if value.is_integer() else value


def index_submissions(
    submissions: Iterable[SubmissionRead],
) -> dict[tuple[int, int], SubmissionRead]:
    index: dict[tuple[int, int], SubmissionRead] = {}
    for s in submissions:
        # first match wins if the store ever holds duplicates
        index.setdefault((s.student_id, s.assignment_id), s)
    return index


def build_grade_cells(
    student_id: int,
    assignments: Sequence[AssignmentRead],
    index: dict[tuple[int, int], SubmissionRead],
) -> list[GradeCell]:
    cells: list[GradeCell] = []
    for a in assignments:
        sub = index.get((student_id, a.id))
        if sub is None:
            cells.append(GradeCell(assignment_id=a.id, student_id=student_id, max_points=a.points))
            continue

        cells.append(
            GradeCell(
                assignment_id=a.id,
                student_id=student_id,
                submission_id=sub.id,
                grade=sub.grade,
                status=sub.status,
                max_points=a.points,
            )
        )
    return cells


def build_gradebook_matrix(
    assignments: Sequence[AssignmentRead],
    students: Sequence[UserRead],
    submissions: Sequence[SubmissionRead],
) -> GradebookData:
    """One row per student, one cell per assignment (due date order)."""
    ordered = sort_assignments(assignments)
    index = index_submissions(submissions)

    rows: list[StudentRow] = []
    for student in students:
        cells = build_grade_cells(student.id, ordered, index)
        rows.append(
            StudentRow(
                student=student,
                grades=cells,
                final_grade=calculate_final_grade(cells, ordered),
            )
        )

    return GradebookData(
        assignments=ordered,
        students=list(students),
        student_rows=rows,
        summary=calculate_summary_stats(rows, ordered),
    )


def _graded_rows(rows: Iterable[StudentRow]) -> list[StudentRow]:
    # students with no graded work (percentage 0) are left out
    return [r for r in rows if r.final_grade.percentage > 0]


def calculate_class_average(rows: Sequence[StudentRow]) -> int:
    graded = _graded_rows(rows)
    if not graded:
        return 0
    total = sum(r.final_grade.percentage for r in graded)
    return round_half_up(total / len(graded))


def calculate_grade_distribution(rows: Sequence[StudentRow]) -> dict[str, int]:
    distribution = {letter: 0 for letter in LETTERS}
    for r in _graded_rows(rows):
        distribution[letter_grade(r.final_grade.percentage)] += 1
    return distribution


def calculate_summary_stats(
    rows: Sequence[StudentRow],
    assignments: Sequence[AssignmentRead],
) -> GradebookSummary:
    total_students = len(rows)
    total_assignments = len(assignments)

    total_submissions = 0
    graded_submissions = 0
    for row in rows:
        for cell in row.grades:
            if cell.status != SubmissionStatus.NOT_SUBMITTED:
                total_submissions += 1
            if cell.grade is not None:
                graded_submissions += 1

    return GradebookSummary(
        total_students=total_students,
        total_assignments=total_assignments,
        total_submissions=total_submissions,
        graded_submissions=graded_submissions,
        submission_rate=percent(total_submissions, total_students * total_assignments),
        grading_rate=percent(graded_submissions, total_submissions),
        pending_grades=total_submissions - graded_submissions,
        class_average=calculate_class_average(rows),
        grade_distribution=calculate_grade_distribution(rows),
    )


def calculate_assignment_stats(assignment_id: int, rows: Sequence[StudentRow]) -> AssignmentStats:
    grades = [
        cell.grade
        for row in rows
        for cell in row.grades
        if cell.assignment_id == assignment_id and cell.grade is not None
    ]

    if not grades:
        return AssignmentStats(assignment_id=assignment_id, submitted=0, average=0, highest=0, lowest=0)

    return AssignmentStats(
        assignment_id=assignment_id,
        submitted=len(grades),
        average=round_half_up(sum(grades) / len(grades)),
        highest=max(grades),
        lowest=min(grades),
    )
