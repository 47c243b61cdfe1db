import pytest

from classsync.core.errors import ValidationError
from classsync.schemas.gradebook import GradeCell
from classsync.schemas.submission import SubmissionStatus
from classsync.services.grading import (
    GradeBand,
    build_gradebook_matrix,
    calculate_assignment_stats,
    calculate_final_grade,
    classify_grade_cell,
    letter_grade,
    round_half_up,
    validate_grade,
)
from tests.fakes import make_assignment, make_student, make_submission


@pytest.mark.parametrize(
    "percentage, expected",
    [(100, "A"), (90, "A"), (89, "B"), (80, "B"), (79, "C"), (70, "C"), (69, "D"), (60, "D"), (59, "F"), (0, "F")],
)
def test_letter_grade_boundaries(percentage, expected):
    assert letter_grade(percentage) == expected


def test_round_half_up_is_not_bankers_rounding():
    assert round_half_up(82.5) == 83
    assert round_half_up(0.5) == 1
    assert round_half_up(89.4) == 89


def _cell(assignment_id, grade, max_points=100):
    return GradeCell(
        assignment_id=assignment_id,
        student_id=1,
        grade=grade,
        status=SubmissionStatus.GRADED if grade is not None else SubmissionStatus.NOT_SUBMITTED,
        max_points=max_points,
    )


def test_final_grade_only_counts_graded_assignments():
    assignments = [make_assignment(1, days=1, points=100), make_assignment(2, days=2, points=50)]
    final = calculate_final_grade([_cell(1, 90), _cell(2, None, 50)], assignments)

    assert final.percentage == 90
    assert final.letter == "A"
    assert final.points == "90/100"


def test_final_grade_with_nothing_graded():
    assignments = [make_assignment(1, days=1)]
    final = calculate_final_grade([_cell(1, None)], assignments)
    assert final.model_dump() == {"percentage": 0, "letter": "F", "points": "0/0"}


def test_final_grade_weights_by_points():
    assignments = [make_assignment(1, days=1, points=100), make_assignment(2, days=2, points=50)]
    # (70 + 50) / 150 = 80%
    final = calculate_final_grade([_cell(1, 70), _cell(2, 50, 50)], assignments)
    assert final.percentage == 80
    assert final.letter == "B"
    assert final.points == "120/150"


def test_zero_is_a_real_grade():
    assignments = [make_assignment(1, days=1)]
    final = calculate_final_grade([_cell(1, 0)], assignments)
    assert final.points == "0/100"
    assert final.letter == "F"


@pytest.mark.parametrize(
    "grade, max_points, band",
    [
        (None, 100, GradeBand.UNGRADED),
        (95, 100, GradeBand.HIGH),
        (45, 50, GradeBand.HIGH),
        (70, 100, GradeBand.MID),
        (89, 100, GradeBand.MID),
        (65, 100, GradeBand.LOW),
        (0, 100, GradeBand.LOW),
    ],
)
def test_classify_grade_cell(grade, max_points, band):
    assert classify_grade_cell(grade, max_points) == band


class TestValidateGrade:
    def test_accepts_numeric_string(self):
        assert validate_grade("87", 100) == 87

    def test_accepts_max_and_zero(self):
        assert validate_grade(100, 100) == 100
        assert validate_grade("0", 100) == 0

    def test_keeps_fraction(self):
        assert validate_grade("12.5", 20) == 12.5

    @pytest.mark.parametrize("raw", ["abc", "", None, "nan", "inf", "1e400", True, 10**400])
    def test_rejects_non_numbers(self, raw):
        with pytest.raises(ValidationError, match="must be a number"):
            validate_grade(raw, 100)

    def test_rejects_negative(self):
        with pytest.raises(ValidationError, match="negative"):
            validate_grade("-1", 100)

    def test_rejects_above_max(self):
        with pytest.raises(ValidationError, match="cannot exceed 100 points"):
            validate_grade("105", 100)


def test_matrix_is_dense_and_ordered_by_due_date():
    assignments = [make_assignment(3, days=9), make_assignment(1, days=2), make_assignment(2, days=2)]
    students = [make_student(1, "Ann"), make_student(2, "Ben")]

    data = build_gradebook_matrix(assignments, students, [])

    assert [a.id for a in data.assignments] == [1, 2, 3]
    assert len(data.student_rows) == 2
    for row in data.student_rows:
        assert [c.assignment_id for c in row.grades] == [1, 2, 3]
        assert all(c.status == SubmissionStatus.NOT_SUBMITTED for c in row.grades)
        assert all(c.grade is None and c.submission_id is None for c in row.grades)


def test_matrix_uses_first_submission_for_duplicate_pairs():
    assignments = [make_assignment(1, days=1)]
    students = [make_student(1, "Ann")]
    submissions = [
        make_submission(7, student_id=1, assignment_id=1, grade=60),
        make_submission(8, student_id=1, assignment_id=1, grade=95),
    ]

    cell = build_gradebook_matrix(assignments, students, submissions).student_rows[0].grades[0]
    assert cell.submission_id == 7
    assert cell.grade == 60


def test_summary_counts_drafts_as_submitted_work():
    assignments = [make_assignment(1, days=1), make_assignment(2, days=2)]
    students = [make_student(1, "Ann")]
    submissions = [make_submission(1, student_id=1, assignment_id=1, status=SubmissionStatus.DRAFT)]

    summary = build_gradebook_matrix(assignments, students, submissions).summary
    assert summary.total_submissions == 1
    assert summary.graded_submissions == 0
    assert summary.submission_rate == 50
    assert summary.grading_rate == 0
    assert summary.pending_grades == 1


def test_summary_with_no_students_or_assignments():
    summary = build_gradebook_matrix([], [], []).summary
    assert summary.submission_rate == 0
    assert summary.grading_rate == 0
    assert summary.class_average == 0
    assert summary.grade_distribution == {"A": 0, "B": 0, "C": 0, "D": 0, "F": 0}


def test_class_average_and_distribution_skip_students_without_grades():
    assignments = [make_assignment(1, days=1)]
    students = [make_student(1, "Ann"), make_student(2, "Ben"), make_student(3, "Cy"), make_student(4, "Dee")]
    submissions = [
        make_submission(1, student_id=1, assignment_id=1, grade=95),
        make_submission(2, student_id=2, assignment_id=1, grade=72),
        make_submission(3, student_id=3, assignment_id=1, grade=55),
    ]

    summary = build_gradebook_matrix(assignments, students, submissions).summary
    # (95 + 72 + 55) / 3 = 74
    assert summary.class_average == 74
    assert summary.grade_distribution == {"A": 1, "B": 0, "C": 1, "D": 0, "F": 1}


def test_assignment_stats():
    assignments = [make_assignment(1, days=1), make_assignment(2, days=2)]
    students = [make_student(1, "Ann"), make_student(2, "Ben"), make_student(3, "Cy")]
    submissions = [
        make_submission(1, student_id=1, assignment_id=1, grade=80),
        make_submission(2, student_id=2, assignment_id=1, grade=95),
        make_submission(3, student_id=3, assignment_id=1),
    ]
    rows = build_gradebook_matrix(assignments, students, submissions).student_rows

    stats = calculate_assignment_stats(1, rows)
    assert (stats.submitted, stats.average, stats.highest, stats.lowest) == (2, 88, 95, 80)

    empty = calculate_assignment_stats(2, rows)
    assert (empty.submitted, empty.average, empty.highest, empty.lowest) == (0, 0, 0, 0)
