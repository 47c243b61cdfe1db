"""Gradebook service: the read and write entry points used by the routers.

Collaborator stores are injected as repositories; the service itself keeps no
state besides the shared snapshot cache and the write lock.
"""

import logging
import threading
from collections import defaultdict
from datetime import datetime, timezone
from typing import Optional, Sequence

from classsync.core.config import GPA_POINTS
from classsync.core.errors import NotFoundError, ValidationError
from classsync.repositories.base import (
    AssignmentRepository,
    CourseRepository,
    SubmissionRepository,
    UserRepository,
)
from classsync.schemas.assignment import AssignmentRead
from classsync.schemas.gradebook import AssignmentStats, GradebookData
from classsync.schemas.student_grades import (
    CategoryBreakdown,
    ClassGradeView,
    CurrentGrade,
    StudentAssignmentGrade,
    StudentGPA,
)
from classsync.schemas.submission import (
    SubmissionCreate,
    SubmissionRead,
    SubmissionStatus,
    SubmissionUpdate,
)
from classsync.schemas.user import UserRead
from classsync.services import grading
from classsync.services.cache import GradebookCache

logger = logging.getLogger(__name__)

STUDENT_ROLE = "student"
NO_GRADE_LETTER = "N/A"


class GradebookService:
    def __init__(
        self,
        assignments: AssignmentRepository,
        users: UserRepository,
        submissions: SubmissionRepository,
        courses: CourseRepository,
        cache: Optional[GradebookCache] = None,
        write_lock: Optional[threading.Lock] = None,
    ):
        self.assignments = assignments
        self.users = users
        self.submissions = submissions
        self.courses = courses
        self.cache = cache if cache is not None else GradebookCache()
        # find-or-create must not interleave, or a pair could get two rows
        self.write_lock = write_lock if write_lock is not None else threading.Lock()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _load_gradebook(self) -> GradebookData:
        assignments = self.assignments.list()
        students = self.users.list_by_role(STUDENT_ROLE)
        submissions = self.submissions.list()
        return grading.build_gradebook_matrix(assignments, students, submissions)

    def get_gradebook_data(self) -> GradebookData:
        return self.cache.get_or_compute(self._load_gradebook)

    def get_assignment_stats(self, assignment_id: int) -> AssignmentStats:
        self.assignments.get(assignment_id)
        data = self.get_gradebook_data()
        return grading.calculate_assignment_stats(assignment_id, data.student_rows)

    def _get_student(self, student_id: int) -> UserRead:
        student = self.users.get(student_id)
        if student.role != STUDENT_ROLE:
            raise NotFoundError("Student not found")
        return student

    def get_student_grades(self, student_id: int) -> list[ClassGradeView]:
        """One view per class the student is enrolled in, ordered by class name."""
        self._get_student(student_id)

        courses = self.courses.list_for_student(student_id)
        all_assignments = self.assignments.list()
        mine = [s for s in self.submissions.list() if s.student_id == student_id]
        index = grading.index_submissions(mine)

        views: list[ClassGradeView] = []
        for course in courses:
            course_assignments = grading.sort_assignments(
                a for a in all_assignments if a.course_id == course.id
            )
            cells = grading.build_grade_cells(student_id, course_assignments, index)
            earned, possible = grading.grade_totals(cells, course_assignments)
            final = grading.calculate_final_grade(cells, course_assignments)

            views.append(
                ClassGradeView(
                    course_id=course.id,
                    class_name=course.name,
                    subject=course.subject,
                    teacher=self.users.get(course.teacher_id),
                    assignments=[
                        _assignment_grade(a, index.get((student_id, a.id)))
                        for a in course_assignments
                    ],
                    current_grade=CurrentGrade(
                        percentage=final.percentage,
                        letter=final.letter,
                        points=earned,
                        total_points=possible,
                    ),
                )
            )

        return views

    @staticmethod
    def calculate_student_gpa(views: Sequence[ClassGradeView]) -> StudentGPA:
        """4.0-scale GPA over classes that have at least one graded assignment."""
        graded = [v for v in views if v.current_grade.total_points > 0]
        if not graded:
            return StudentGPA(gpa=0.0, letter_grade=NO_GRADE_LETTER)

        gpa = sum(GPA_POINTS[v.current_grade.letter] for v in graded) / len(graded)
        mean_pct = grading.round_half_up(
            sum(v.current_grade.percentage for v in graded) / len(graded)
        )
        return StudentGPA(gpa=round(gpa, 2), letter_grade=grading.letter_grade(mean_pct))

    @staticmethod
    def get_category_breakdown(views: Sequence[ClassGradeView]) -> list[CategoryBreakdown]:
        """Per-subject totals across all of the student's classes."""
        by_subject: dict[str, list[StudentAssignmentGrade]] = defaultdict(list)
        for view in views:
            for a in view.assignments:
                by_subject[a.subject].append(a)

        result: list[CategoryBreakdown] = []
        for name in sorted(by_subject):
            items = by_subject[name]
            graded = [a for a in items if a.grade is not None]
            earned = sum(a.grade for a in graded)
            total = sum(a.points for a in graded)
            pct = grading.percent(earned, total)

            result.append(
                CategoryBreakdown(
                    name=name,
                    assignment_count=len(items),
                    graded_count=len(graded),
                    earned_points=earned,
                    total_points=total,
                    percentage=pct,
                    letter_grade=grading.letter_grade(pct) if graded else NO_GRADE_LETTER,
                    completion_rate=grading.percent(len(graded), len(items)),
                    # most recent first
                    assignments=sorted(items, key=lambda a: (grading.as_utc(a.due_at), a.id), reverse=True),
                )
            )
        return result

    @staticmethod
    def validate_grade(raw, max_points: float) -> int | float:
        return grading.validate_grade(raw, max_points)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def update_grade(
        self,
        student_id: int,
        assignment_id: int,
        grade,
        feedback: str = "",
        submission_id: Optional[int] = None,
    ) -> bool:
        """
        Grade a student's work on one assignment.

        Updates the existing submission in place, or creates an already graded
        one with no content. Concurrent writes to the same pair are
        last-write-wins.
        """
        with self.write_lock:
            self._get_student(student_id)
            assignment = self.assignments.get(assignment_id)

            value = grading.validate_grade(grade, assignment.points)
            if not isinstance(value, int):
                raise ValidationError("Grade must be a whole number")

            if submission_id is not None:
                submission = self.submissions.get(submission_id)
                if submission.student_id != student_id or submission.assignment_id != assignment_id:
                    raise ValidationError("Submission does not belong to this student and assignment")
            else:
                submission = self.submissions.find(assignment_id, student_id)

            graded_at = datetime.now(timezone.utc)
            created = submission is None
            if created:
                # one write, so a failure never leaves an ungraded placeholder behind
                submission = self.submissions.create(
                    SubmissionCreate(
                        student_id=student_id,
                        assignment_id=assignment_id,
                        status=SubmissionStatus.GRADED,
                        grade=value,
                        feedback=feedback,
                        graded_at=graded_at,
                    )
                )
            else:
                self.submissions.update(
                    submission.id,
                    SubmissionUpdate(
                        grade=value,
                        feedback=feedback,
                        status=SubmissionStatus.GRADED,
                        graded_at=graded_at,
                    ),
                )

            self.cache.invalidate()

        logger.info(
            "grade %s/%s recorded (student=%s, assignment=%s, submission=%s%s)",
            value,
            assignment.points,
            student_id,
            assignment_id,
            submission.id,
            ", new" if created else "",
        )
        return True

    def submit_work(
        self,
        student_id: int,
        assignment_id: int,
        content: str = "",
        files: Optional[list[str]] = None,
        links: Optional[list[str]] = None,
        draft: bool = False,
    ) -> SubmissionRead:
        """
        Create or resubmit a student's work.

        Resubmitting updates the same row and clears any previous grade.
        """
        status = SubmissionStatus.DRAFT if draft else SubmissionStatus.SUBMITTED

        with self.write_lock:
            self._get_student(student_id)
            self.assignments.get(assignment_id)

            existing = self.submissions.find(assignment_id, student_id)
            if existing:
                result = self.submissions.update(
                    existing.id,
                    SubmissionUpdate(
                        content=content,
                        files=list(files or []),
                        links=list(links or []),
                        status=status,
                        submitted_at=datetime.now(timezone.utc),
                        # clear previous grading on resubmit
                        grade=None,
                        feedback=None,
                        graded_at=None,
                    ),
                )
            else:
                result = self.submissions.create(
                    SubmissionCreate(
                        student_id=student_id,
                        assignment_id=assignment_id,
                        content=content,
                        files=list(files or []),
                        links=list(links or []),
                        status=status,
                    )
                )

            self.cache.invalidate()

        logger.info(
            "%s saved (student=%s, assignment=%s, submission=%s)",
            status.value,
            student_id,
            assignment_id,
            result.id,
        )
        return result


def _assignment_grade(
    assignment: AssignmentRead,
    submission: Optional[SubmissionRead],
) -> StudentAssignmentGrade:
    if submission is None:
        return StudentAssignmentGrade(
            id=assignment.id,
            title=assignment.title,
            subject=assignment.subject,
            points=assignment.points,
            due_at=assignment.due_at,
        )

    return StudentAssignmentGrade(
        id=assignment.id,
        title=assignment.title,
        subject=assignment.subject,
        points=assignment.points,
        due_at=assignment.due_at,
        submission_id=submission.id,
        grade=submission.grade,
        status=submission.status,
        feedback=submission.feedback,
        submitted_at=submission.submitted_at,
    )
