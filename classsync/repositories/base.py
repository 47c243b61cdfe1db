from __future__ import annotations

from typing import Optional, Protocol

from classsync.schemas.assignment import AssignmentRead
from classsync.schemas.course import CourseRead
from classsync.schemas.submission import SubmissionCreate, SubmissionRead, SubmissionUpdate
from classsync.schemas.user import UserRead


class AssignmentRepository(Protocol):
    def list(self) -> list[AssignmentRead]: ...

    def get(self, assignment_id: int) -> AssignmentRead:
        """Raises NotFoundError for an unknown id."""
        ...


class UserRepository(Protocol):
    def list_by_role(self, role: str) -> list[UserRead]: ...

    def get(self, user_id: int) -> UserRead:
        """Raises NotFoundError for an unknown id."""
        ...


class CourseRepository(Protocol):
    def list_for_student(self, student_id: int) -> list[CourseRead]: ...


class SubmissionRepository(Protocol):
    def list(self) -> list[SubmissionRead]: ...

    def get(self, submission_id: int) -> SubmissionRead:
        """Raises NotFoundError for an unknown id."""
        ...

    def find(self, assignment_id: int, student_id: int) -> Optional[SubmissionRead]: ...

    def create(self, data: SubmissionCreate) -> SubmissionRead:
        """Raises ConflictError if the (student, assignment) pair already has one."""
        ...

    def update(self, submission_id: int, data: SubmissionUpdate) -> SubmissionRead: ...

    def delete(self, submission_id: int) -> SubmissionRead: ...
