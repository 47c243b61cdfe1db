"""SQLAlchemy-backed collaborator stores.

Each repository wraps a request-scoped Session and hands back pydantic read
schemas, so the gradebook service never touches ORM objects.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classsync.core.errors import ConflictError, NotFoundError
from classsync.models.assignment import Assignment
from classsync.models.course import Course
from classsync.models.enrollment import Enrollment
from classsync.models.submission import Submission
from classsync.models.user import User
from classsync.schemas.assignment import AssignmentRead
from classsync.schemas.course import CourseRead
from classsync.schemas.submission import (
    SubmissionCreate,
    SubmissionRead,
    SubmissionStatus,
    SubmissionUpdate,
)
from classsync.schemas.user import UserRead

logger = logging.getLogger(__name__)


class SqlAssignmentRepository:
    def __init__(self, db: Session):
        self.db = db

    def list(self) -> list[AssignmentRead]:
        rows = self.db.query(Assignment).order_by(Assignment.id.asc()).all()
        return [AssignmentRead.model_validate(a) for a in rows]

    def get(self, assignment_id: int) -> AssignmentRead:
        a = self.db.query(Assignment).filter(Assignment.id == assignment_id).first()
        if not a:
            raise NotFoundError("Assignment not found")
        return AssignmentRead.model_validate(a)


class SqlUserRepository:
    def __init__(self, db: Session):
        self.db = db

    def list_by_role(self, role: str) -> list[UserRead]:
        rows = self.db.query(User).filter(User.role == role).order_by(User.id.asc()).all()
        return [UserRead.model_validate(u) for u in rows]

    def get(self, user_id: int) -> UserRead:
        u = self.db.query(User).filter(User.id == user_id).first()
        if not u:
            raise NotFoundError("User not found")
        return UserRead.model_validate(u)


class SqlCourseRepository:
    def __init__(self, db: Session):
        self.db = db

    def list_for_student(self, student_id: int) -> list[CourseRead]:
        rows = (
            self.db.query(Course)
            .join(Enrollment, Enrollment.course_id == Course.id)
            .filter(Enrollment.student_id == student_id)
            .order_by(Course.name.asc(), Course.id.asc())
            .all()
        )
        return [CourseRead.model_validate(c) for c in rows]


class SqlSubmissionRepository:
    def __init__(self, db: Session):
        self.db = db

    def _get_row(self, submission_id: int) -> Submission:
        sub = self.db.query(Submission).filter(Submission.id == submission_id).first()
        if not sub:
            raise NotFoundError("Submission not found")
        return sub

    def _commit(self) -> None:
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def list(self) -> list[SubmissionRead]:
        rows = self.db.query(Submission).order_by(Submission.id.asc()).all()
        return [SubmissionRead.model_validate(s) for s in rows]

    def get(self, submission_id: int) -> SubmissionRead:
        return SubmissionRead.model_validate(self._get_row(submission_id))

    def find(self, assignment_id: int, student_id: int) -> Optional[SubmissionRead]:
        sub = (
            self.db.query(Submission)
            .filter(
                and_(
                    Submission.assignment_id == assignment_id,
                    Submission.student_id == student_id,
                )
            )
            .order_by(Submission.id.asc())
            .first()
        )
        return SubmissionRead.model_validate(sub) if sub else None

    def create(self, data: SubmissionCreate) -> SubmissionRead:
        sub = Submission(
            assignment_id=data.assignment_id,
            student_id=data.student_id,
            content=data.content,
            files=list(data.files),
            links=list(data.links),
            status=data.status.value,
            grade=data.grade,
            feedback=data.feedback,
            graded_at=data.graded_at,
        )
        self.db.add(sub)

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(
                "duplicate submission rejected (student=%s, assignment=%s)",
                data.student_id,
                data.assignment_id,
            )
            raise ConflictError("Submission already exists for this student and assignment")

        self.db.refresh(sub)
        return SubmissionRead.model_validate(sub)

    def update(self, submission_id: int, data: SubmissionUpdate) -> SubmissionRead:
        sub = self._get_row(submission_id)

        for field, value in data.model_dump(exclude_unset=True).items():
            if isinstance(value, SubmissionStatus):
                value = value.value
            setattr(sub, field, value)

        self._commit()
        self.db.refresh(sub)
        return SubmissionRead.model_validate(sub)

    def delete(self, submission_id: int) -> SubmissionRead:
        sub = self._get_row(submission_id)
        deleted = SubmissionRead.model_validate(sub)

        self.db.delete(sub)
        self._commit()
        return deleted
