from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from classsync.schemas.submission import SubmissionStatus
from classsync.schemas.user import UserRead


class StudentAssignmentGrade(BaseModel):
    id: int
    title: str
    subject: str
    points: int
    due_at: datetime
    submission_id: Optional[int] = None
    grade: Optional[int] = None
    status: SubmissionStatus = SubmissionStatus.NOT_SUBMITTED
    feedback: Optional[str] = None
    submitted_at: Optional[datetime] = None


class CurrentGrade(BaseModel):
    percentage: int
    letter: str
    points: int  # earned
    total_points: int  # possible, graded work only


class ClassGradeView(BaseModel):
    course_id: int
    class_name: str
    subject: str
    teacher: UserRead
    assignments: list[StudentAssignmentGrade]
    current_grade: CurrentGrade


class CategoryBreakdown(BaseModel):
    name: str
    assignment_count: int
    graded_count: int
    earned_points: int
    total_points: int
    percentage: int
    letter_grade: str
    completion_rate: int
    assignments: list[StudentAssignmentGrade]


class StudentGPA(BaseModel):
    gpa: float
    letter_grade: str


class StudentGradesResponse(BaseModel):
    classes: list[ClassGradeView]
    gpa: StudentGPA
    categories: list[CategoryBreakdown]
