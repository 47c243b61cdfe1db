from typing import Optional, Union

from pydantic import BaseModel, Field, StrictBool, StrictFloat, StrictInt, StrictStr

from classsync.schemas.assignment import AssignmentRead
from classsync.schemas.submission import SubmissionStatus
from classsync.schemas.user import UserRead


class GradeCell(BaseModel):
    assignment_id: int
    student_id: int
    submission_id: Optional[int] = None
    grade: Optional[int] = None
    status: SubmissionStatus = SubmissionStatus.NOT_SUBMITTED
    max_points: int


class FinalGrade(BaseModel):
    percentage: int
    letter: str
    points: str  # "earned/possible"


class StudentRow(BaseModel):
    student: UserRead
    grades: list[GradeCell]
    final_grade: FinalGrade


class GradebookSummary(BaseModel):
    total_students: int
    total_assignments: int
    total_submissions: int
    graded_submissions: int
    submission_rate: int
    grading_rate: int
    pending_grades: int
    class_average: int
    grade_distribution: dict[str, int]


class GradebookData(BaseModel):
    assignments: list[AssignmentRead]
    students: list[UserRead]
    student_rows: list[StudentRow]
    summary: GradebookSummary


class AssignmentStats(BaseModel):
    assignment_id: int
    submitted: int
    average: int
    highest: int
    lowest: int


# booleans are kept as-is so grade validation can reject them
RawGrade = Union[StrictInt, StrictFloat, StrictStr, StrictBool]


class GradeUpdate(BaseModel):
    student_id: int
    assignment_id: int
    grade: RawGrade
    feedback: str = ""
    submission_id: Optional[int] = None


class GradeValidateRequest(BaseModel):
    grade: RawGrade
    max_points: int = Field(gt=0)


class GradeValidateResponse(BaseModel):
    grade: Union[int, float]
