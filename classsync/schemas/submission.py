from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class SubmissionStatus(str, Enum):
    NOT_SUBMITTED = "not_submitted"
    SUBMITTED = "submitted"
    GRADED = "graded"
    DRAFT = "draft"


class SubmissionCreate(BaseModel):
    student_id: int
    assignment_id: int
    content: str = ""
    files: list[str] = Field(default_factory=list)
    links: list[str] = Field(default_factory=list)
    status: SubmissionStatus = SubmissionStatus.SUBMITTED
    grade: Optional[int] = None
    feedback: Optional[str] = None
    graded_at: Optional[datetime] = None


class SubmissionUpdate(BaseModel):
    """Partial update; only fields that were explicitly set are written."""

    content: Optional[str] = None
    files: Optional[list[str]] = None
    links: Optional[list[str]] = None
    status: Optional[SubmissionStatus] = None
    grade: Optional[int] = None
    feedback: Optional[str] = None
    submitted_at: Optional[datetime] = None
    graded_at: Optional[datetime] = None


class SubmissionRead(BaseModel):
    id: int
    assignment_id: int
    student_id: int
    content: str = ""
    files: list[str] = Field(default_factory=list)
    links: list[str] = Field(default_factory=list)
    status: SubmissionStatus
    submitted_at: Optional[datetime] = None
    grade: Optional[int] = None
    feedback: Optional[str] = None
    graded_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SubmissionSubmit(BaseModel):
    student_id: int
    content: str = ""
    files: list[str] = Field(default_factory=list)
    links: list[str] = Field(default_factory=list)
    draft: bool = False
