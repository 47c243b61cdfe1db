from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class AssignmentRead(BaseModel):
    id: int
    title: str
    subject: str
    points: int = Field(gt=0)
    due_at: datetime
    course_id: Optional[int] = None
    description: Optional[str] = None

    class Config:
        from_attributes = True
