from pydantic import BaseModel


class CourseRead(BaseModel):
    id: int
    name: str
    subject: str
    teacher_id: int

    class Config:
        from_attributes = True
