from pydantic import BaseModel, EmailStr


class UserRead(BaseModel):
    id: int
    name: str
    email: EmailStr
    role: str

    class Config:
        from_attributes = True
