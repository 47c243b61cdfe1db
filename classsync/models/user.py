from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from classsync.db.base_class import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )
    # "student" | "teacher"
    role: Mapped[str] = mapped_column(String(50), nullable=False, default="student")

    enrollments = relationship(
        "Enrollment", back_populates="student", cascade="all, delete-orphan"
    )

    submissions = relationship(
        "Submission", back_populates="student", cascade="all, delete-orphan"
    )
