from fastapi import Depends, Request
from sqlalchemy.orm import Session

from classsync.db.session import SessionLocal
from classsync.repositories.sql import (
    SqlAssignmentRepository,
    SqlCourseRepository,
    SqlSubmissionRepository,
    SqlUserRepository,
)
from classsync.services.gradebook import GradebookService


# every request that needs DB will get a fresh session, and it will always close.
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_gradebook_service(
    request: Request,
    db: Session = Depends(get_db),
) -> GradebookService:
    # the cache and write lock are app-wide; repositories are per-request
    return GradebookService(
        assignments=SqlAssignmentRepository(db),
        users=SqlUserRepository(db),
        submissions=SqlSubmissionRepository(db),
        courses=SqlCourseRepository(db),
        cache=request.app.state.gradebook_cache,
        write_lock=request.app.state.gradebook_write_lock,
    )
