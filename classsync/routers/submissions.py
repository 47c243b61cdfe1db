from fastapi import APIRouter, Depends, status

from classsync.core.deps import get_gradebook_service
from classsync.schemas.submission import SubmissionRead, SubmissionSubmit
from classsync.services.gradebook import GradebookService

router = APIRouter()


@router.post(
    "/assignments/{assignment_id}/submissions",
    response_model=SubmissionRead,
    status_code=status.HTTP_201_CREATED,
)
def submit_assignment(
    assignment_id: int,
    payload: SubmissionSubmit,
    service: GradebookService = Depends(get_gradebook_service),
):
    # resubmission updates the existing row (same id)
    return service.submit_work(
        payload.student_id,
        assignment_id,
        content=payload.content,
        files=payload.files,
        links=payload.links,
        draft=payload.draft,
    )
