from fastapi import APIRouter, Depends

from classsync.core.deps import get_gradebook_service
from classsync.schemas.gradebook import (
    AssignmentStats,
    GradebookData,
    GradeUpdate,
    GradeValidateRequest,
    GradeValidateResponse,
)
from classsync.services.gradebook import GradebookService

router = APIRouter()


@router.get("", response_model=GradebookData)
def get_gradebook(service: GradebookService = Depends(get_gradebook_service)):
    return service.get_gradebook_data()


@router.get("/assignments/{assignment_id}/stats", response_model=AssignmentStats)
def assignment_stats(
    assignment_id: int,
    service: GradebookService = Depends(get_gradebook_service),
):
    return service.get_assignment_stats(assignment_id)


@router.put(
    "/grades",
    responses={
        400: {"description": "Grade out of range"},
        404: {"description": "Student, assignment or submission not found"},
    },
)
def update_grade(
    payload: GradeUpdate,
    service: GradebookService = Depends(get_gradebook_service),
):
    success = service.update_grade(
        payload.student_id,
        payload.assignment_id,
        payload.grade,
        feedback=payload.feedback,
        submission_id=payload.submission_id,
    )
    return {"success": success}


# stateless check used by the grade entry cell before saving
@router.post("/grades/validate", response_model=GradeValidateResponse)
def validate_grade(payload: GradeValidateRequest):
    return {"grade": GradebookService.validate_grade(payload.grade, payload.max_points)}
