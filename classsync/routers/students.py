from fastapi import APIRouter, Depends

from classsync.core.deps import get_gradebook_service
from classsync.schemas.student_grades import StudentGradesResponse
from classsync.services.gradebook import GradebookService

router = APIRouter()


@router.get("/{student_id}/grades", response_model=StudentGradesResponse)
def student_grades(
    student_id: int,
    service: GradebookService = Depends(get_gradebook_service),
):
    classes = service.get_student_grades(student_id)
    return {
        "classes": classes,
        "gpa": service.calculate_student_gpa(classes),
        "categories": service.get_category_breakdown(classes),
    }
