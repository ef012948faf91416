# progress_routes.py
from typing import Any, Dict

from fastapi import APIRouter, Depends

from src.api.dependencies import get_progress_service, require_role
from src.models.base import Role, ok
from src.models.learning_model import ProgressUpdateIn
from src.services.progress_service import ProgressService

router = APIRouter(prefix="/progress", tags=["progress"])
student = require_role(Role.STUDENT)


@router.get("/courses")
def my_enrolled_courses(user: Dict[str, Any] = Depends(student), svc: ProgressService = Depends(get_progress_service)):
    return ok("Courses fetched successfully!", svc.list_enrolled_courses(user["_id"]))


@router.get("/courses/{course_id}")
def my_enrolled_course(
    course_id: str,
    user: Dict[str, Any] = Depends(student),
    svc: ProgressService = Depends(get_progress_service),
):
    return ok("Course fetched successfully!", svc.get_enrolled_course(user["_id"], course_id))


@router.put("")
def update_course_progress(
    body: ProgressUpdateIn,
    user: Dict[str, Any] = Depends(student),
    svc: ProgressService = Depends(get_progress_service),
):
    progress = svc.mark_subtopic_complete(user["_id"], body.courseId, body.subTopicId)
    return ok("Course progress updated successfully", progress)
