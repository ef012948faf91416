# course_routes.py
from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_course_service, require_role
from src.models.base import Role, ok
from src.models.course_model import CourseIn, CourseStateIn, SubTopicIn, TopicIn
from src.services.course_service import CourseService

router = APIRouter(tags=["courses"])
instructor = require_role(Role.INSTRUCTOR)


@router.post("/courses", status_code=status.HTTP_201_CREATED)
def create_course(
    body: CourseIn,
    user: Dict[str, Any] = Depends(instructor),
    svc: CourseService = Depends(get_course_service),
):
    return ok("Course created successfully", svc.create(user, body.model_dump()))


# /courses/mine va antes de /courses/{course_id}
@router.get("/courses/mine")
def my_courses(user: Dict[str, Any] = Depends(instructor), svc: CourseService = Depends(get_course_service)):
    return ok("Courses retrieved successfully", svc.list_mine(user))


@router.get("/courses/category/{category_id}")
def courses_by_category(category_id: str, svc: CourseService = Depends(get_course_service)):
    return ok("Courses retrieved successfully", svc.list_by_category(category_id))


@router.get("/courses/{course_id}")
def get_course(course_id: str, svc: CourseService = Depends(get_course_service)):
    return ok("Course retrieved successfully", svc.get(course_id))


@router.patch("/courses/{course_id}/state")
def set_course_state(
    course_id: str,
    body: CourseStateIn,
    user: Dict[str, Any] = Depends(instructor),
    svc: CourseService = Depends(get_course_service),
):
    return ok("Course updated successfully", svc.set_state(user, course_id, body.coursetype))


@router.post("/courses/{course_id}/topics", status_code=status.HTTP_201_CREATED)
def add_topic(
    course_id: str,
    body: TopicIn,
    user: Dict[str, Any] = Depends(instructor),
    svc: CourseService = Depends(get_course_service),
):
    return ok("Course Topic created successfully!", svc.add_topic(user, course_id, body.name))


@router.post("/topics/{topic_id}/subtopics", status_code=status.HTTP_201_CREATED)
def add_subtopic(
    topic_id: str,
    body: SubTopicIn,
    user: Dict[str, Any] = Depends(instructor),
    svc: CourseService = Depends(get_course_service),
):
    return ok("Course subtopic created successfully", svc.add_subtopic(user, topic_id, body.model_dump()))
