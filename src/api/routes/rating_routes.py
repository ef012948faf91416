# rating_routes.py
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import get_rating_service, require_role
from src.models.base import Role, ok
from src.models.learning_model import RatingIn
from src.services.rating_service import RatingService

router = APIRouter(prefix="/ratings", tags=["ratings"])


@router.post("", status_code=status.HTTP_201_CREATED)
def add_rating(
    body: RatingIn,
    user: Dict[str, Any] = Depends(require_role(Role.STUDENT)),
    svc: RatingService = Depends(get_rating_service),
):
    rating = svc.add_rating(user["_id"], body.courseId, body.rating, body.review)
    return ok("Rating added successfully", rating)


@router.get("")
def all_ratings(course_id: Optional[str] = Query(None, alias="courseId"), svc: RatingService = Depends(get_rating_service)):
    return ok("Ratings fetched successfully", svc.list_ratings(course_id))
