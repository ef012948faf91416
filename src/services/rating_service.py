# src/services/rating_service.py
import logging
from typing import Any, Dict, List, Optional

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from src.repositories.mongo_repository import MongoRepository
from src.repositories.user_repository import UserRepository
from src.services.course_service import CourseService
from src.utils.errors import DuplicateRatingError, ValidationError

RATER_FIELDS = ["firstName", "lastName", "email", "profileImage"]


class RatingService:
    def __init__(self, db: Optional[Database] = None):
        self.repo = MongoRepository("ratings", db)
        self.users = UserRepository(db)
        self.courses = CourseService(db)

    def average_rating(self, course_id: str) -> float:
        """Promedio de TODOS los ratings del curso (0 si no hay)."""
        rows = list(self.repo.col.aggregate([
            {"$match": {"course": course_id}},
            {"$group": {"_id": None, "avg": {"$avg": "$rating"}}},
        ]))
        if not rows or rows[0].get("avg") is None:
            return 0.0
        return float(rows[0]["avg"])

    def add_rating(self, user_id: str, course_id: str, value: int, review: str) -> Dict[str, Any]:
        if not 1 <= int(value) <= 5:
            raise ValidationError("Rating must be between 1 and 5")
        self.courses.get_or_404(course_id)

        if self.repo.find_one_by({"user": user_id, "course": course_id}):
            raise DuplicateRatingError()
        try:
            created = self.repo.create({
                "user": user_id,
                "course": course_id,
                "rating": int(value),
                "review": review,
            })
        except DuplicateKeyError:
            raise DuplicateRatingError()

        # recálculo completo; con raters concurrentes gana la última escritura
        average = self.average_rating(course_id)
        self.courses.repo.update(course_id, {"averageRating": average})
        logging.info(f"[ratings] curso {course_id} averageRating={average}")

        out = MongoRepository.clean(created)
        out["averageRating"] = average
        return out

    def list_ratings(self, course_id: Optional[str] = None) -> List[Dict[str, Any]]:
        query = {"course": course_id} if course_id else {}
        ratings = self.repo.find(query)
        raters = self.users.public_fields([r["user"] for r in ratings], RATER_FIELDS)
        out = []
        for r in ratings:
            doc = MongoRepository.clean(r)
            doc["user"] = {"id": r["user"], **raters.get(r["user"], {})}
            out.append(doc)
        return out
