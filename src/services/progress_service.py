# src/services/progress_service.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from src.models.base import ProgressStatus
from src.repositories.mongo_repository import MongoRepository
from src.repositories.user_repository import UserRepository
from src.services.course_service import CourseService
from src.utils.errors import DegenerateCourseError, ForbiddenError, NotFoundError

_STATUS_RANK = {
    ProgressStatus.ALL: 0,
    ProgressStatus.PENDING: 1,
    ProgressStatus.COMPLETED: 2,
}


def completion_percentage(completed: int, total: int) -> int:
    """round-half-up de 100 * completed / total, en aritmética entera (1 de 3 -> 33)."""
    if total <= 0:
        raise DegenerateCourseError()
    return min(100, (200 * completed + total) // (2 * total))


def next_status(prior: str, percentage: int) -> ProgressStatus:
    """El estado sólo avanza All -> Pending -> Completed; nunca retrocede."""
    current = ProgressStatus(prior)
    if percentage >= 100:
        derived = ProgressStatus.COMPLETED
    elif percentage > 0:
        derived = ProgressStatus.PENDING
    else:
        return current
    return derived if _STATUS_RANK[derived] > _STATUS_RANK[current] else current


class ProgressService:
    def __init__(self, db: Optional[Database] = None):
        self.repo = MongoRepository("course_progress", db)
        self.users = UserRepository(db)
        self.courses = CourseService(db)

    def _now(self) -> datetime:
        return datetime.utcnow()

    @staticmethod
    def _default(user_id: str, course_id: str) -> Dict[str, Any]:
        return {
            "userId": user_id,
            "courseId": course_id,
            "completedSubTopics": [],
            "progressPercentage": 0,
            "status": ProgressStatus.ALL.value,
        }

    @staticmethod
    def _view(doc: Dict[str, Any]) -> Dict[str, Any]:
        out = MongoRepository.clean(doc)
        for k in ("createdAt", "updatedAt"):
            out.pop(k, None)
        return out

    def _get_or_create(self, user_id: str, course_id: str) -> Dict[str, Any]:
        key = {"userId": user_id, "courseId": course_id}
        now = self._now()
        try:
            return self.repo.col.find_one_and_update(
                key,
                {"$setOnInsert": {**self._default(user_id, course_id), "createdAt": now, "updatedAt": now}},
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            # otro request creó el registro en paralelo
            return self.repo.col.find_one(key)

    def _require_enrolled(self, user_id: str, course_id: str) -> None:
        if not self.users.is_enrolled(user_id, course_id):
            raise ForbiddenError("You are not enrolled in this course")

    # -------------------- API --------------------

    def mark_subtopic_complete(self, user_id: str, course_id: str, subtopic_id: str) -> Dict[str, Any]:
        course = self.courses.get_or_404(course_id)
        self._require_enrolled(user_id, course_id)

        # total recalculado en cada llamada: el contenido del curso puede cambiar
        subtopic_ids = self.courses.subtopic_ids(course)
        total = len(subtopic_ids)
        if total == 0:
            raise DegenerateCourseError()
        if subtopic_id not in subtopic_ids:
            raise NotFoundError("SubTopic not found in this course")

        progress = self._get_or_create(user_id, course_id)
        if subtopic_id in progress.get("completedSubTopics", []):
            return self._view(progress)

        updated = self.repo.col.find_one_and_update(
            {"_id": progress["_id"], "completedSubTopics": {"$ne": subtopic_id}},
            {"$addToSet": {"completedSubTopics": subtopic_id}},
            return_document=ReturnDocument.AFTER,
        )
        if updated is None:
            # lo marcó un request concurrente; el estado ya es el correcto
            return self._view(self.repo.col.find_one({"_id": progress["_id"]}))
        return self._sync_percentage(updated, total)

    def _sync_percentage(self, doc: Dict[str, Any], total: int) -> Dict[str, Any]:
        """
        Escribe porcentaje y estado derivados del set leído, sólo si el set y el
        estado siguen siendo esos. Si otro request los cambió, se relee y se recalcula.
        """
        while True:
            completed = doc.get("completedSubTopics", [])
            prior = doc.get("status", ProgressStatus.ALL.value)
            percentage = completion_percentage(len(completed), total)
            status = next_status(prior, percentage)
            final = self.repo.col.find_one_and_update(
                {"_id": doc["_id"], "completedSubTopics": {"$size": len(completed)}, "status": prior},
                {"$set": {"progressPercentage": percentage, "status": status.value, "updatedAt": self._now()}},
                return_document=ReturnDocument.AFTER,
            )
            if final is not None:
                return self._view(final)
            doc = self.repo.col.find_one({"_id": doc["_id"]})

    def get_progress(self, user_id: str, course_id: str) -> Dict[str, Any]:
        doc = self.repo.find_one_by({"userId": user_id, "courseId": course_id})
        return self._view(doc) if doc else self._default(user_id, course_id)

    def list_enrolled_courses(self, user_id: str) -> List[Dict[str, Any]]:
        user = self.users.find_one(user_id, {"enrolledCourses": 1})
        if not user:
            raise NotFoundError("User not found")
        course_ids = user.get("enrolledCourses", [])
        courses = self.courses.repo.find_by_ids(
            course_ids, {"title": 1, "description": 1, "totalDuration": 1, "image": 1}
        )
        progress = {
            p["courseId"]: p
            for p in self.repo.find({"userId": user_id, "courseId": {"$in": course_ids}})
        }

        out = []
        for c in courses:
            p = progress.get(c["_id"]) or self._default(user_id, c["_id"])
            out.append({
                "id": c["_id"],
                "title": c.get("title"),
                "description": c.get("description"),
                "totalDuration": c.get("totalDuration"),
                "image": c.get("image"),
                "progressPercentage": p.get("progressPercentage", 0),
                "status": p.get("status", ProgressStatus.ALL.value),
                "completedSubTopics": p.get("completedSubTopics", []),
            })
        return out

    def get_enrolled_course(self, user_id: str, course_id: str) -> Dict[str, Any]:
        course = self.courses.get(course_id)
        self._require_enrolled(user_id, course_id)
        course["progress"] = self.get_progress(user_id, course_id)
        return course
