# src/services/cart_service.py
from typing import Any, Dict, List, Optional

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from src.repositories.mongo_repository import MongoRepository
from src.repositories.user_repository import UserRepository
from src.services.course_service import CourseService
from src.utils.errors import ConflictError, NotFoundError

CART_COURSE_FIELDS = {"title": 1, "description": 1, "price": 1, "image": 1, "createdBy": 1}


class CartService:
    def __init__(self, db: Optional[Database] = None):
        self.repo = MongoRepository("carts", db)
        self.users = UserRepository(db)
        self.courses = CourseService(db)

    def add_to_cart(self, user_id: str, course_id: str) -> Dict[str, Any]:
        self.courses.get_or_404(course_id)
        if self.users.is_enrolled(user_id, course_id):
            raise ConflictError("You are already enrolled in this course")
        if self.repo.find_one_by({"userId": user_id, "courseId": course_id}):
            raise ConflictError("Course is already in the cart")
        try:
            entry = self.repo.create({"userId": user_id, "courseId": course_id})
        except DuplicateKeyError:
            # el índice único (userId, courseId) cubre el check-then-insert
            raise ConflictError("Course is already in the cart")
        return MongoRepository.clean(entry)

    def list_cart(self, user_id: str) -> List[Dict[str, Any]]:
        entries = self.repo.find({"userId": user_id})
        courses = {
            c["_id"]: c
            for c in self.courses.repo.find_by_ids([e["courseId"] for e in entries], CART_COURSE_FIELDS)
        }
        creators = self.users.public_fields(
            [c["createdBy"] for c in courses.values() if c.get("createdBy")],
            ["firstName", "lastName"],
        )

        out = []
        for e in entries:
            course = courses.get(e["courseId"])
            if course is None:
                # curso borrado después de agregarlo al carrito
                continue
            details = MongoRepository.clean(course)
            details["createdBy"] = {"id": course.get("createdBy"), **creators.get(course.get("createdBy"), {})}
            out.append({
                "cartId": e["_id"],
                "userId": e["userId"],
                "courseId": e["courseId"],
                "courseDetails": details,
            })
        return out

    def remove_from_cart(self, user_id: str, course_id: str) -> None:
        res = self.repo.col.delete_one({"userId": user_id, "courseId": course_id})
        if res.deleted_count == 0:
            raise NotFoundError("Course not found in the cart")

    def clear_course(self, user_id: str, course_id: str) -> None:
        self.repo.col.delete_many({"userId": user_id, "courseId": course_id})
