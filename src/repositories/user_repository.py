from datetime import datetime
from typing import Any, Dict, List, Optional

from pymongo.database import Database

from src.repositories.mongo_repository import MongoRepository, to_object_id

# Campos que nunca salen en una respuesta
PRIVATE_FIELDS = {"password": 0}


class UserRepository(MongoRepository):
    def __init__(self, db: Optional[Database] = None):
        super().__init__("users", db)

    def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return self.find_one_by({"email": email.strip().lower()})

    def find_by_mobile(self, mobile_number: str) -> Optional[Dict[str, Any]]:
        return self.find_one_by({"mobileNumber": mobile_number})

    def find_public(self, user_id: str) -> Optional[Dict[str, Any]]:
        return self.find_one(user_id, PRIVATE_FIELDS)

    def public_fields(self, ids: List[str], fields: List[str]) -> Dict[str, Dict[str, Any]]:
        """'populate' de usuarios: {userId: {campo: valor}} para los ids pedidos."""
        docs = self.find_by_ids(list(dict.fromkeys(ids)), {f: 1 for f in fields})
        return {d["_id"]: {f: d.get(f) for f in fields} for d in docs}

    def add_created_course(self, user_id: str, course_id: str) -> None:
        self.update_raw(user_id, {
            "$addToSet": {"createdCourses": course_id},
            "$set": {"updatedAt": datetime.utcnow()},
        })

    def add_enrolled_course(self, user_id: str, course_id: str) -> bool:
        """
        Agrega el curso sólo si todavía no estaba.
        True = se inscribió ahora; False = ya estaba inscripto (o no existe el user).
        """
        oid = to_object_id(user_id)
        if oid is None:
            return False
        res = self.col.update_one(
            {"_id": oid, "enrolledCourses": {"$ne": course_id}},
            {
                "$addToSet": {"enrolledCourses": course_id},
                "$set": {"updatedAt": datetime.utcnow()},
            },
        )
        return res.modified_count > 0

    def is_enrolled(self, user_id: str, course_id: str) -> bool:
        oid = to_object_id(user_id)
        if oid is None:
            return False
        return self.col.count_documents({"_id": oid, "enrolledCourses": course_id}) > 0
