from datetime import datetime
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.database import Database

from src.config.database import get_mongo_db


def to_object_id(value: Any) -> Optional[ObjectId]:
    """ObjectId a partir de un str de 24 hex; None si no es válido."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


class MongoRepository:
    def __init__(self, collection_name: str, db: Optional[Database] = None):
        # 🔗 Si no se inyecta una base, usamos la conexión global de config/database.py
        if db is None:
            db = get_mongo_db()
        self.col = db[collection_name]

    @staticmethod
    def _stringify_id(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if not doc:
            return doc
        if "_id" in doc and isinstance(doc["_id"], ObjectId):
            doc["_id"] = str(doc["_id"])
        return doc

    @staticmethod
    def clean(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """Copia del documento con `_id` renombrado a `id` (forma de respuesta)."""
        if not doc:
            return None
        d = dict(doc)
        if "_id" in d:
            d["id"] = str(d.pop("_id"))
        return d

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        # timestamps por defecto
        now = datetime.utcnow()
        data.setdefault("createdAt", now)
        data.setdefault("updatedAt", now)
        res = self.col.insert_one(data)
        created = self.col.find_one({"_id": res.inserted_id})
        return self._stringify_id(created)

    def find_one(self, _id: str, projection: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        oid = to_object_id(_id)
        if oid is None:
            return None
        doc = self.col.find_one({"_id": oid}, projection)
        return self._stringify_id(doc) if doc else None

    def find_one_by(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        doc = self.col.find_one(query)
        return self._stringify_id(doc) if doc else None

    def find(self, query: Dict[str, Any], projection: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        return [self._stringify_id(d) for d in self.col.find(query, projection)]

    def find_by_ids(self, ids: List[str], projection: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Resuelve una lista de referencias manteniendo el orden de `ids`."""
        oids = [oid for oid in (to_object_id(i) for i in ids) if oid is not None]
        if not oids:
            return []
        by_id = {str(d["_id"]): d for d in self.col.find({"_id": {"$in": oids}}, projection)}
        return [self._stringify_id(by_id[i]) for i in ids if i in by_id]

    def update(self, _id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        updates["updatedAt"] = datetime.utcnow()
        return self.update_raw(_id, {"$set": updates})

    def update_raw(self, _id: str, mongo_update: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Update con operadores ($set, $push, $addToSet...); devuelve el doc actualizado."""
        oid = to_object_id(_id)
        if oid is None:
            return None
        doc = self.col.find_one_and_update(
            {"_id": oid}, mongo_update, return_document=ReturnDocument.AFTER
        )
        return self._stringify_id(doc)

    def add_to_array(self, _id: str, field: str, value: Any) -> Optional[Dict[str, Any]]:
        return self.update_raw(_id, {
            "$push": {field: value},
            "$set": {"updatedAt": datetime.utcnow()},
        })

