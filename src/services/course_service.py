# src/services/course_service.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pymongo.database import Database

from src.models.base import CourseState
from src.repositories.mongo_repository import MongoRepository
from src.repositories.user_repository import UserRepository
from src.services.duration import course_duration, parse_playback_time, topic_duration
from src.utils.errors import ForbiddenError, NotFoundError

CREATOR_FIELDS = ["firstName", "lastName", "about", "profileImage"]


class CourseService:
    def __init__(self, db: Optional[Database] = None) -> None:
        self.repo = MongoRepository("courses", db)
        self.topics = MongoRepository("topics", db)
        self.subtopics = MongoRepository("subtopics", db)
        self.users = UserRepository(db)

    # -------------------- helpers internos --------------------
    def get_or_404(self, course_id: str) -> Dict[str, Any]:
        course = self.repo.find_one(course_id)
        if not course:
            raise NotFoundError("Course not found")
        return course

    def _owned(self, user: Dict[str, Any], course_id: str) -> Dict[str, Any]:
        course = self.get_or_404(course_id)
        if course.get("createdBy") != user["_id"]:
            raise ForbiddenError("You can only modify your own courses")
        return course

    def _with_creator(self, courses: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        creators = self.users.public_fields(
            [c["createdBy"] for c in courses if c.get("createdBy")], CREATOR_FIELDS
        )
        out = []
        for c in courses:
            doc = MongoRepository.clean(c)
            doc["createdBy"] = {"id": c.get("createdBy"), **creators.get(c.get("createdBy"), {})}
            out.append(doc)
        return out

    def course_topics(self, course: Dict[str, Any]) -> List[Dict[str, Any]]:
        return self.topics.find_by_ids(course.get("topics", []))

    def subtopic_ids(self, course: Dict[str, Any]) -> List[str]:
        """Ids de todos los subtopics alcanzables desde los topics actuales del curso."""
        ids: List[str] = []
        for topic in self.course_topics(course):
            ids.extend(topic.get("subTopics", []))
        return ids

    def content(self, course: Dict[str, Any]) -> List[Dict[str, Any]]:
        result = []
        for topic in self.course_topics(course):
            subs = self.subtopics.find_by_ids(topic.get("subTopics", []))
            t = MongoRepository.clean(topic)
            t["subTopics"] = [MongoRepository.clean(s) for s in subs]
            result.append(t)
        return result

    # -------------------- duraciones (cache-on-write) --------------------
    def recompute_durations(self, course_id: str) -> str:
        """
        Recalcula topicDuration de cada topic y totalDuration del curso a partir
        de los videoPlaybackTime de los subtopics, y los persiste.
        """
        course = self.get_or_404(course_id)
        durations = []
        for topic in self.course_topics(course):
            subs = self.subtopics.find_by_ids(topic.get("subTopics", []), {"videoPlaybackTime": 1})
            duration = topic_duration(s["videoPlaybackTime"] for s in subs)
            self.topics.update(topic["_id"], {"topicDuration": duration})
            durations.append(duration)
        total = course_duration(durations)
        self.repo.update(course_id, {"totalDuration": total})
        logging.info(f"[courses.durations] curso {course_id}: {len(durations)} topics, total {total}")
        return total

    # -------------------- API --------------------
    def create(self, user: Dict[str, Any], payload: Dict[str, Any]) -> Dict[str, Any]:
        course: Dict[str, Any] = {
            "title": payload["title"],
            "description": payload["description"],
            "price": payload["price"],
            "category": payload["category"],
            "tags": list(payload.get("tags", [])),
            "image": payload["image"],
            "benefits": payload["benefits"],
            "requirements": list(payload.get("requirements", [])),
            "coursetype": CourseState.DRAFT.value,
            "averageRating": 0,
            "totalDuration": "00:00:00",
            "topics": [],
            "createdBy": user["_id"],
        }
        created = self.repo.create(course)
        self.users.add_created_course(user["_id"], created["_id"])
        return MongoRepository.clean(created)

    def get(self, course_id: str) -> Dict[str, Any]:
        course = self.get_or_404(course_id)
        out = self._with_creator([course])[0]
        out["topics"] = self.content(course)
        return out

    def list_by_category(self, category_id: str) -> List[Dict[str, Any]]:
        return self._with_creator(self.repo.find({"category": category_id}))

    def list_mine(self, user: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [MongoRepository.clean(c) for c in self.repo.find({"createdBy": user["_id"]})]

    def set_state(self, user: Dict[str, Any], course_id: str, coursetype: CourseState) -> Dict[str, Any]:
        self._owned(user, course_id)
        updated = self.repo.update(course_id, {"coursetype": CourseState(coursetype).value})
        return MongoRepository.clean(updated)

    def add_topic(self, user: Dict[str, Any], course_id: str, name: str) -> Dict[str, Any]:
        self._owned(user, course_id)
        topic = self.topics.create({
            "name": name,
            "course": course_id,
            "topicDuration": "00:00:00",
            "subTopics": [],
        })
        self.repo.add_to_array(course_id, "topics", topic["_id"])
        self.recompute_durations(course_id)
        return MongoRepository.clean(self.topics.find_one(topic["_id"]))

    def add_subtopic(self, user: Dict[str, Any], topic_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        topic = self.topics.find_one(topic_id)
        if not topic:
            raise NotFoundError("Topic not found")
        self._owned(user, topic["course"])
        # nunca se persiste un videoPlaybackTime inválido
        parse_playback_time(payload["videoPlaybackTime"])

        subtopic = self.subtopics.create({
            "videoUrl": payload["videoUrl"],
            "title": payload["title"],
            "description": payload["description"],
            "videoPlaybackTime": payload["videoPlaybackTime"],
            "topic": topic_id,
        })
        self.topics.add_to_array(topic_id, "subTopics", subtopic["_id"])
        self.recompute_durations(topic["course"])
        return MongoRepository.clean(subtopic)
