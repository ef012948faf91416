# src/models/base.py
from enum import Enum
from typing import Any

class Role(str, Enum):
    STUDENT = "Student"
    INSTRUCTOR = "Instructor"
    ADMIN = "Admin"

class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"

class CourseState(str, Enum):
    PUBLIC = "Public"
    DRAFT = "Draft"

class ProgressStatus(str, Enum):
    ALL = "All"
    PENDING = "Pending"
    COMPLETED = "Completed"


# Forma uniforme de las respuestas exitosas
def ok(message: str, data: Any = None) -> dict:
    body = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    return body
