# src/models/learning_model.py
# Entradas de carrito, progreso, ratings y pagos
from pydantic import BaseModel, Field


class CourseRefIn(BaseModel):
    courseId: str = Field(..., min_length=1)


class ProgressUpdateIn(BaseModel):
    courseId: str = Field(..., min_length=1)
    subTopicId: str = Field(..., min_length=1)


class RatingIn(BaseModel):
    courseId: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5)
    review: str = Field(..., min_length=1)


class CheckoutIn(BaseModel):
    courseId: str = Field(..., min_length=1)
