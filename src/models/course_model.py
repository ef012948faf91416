from typing import List

from pydantic import BaseModel, Field, field_validator

from src.models.base import CourseState
from src.services.duration import is_valid_playback_time


class CourseIn(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    price: float = Field(..., gt=0)
    category: str = Field(..., min_length=1)
    tags: List[str] = Field(default_factory=list)
    image: str = Field(..., min_length=1)
    benefits: str = Field(..., min_length=1)
    requirements: List[str] = Field(default_factory=list)

    @field_validator("title", "description", "benefits")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class CourseStateIn(BaseModel):
    coursetype: CourseState


class TopicIn(BaseModel):
    name: str = Field(..., min_length=1)


class SubTopicIn(BaseModel):
    videoUrl: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    videoPlaybackTime: str

    @field_validator("videoPlaybackTime")
    @classmethod
    def _playback_time(cls, v: str) -> str:
        if not is_valid_playback_time(v):
            raise ValueError(f"{v} is not a valid video playback time! Use HH:MM:SS format.")
        return v
