## Pydantic Schemas for roadmap output
from typing import Any, List, Literal

from pydantic import BaseModel, Field, conint, field_validator


class RoadmapDraft(BaseModel):
    """Provider output after the structural check.

    Only "level is truthy" and "weeks is an array" are enforced; the level
    enum, the week count and each week's topics are taken as given.
    """

    level: Any
    weeks: List[Any]

    @field_validator("level")
    @classmethod
    def level_present(cls, v: Any) -> Any:
        # empty containers still count as present; only null/false/""/0 are missing
        if v is None or v is False or v == "" or (isinstance(v, (int, float)) and not v):
            raise ValueError("level is required")
        return v

    @field_validator("weeks", mode="before")
    @classmethod
    def weeks_is_array(cls, v: Any) -> Any:
        if not isinstance(v, list):
            raise ValueError("weeks must be an array")
        return v


class WeekTopics(BaseModel):
    week: conint(ge=1, le=12)
    topics: List[str] = Field(min_length=1)


class StrictRoadmap(BaseModel):
    level: Literal["beginner", "intermediate", "advanced"]
    weeks: List[WeekTopics] = Field(min_length=12, max_length=12)
