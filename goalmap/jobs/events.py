## Event contract between producers and the job runner
import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field

GOAL_RECEIVED = "user/goal.received"


class GoalRequest(BaseModel):
    # goal is forwarded as-is: no length limit, no content checks
    userId: str
    goal: str


class GoalReceivedEvent(BaseModel):
    name: str = GOAL_RECEIVED
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    data: GoalRequest
    ts: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    attempt: int = 0

    def to_json(self) -> str:
        return self.model_dump_json()

    @classmethod
    def from_json(cls, raw: str) -> "GoalReceivedEvent":
        return cls.model_validate_json(raw)
