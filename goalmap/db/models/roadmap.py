## Roadmap table
import json
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from goalmap.db.base import Base


class Roadmap(Base):
    __tablename__ = "roadmaps"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # users live in another service; no foreign key
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    goal: Mapped[str] = mapped_column(Text, nullable=False)
    level: Mapped[str] = mapped_column(String(50), nullable=False)
    weeks_json: Mapped[str] = mapped_column(Text, nullable=False)  # list of {week, topics} as JSON

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    @property
    def weeks(self) -> list[Any]:
        return json.loads(self.weeks_json)
