# goalmap/jobs/pipeline.py
"""
Goal -> roadmap pipeline, one linear pass per event:

    event intake -> prompt -> provider call -> sanitize/validate -> persist

Nothing here catches errors. Provider failures, MalformedOutput and storage
errors all propagate to the job runner, which retries the whole pass. Because
the write is a plain insert, a pass that fails after persisting (or an event
delivered twice) leaves duplicate roadmaps behind.
"""
import json
import uuid
from typing import Any, Dict

from sqlalchemy.orm import Session, sessionmaker

from goalmap.agents.llm.base import LLMClient
from goalmap.agents.roadmap import build_roadmap_prompt, parse_roadmap, request_roadmap
from goalmap.agents.schemas import RoadmapDraft
from goalmap.db.models.roadmap import Roadmap
from goalmap.errors import InvalidUserId
from goalmap.jobs.events import GoalReceivedEvent
from goalmap.logging import get_logger

logger = get_logger(__name__)


def persist_roadmap(db: Session, user_id: str, goal: str, draft: RoadmapDraft) -> Roadmap:
    try:
        user_ref = uuid.UUID(str(user_id))
    except ValueError as e:
        raise InvalidUserId(f"Invalid user id {user_id!r}: {e}") from e

    rm = Roadmap(
        user_id=user_ref,
        goal=goal,
        level=draft.level,
        weeks_json=json.dumps(draft.weeks),
    )
    db.add(rm)
    db.commit()
    return rm


def generate_roadmap(
    event: GoalReceivedEvent,
    *,
    llm: LLMClient,
    session_factory: sessionmaker[Session],
    temperature: float = 0.2,
) -> Dict[str, Any]:
    user_id = event.data.userId
    goal = event.data.goal
    log = logger.bind(event_id=event.id, user_id=user_id)

    prompt = build_roadmap_prompt(goal)

    log.info("Requesting roadmap from provider", goal_length=len(goal))
    raw = request_roadmap(llm, prompt, temperature=temperature)

    draft = parse_roadmap(raw)
    log.info("Roadmap output validated", level=draft.level, weeks=len(draft.weeks))

    db = session_factory()
    try:
        rm = persist_roadmap(db, user_id, goal, draft)
        log.info("Roadmap saved", roadmap_id=str(rm.id))
    finally:
        db.close()

    return {"userId": user_id, "level": draft.level, "weeks": draft.weeks}
