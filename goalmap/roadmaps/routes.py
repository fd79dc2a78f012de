# Goal intake and roadmap read endpoints
import uuid
from typing import Iterator

import redis
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from goalmap.db.models.generation_run import GenerationRun
from goalmap.db.models.roadmap import Roadmap
from goalmap.jobs.events import GoalReceivedEvent, GoalRequest
from goalmap.jobs.tasks import enqueue_event

router = APIRouter()


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_redis(request: Request) -> redis.Redis:
    return request.app.state.redis


@router.post("/goals", status_code=202)
def submit_goal(
    body: GoalRequest,
    db: Session = Depends(get_db),
    redis_client: redis.Redis = Depends(get_redis),
):
    event = GoalReceivedEvent(data=body)

    run = GenerationRun(
        event_id=event.id,
        user_id=body.userId,
        goal=body.goal,
        status="queued",
        attempts=0,
        message="Queued",
    )
    db.add(run)
    db.commit()

    enqueue_event(redis_client, event)

    return {"event_id": event.id, "run_id": str(run.id)}


@router.get("/runs/{run_id}")
def get_run_status(run_id: uuid.UUID, db: Session = Depends(get_db)):
    run = db.query(GenerationRun).filter(GenerationRun.id == run_id).first()
    if not run:
        return JSONResponse({"error": "not_found"}, status_code=404)

    return {
        "id": str(run.id),
        "event_id": run.event_id,
        "status": run.status,
        "attempts": run.attempts,
        "message": run.message,
        "error": run.error,
        "result_json": run.result_json if run.status == "succeeded" else None,
    }


@router.get("/users/{user_id}/roadmaps")
def list_roadmaps(user_id: uuid.UUID, db: Session = Depends(get_db)):
    items = (
        db.query(Roadmap)
        .filter(Roadmap.user_id == user_id)
        .order_by(Roadmap.created_at.desc())
        .all()
    )
    return [
        {
            "id": str(rm.id),
            "goal": rm.goal,
            "level": rm.level,
            "weeks": rm.weeks,
            "created_at": rm.created_at.isoformat(),
        }
        for rm in items
    ]
