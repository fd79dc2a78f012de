# goalmap/jobs/tasks.py
"""
Redis-based (reliable) job runner for goal events.

Queue pattern:
- Producer LPUSH -> PENDING_Q
- Worker BRPOPLPUSH pending -> processing (atomic, reliable)
- ACK via LREM on processing
- Retry by moving back to pending with attempt increment
- After max_retries extra attempts the payload goes to FAILED_Q and the run is marked failed

Every failure is retried the same way; the runner does not tell a provider
outage apart from a malformed reply.
"""
import json
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict

import redis
from pydantic import ValidationError
from sqlalchemy.orm import Session, sessionmaker

from goalmap.db.models.generation_run import GenerationRun
from goalmap.errors import classify_error
from goalmap.jobs.events import GoalReceivedEvent
from goalmap.logging import get_logger, job_context

logger = get_logger(__name__)

PENDING_Q = "goal_events_queue"
PROCESSING_Q = "goal_events_processing"
FAILED_Q = "goal_events_failed"

Handler = Callable[[GoalReceivedEvent], Dict[str, Any]]


# -------------------------
# Queue API (producer)
# -------------------------
def enqueue_event(redis_client: redis.Redis, event: GoalReceivedEvent) -> str:
    """Push an event onto the pending queue and return its id."""
    redis_client.lpush(PENDING_Q, event.to_json())
    logger.info("Event queued", event_id=event.id, event_name=event.name)
    return event.id


# -------------------------
# DB helper
# -------------------------
def update_run(
    session_factory: sessionmaker[Session],
    event_id: str,
    *,
    status: str | None = None,
    attempts: int | None = None,
    message: str | None = None,
    error: str | None = None,
    result_json: str | None = None,
    started: bool = False,
    finished: bool = False,
) -> None:
    """Update the run tracking this event, if there is one."""
    db = session_factory()
    try:
        run = db.query(GenerationRun).filter(GenerationRun.event_id == event_id).first()
        if not run:
            return

        now = datetime.now(timezone.utc)
        if status is not None:
            run.status = status
        if attempts is not None:
            run.attempts = attempts
        if message is not None:
            run.message = message[:255]
        if error is not None:
            run.error = error
        if result_json is not None:
            run.result_json = result_json
        if started and run.started_at is None:
            run.started_at = now
        if finished:
            run.finished_at = now

        db.commit()
    finally:
        db.close()


# -------------------------
# Worker (consumer)
# -------------------------
def process_next(
    redis_client: redis.Redis,
    *,
    handler: Handler,
    session_factory: sessionmaker[Session],
    max_retries: int = 2,
    timeout: int = 30,
) -> str | None:
    """Run at most one job.

    Returns None when the queue stayed empty for `timeout` seconds, otherwise
    one of "succeeded", "retrying", "failed" or "dropped".
    """
    # Atomically move task from pending -> processing and block up to timeout
    task_raw = redis_client.brpoplpush(PENDING_Q, PROCESSING_Q, timeout=timeout)
    if not task_raw:
        logger.debug("Worker idle (no jobs)")
        return None

    try:
        event = GoalReceivedEvent.from_json(task_raw)
    except ValidationError as e:
        logger.error("Dropping unreadable job payload", error=str(e), payload_preview=str(task_raw)[:200])
        redis_client.lrem(PROCESSING_Q, 1, task_raw)
        return "dropped"

    log = logger.bind(event_id=event.id, user_id=event.data.userId, attempt=event.attempt)
    log.info("Picked up job", event_name=event.name)

    try:
        update_run(
            session_factory,
            event.id,
            status="running",
            attempts=event.attempt + 1,
            message="Generating roadmap",
            started=True,
        )
        with job_context(event_id=event.id, attempt=event.attempt):
            result = handler(event)
    except Exception as e:
        kind = classify_error(e)
        error_text = f"{type(e).__name__}: {e}"
        log.exception("Roadmap generation failed", error_kind=kind)

        event.attempt += 1
        if event.attempt <= max_retries:
            log.info("Re-queueing job for retry", retry=event.attempt, max_retries=max_retries)
            update_run(
                session_factory,
                event.id,
                status="running",
                message=f"Retry {event.attempt}/{max_retries} after error: {error_text}",
                error=error_text,
            )
            redis_client.lrem(PROCESSING_Q, 1, task_raw)
            redis_client.lpush(PENDING_Q, event.to_json())
            return "retrying"

        log.error("Max retries exceeded, marking as failed", error_kind=kind)
        update_run(
            session_factory,
            event.id,
            status="failed",
            message="Failed",
            error=f"Retries exhausted: {error_text}",
            finished=True,
        )
        redis_client.lpush(FAILED_Q, event.to_json())
        redis_client.lrem(PROCESSING_Q, 1, task_raw)
        return "failed"

    update_run(
        session_factory,
        event.id,
        status="succeeded",
        message="Done",
        result_json=json.dumps(result),
        finished=True,
    )
    redis_client.lrem(PROCESSING_Q, 1, task_raw)
    log.info("Job completed", level=result.get("level"))
    return "succeeded"


def run_worker(
    redis_client: redis.Redis,
    *,
    handler: Handler,
    session_factory: sessionmaker[Session],
    max_retries: int = 2,
    timeout: int = 30,
    stop: threading.Event | None = None,
) -> None:
    """Consume jobs until `stop` is set."""
    stop = stop or threading.Event()
    logger.info("Starting worker loop", pending=PENDING_Q, processing=PROCESSING_Q, max_retries=max_retries)

    while not stop.is_set():
        try:
            process_next(
                redis_client,
                handler=handler,
                session_factory=session_factory,
                max_retries=max_retries,
                timeout=timeout,
            )
        except redis.RedisError:
            logger.exception("Redis unavailable, backing off")
            stop.wait(1)
        except Exception:
            # run bookkeeping failed; the job stays in PROCESSING_Q for inspection
            logger.exception("Error processing job")

    logger.info("Worker loop stopped")
