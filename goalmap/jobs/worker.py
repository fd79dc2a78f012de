#!/usr/bin/env python3
"""
Worker process for goal -> roadmap jobs
"""
import functools
import signal
import sys
import threading

import redis

from goalmap.agents.llm.client import get_llm_client
from goalmap.db.session import close_db, init_db, make_engine, make_session_factory
from goalmap.jobs.pipeline import generate_roadmap
from goalmap.jobs.tasks import run_worker
from goalmap.logging import configure_logging, get_logger
from goalmap.settings import get_settings

logger = get_logger(__name__)


def main() -> int:
    settings = get_settings()
    configure_logging(settings.debug)

    stop = threading.Event()

    def signal_handler(sig, frame):
        logger.info("Worker shutting down", signal=sig)
        stop.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    # Shared clients are built once here and passed down
    redis_client = redis.Redis.from_url(settings.redis_url, decode_responses=True)
    engine = make_engine(settings.database_url)
    init_db(engine)
    session_factory = make_session_factory(engine)
    llm = get_llm_client(settings)

    handler = functools.partial(
        generate_roadmap,
        llm=llm,
        session_factory=session_factory,
        temperature=settings.llm_temperature,
    )

    logger.info("Starting roadmap generation worker", env=settings.env, provider=settings.LLM_PROVIDER)
    try:
        run_worker(
            redis_client,
            handler=handler,
            session_factory=session_factory,
            max_retries=settings.roadmap_retries,
            timeout=settings.worker_poll_timeout,
            stop=stop,
        )
    except Exception:
        logger.exception("Worker error")
        return 1
    finally:
        redis_client.close()
        close_db(engine)
    return 0


if __name__ == "__main__":
    sys.exit(main())
