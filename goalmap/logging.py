"""Logging setup for the API and the worker.

structlog renders every record: JSON lines in normal runs, a console renderer
when debug is on. Job context (event id, attempt) is kept in contextvars so
the pipeline's own log lines carry it without threading a logger through.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog

SERVICE_NAME = "goalmap"


def _add_service(logger: Any, method_name: str, event_dict: dict) -> dict:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def configure_logging(debug: bool = False) -> None:
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if debug else logging.INFO,
    )
    # openai and httpx log every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    renderer = structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            _add_service,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)  # type: ignore[no-any-return]


@contextmanager
def job_context(**values: Any) -> Iterator[None]:
    """Attach key/values to every log line emitted while a job runs."""
    with structlog.contextvars.bound_contextvars(**values):
        yield
