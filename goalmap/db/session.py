"""Engine and session lifecycle.

Nothing here is created at import time: the worker and the API build the
engine once at startup, hand the session factory to whatever needs it, and
dispose of the engine on shutdown.
"""

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from goalmap.db.base import Base
from goalmap.logging import get_logger

logger = get_logger(__name__)


def make_engine(database_url: str) -> Engine:
    if database_url.startswith("sqlite") and ":memory:" in database_url:
        # one shared connection, otherwise every session sees an empty database
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url, pool_pre_ping=True)


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    # registers the mapped tables on Base.metadata
    import goalmap.db.models  # noqa: F401

    logger.info("Creating database tables")
    Base.metadata.create_all(engine)


def close_db(engine: Engine) -> None:
    logger.info("Closing database connections")
    engine.dispose()
