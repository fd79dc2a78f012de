## Main application entry point
from contextlib import asynccontextmanager

import redis
from fastapi import FastAPI
from sqlalchemy import Engine

from goalmap.db.session import close_db, init_db, make_engine, make_session_factory
from goalmap.logging import configure_logging, get_logger
from goalmap.roadmaps.routes import router as roadmaps_router
from goalmap.settings import Settings, get_settings

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    redis_client: redis.Redis | None = None,
    engine: Engine | None = None,
) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.debug)
        own_redis = redis_client is None
        own_engine = engine is None

        app.state.redis = redis.Redis.from_url(settings.redis_url, decode_responses=True) if own_redis else redis_client
        app.state.engine = make_engine(settings.database_url) if own_engine else engine
        init_db(app.state.engine)
        app.state.session_factory = make_session_factory(app.state.engine)
        logger.info("API started", env=settings.env)

        yield

        if own_redis:
            app.state.redis.close()
        if own_engine:
            close_db(app.state.engine)

    app = FastAPI(title="goalmap", lifespan=lifespan)
    app.include_router(roadmaps_router)
    return app
