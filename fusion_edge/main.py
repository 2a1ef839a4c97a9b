"""Main FastAPI application."""

import logging
from typing import Optional

import redis
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from fusion_edge.api.errors import register_exception_handlers
from fusion_edge.api.v1 import api_router
from fusion_edge.celery_app import create_celery_app
from fusion_edge.config import Settings, get_settings
from fusion_edge.database import create_db_engine, create_session_factory
from fusion_edge.logging_config import setup_logging
from fusion_edge.middleware.cors import PreflightMiddleware

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to use; defaults to the environment

    Returns:
        Configured FastAPI app with engine, session factory and Celery client
        on ``app.state``
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="Project Fusion Edge Functions",
        description="Device ingestion, session updates and referral notifications for Project Fusion",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    engine = create_db_engine(settings.database_url)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.celery_app = create_celery_app(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # Added last so it wraps CORSMiddleware and sees preflights first
    app.add_middleware(PreflightMiddleware)

    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.functions_prefix)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        # Check database
        db_status = "disconnected"
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
                db_status = "connected"
        except Exception as e:
            db_status = f"error: {str(e)}"

        # Check Redis
        redis_status = "disconnected"
        try:
            r = redis.from_url(settings.redis_url, socket_connect_timeout=1)
            r.ping()
            redis_status = "connected"
        except Exception as e:
            redis_status = f"error: {str(e)}"

        overall_status = "ok" if db_status == "connected" and redis_status == "connected" else "degraded"

        return {
            "status": overall_status,
            "db": db_status,
            "redis": redis_status,
        }

    logger.info(f"Application created ({settings.environment})")
    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "fusion_edge.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
