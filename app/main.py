"""Problem Insights API — FastAPI application entry point.

Run with ``uvicorn app.main:create_app --factory`` or the ``problem-insights``
script.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from app.errors import register_exception_handlers
from app.middleware import MetricsMiddleware
from app.routers import analytics, health, metrics
from app.routers import problems as problem_routes
from app.telemetry.logging import setup_logging
from app.telemetry.tracing import SERVICE_VERSION, setup_tracing
from problems.analytics.service import AnalyticsService
from problems.config import Settings, settings as default_settings
from problems.service import ProblemService
from problems.storage.client import MongoStore
from problems.storage.repository import ProblemRepository

logger = logging.getLogger("problems_api")


def _install_services(app: FastAPI, repository: ProblemRepository, settings: Settings) -> None:
    app.state.repository = repository
    app.state.problem_service = ProblemService(repository, max_page_size=settings.max_page_size)
    app.state.analytics_service = AnalyticsService(repository)


def create_app(settings: Settings | None = None, repository: ProblemRepository | None = None) -> FastAPI:
    """Build the application.

    Services are constructed once in the lifespan and handed to routers via
    ``app.state``. Passing ``repository`` skips the MongoDB connection.
    """
    settings = settings or default_settings

    if settings.otel_enabled:
        setup_tracing(otlp_endpoint=settings.otlp_endpoint, environment=settings.environment)
    setup_logging(
        otlp_endpoint=settings.otlp_endpoint if settings.otel_enabled else None,
        level=settings.log_level,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store: MongoStore | None = None

        if repository is not None:
            _install_services(app, repository, settings)
        else:
            logger.info("Connecting to MongoDB database=%s", settings.mongodb_database)
            store = MongoStore.from_settings(settings)
            repo = ProblemRepository(store.collection, analytics_limit=settings.analytics_max_records)

            if settings.create_indexes:
                # Non-fatal: only $text search depends on these.
                try:
                    await repo.ensure_indexes()
                except Exception:
                    logger.exception("Index creation failed — continuing without ensured indexes")

            _install_services(app, repo, settings)

        app.state.store = store
        logger.info("Problem Insights API ready — analytics ceiling=%d", settings.analytics_max_records)

        yield

        if store is not None:
            await store.close()
        logger.info("Problem Insights API shut down")

    app = FastAPI(
        title="Problem Insights API",
        description="Filtering, listing and analytics over APM problem records",
        version=SERVICE_VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(MetricsMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in settings.cors_origins.split(",")],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Cookie"],
    )

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(problem_routes.router)
    app.include_router(analytics.router)
    app.include_router(metrics.router)

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "name": "Problem Insights API",
            "version": SERVICE_VERSION,
            "status": "running",
            "documentation": "/api/v1/health",
        }

    if settings.otel_enabled:
        FastAPIInstrumentor.instrument_app(app)

    return app


def run() -> None:
    import uvicorn

    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host=default_settings.host,
        port=default_settings.port,
    )
