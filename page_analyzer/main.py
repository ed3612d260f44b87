from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from page_analyzer.config import AnalyzerSettings, get_analyzer_settings
from page_analyzer.extraction.base import PageLoader
from page_analyzer.repositories.analysis_job_repository import AnalysisJobRepository
from page_analyzer.services.analysis_orchestrator_service import (
    AsyncioTaskExecutor,
    build_analysis_orchestrator_service,
)

logger = logging.getLogger(__name__)


def _configure_logging(log_level: str) -> None:
    """
    Configure root logging once for the API process.
    """

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Log readiness on boot; cancel in-flight analysis tasks on exit."""
    settings: AnalyzerSettings = application.state.settings
    logger.info("Page analyzer ready loader=%s", settings.page_loader)
    try:
        yield
    finally:
        executor: AsyncioTaskExecutor = application.state.task_executor
        pending = executor.pending
        await executor.shutdown()
        logger.info("Page analyzer shut down, cancelled %d pending job(s)", pending)


def create_app(
    *,
    settings: AnalyzerSettings | None = None,
    page_loader: PageLoader | None = None,
    repository: AnalysisJobRepository | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    The job repository and orchestrator are scoped to the returned app, so
    every app instance has an isolated job store.
    """

    settings = settings or get_analyzer_settings()
    _configure_logging(settings.log_level)

    application = FastAPI(
        title="Page Analyzer API",
        version="1.0.0",
        lifespan=_lifespan,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    executor = AsyncioTaskExecutor()
    application.state.settings = settings
    application.state.task_executor = executor
    application.state.analysis_orchestrator = build_analysis_orchestrator_service(
        settings=settings,
        executor=executor,
        repository=repository,
        page_loader=page_loader,
    )

    from page_analyzer.api.routers import analysis_router

    application.include_router(analysis_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
