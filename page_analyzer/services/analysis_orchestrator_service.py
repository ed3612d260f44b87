"""
Orchestrator service for async page analysis dispatch and lifecycle tracking.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from page_analyzer.config import PAGE_LOADER_STATIC, AnalyzerSettings
from page_analyzer.domain.analysis import AnalysisJob
from page_analyzer.errors import AnalysisTimeoutError, SubmissionValidationError
from page_analyzer.extraction.base import PageLoader
from page_analyzer.extraction.extractor import PageExtractor
from page_analyzer.logging_utils import MAX_ERROR_MESSAGE_LENGTH, describe_error, log_event
from page_analyzer.repositories.analysis_job_repository import AnalysisJobRepository

logger = logging.getLogger(__name__)


class AnalysisTaskExecutor(Protocol):
    def submit(self, task: Callable[..., Awaitable[None]], *args: Any, **kwargs: Any) -> None:
        ...


class AsyncioTaskExecutor:
    """
    Schedules each job as an independent task on the running event loop.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(self, task: Callable[..., Awaitable[None]], *args: Any, **kwargs: Any) -> None:
        scheduled = asyncio.create_task(task(*args, **kwargs))
        self._tasks.add(scheduled)
        scheduled.add_done_callback(self._tasks.discard)

    async def shutdown(self) -> None:
        """
        Cancel outstanding tasks and wait for them to unwind.
        """

        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)


class AnalysisOrchestratorService:
    """
    Coordinates job creation, background page analysis, and status tracking.
    """

    def __init__(
        self,
        *,
        repository: AnalysisJobRepository,
        page_loader: PageLoader,
        executor: AnalysisTaskExecutor,
        extractor: PageExtractor | None = None,
        job_timeout_seconds: float | None = None,
        max_concurrent_jobs: int = 4,
    ) -> None:
        self._repository = repository
        self._page_loader = page_loader
        self._executor = executor
        self._extractor = extractor or PageExtractor()
        self._job_timeout_seconds = job_timeout_seconds
        self._slots = asyncio.Semaphore(max(1, max_concurrent_jobs))

    @property
    def repository(self) -> AnalysisJobRepository:
        return self._repository

    def submit(self, url: str | None) -> AnalysisJob:
        """
        Create a job for the URL and schedule its analysis without waiting for it.

        Raises SubmissionValidationError before any job exists when the URL is missing.
        """

        normalized_url = (url or "").strip()
        if not normalized_url:
            raise SubmissionValidationError("URL is required")

        job = self._repository.create_job(url=normalized_url)
        log_event(logger, logging.INFO, "analysis_job_created", job_id=job.job_id, url=normalized_url)

        try:
            self._executor.submit(self.run_job, job.job_id, normalized_url)
        except Exception:
            self._repository.mark_failed(
                job_id=job.job_id,
                error_message="Failed to schedule page analysis job.",
            )
            raise

        return job

    async def run_job(self, job_id: str, url: str) -> None:
        """
        Drive one job to a terminal state. Never raises for analysis failures.
        """

        try:
            async with self._slots:
                result = await self._analyze_within_deadline(url)
            self._repository.mark_completed(job_id=job_id, result=result)
            log_event(
                logger,
                logging.INFO,
                "analysis_job_completed",
                job_id=job_id,
                url=url,
                links=result["links"]["count"],
                icons=result["icons"]["count"],
            )
        except AnalysisTimeoutError as exc:
            self._mark_job_failed(job_id=job_id, url=url, error_message=f"TimeoutError: {exc}")
        except asyncio.CancelledError:
            self._mark_job_failed(job_id=job_id, url=url, error_message="CancelledError: analysis cancelled")
            raise
        except Exception as exc:
            logger.exception("Page analysis failed id=%s url=%s", job_id, url)
            self._mark_job_failed(job_id=job_id, url=url, error_message=describe_error(exc))

    async def analyze(self, url: str) -> dict[str, Any]:
        """
        Load, extract and assemble the analysis result for one URL.
        """

        async with self._page_loader.open(url) as page:
            extraction = await self._extractor.extract(page)
        return extraction.to_result(url)

    async def _analyze_within_deadline(self, url: str) -> dict[str, Any]:
        """
        Run ``analyze`` under the optional per-job deadline.

        Only the deadline itself raises AnalysisTimeoutError; a TimeoutError
        raised by the loader or extractor propagates unchanged.
        """

        if self._job_timeout_seconds is None:
            return await self.analyze(url)

        task = asyncio.create_task(self.analyze(url))
        try:
            done, _ = await asyncio.wait({task}, timeout=self._job_timeout_seconds)
        except asyncio.CancelledError:
            task.cancel()
            raise
        if not done:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            raise AnalysisTimeoutError(f"analysis exceeded {self._job_timeout_seconds:g} seconds")
        return task.result()

    def get_job_status(self, job_id: str) -> AnalysisJob | None:
        return self._repository.get_job(job_id)

    def list_job_statuses(
        self,
        *,
        limit: int = 100,
        status: str | None = None,
    ) -> list[AnalysisJob]:
        return self._repository.list_jobs(limit=limit, status=status)

    def _mark_job_failed(self, *, job_id: str, url: str, error_message: str) -> None:
        error_message = error_message[:MAX_ERROR_MESSAGE_LENGTH]
        log_event(logger, logging.ERROR, "analysis_job_failed", job_id=job_id, url=url, error=error_message)
        try:
            self._repository.mark_failed(job_id=job_id, error_message=error_message)
        except Exception:
            logger.exception("Failed to record failed analysis job state id=%s", job_id)


def build_page_loader(settings: AnalyzerSettings) -> PageLoader:
    """
    Construct the page loader selected by PAGE_LOADER.
    """

    if settings.page_loader == PAGE_LOADER_STATIC:
        from page_analyzer.extraction.static_loader import StaticPageLoader

        return StaticPageLoader(settings=settings.static_fetch)

    from page_analyzer.extraction.playwright_loader import PlaywrightPageLoader

    return PlaywrightPageLoader(settings=settings.browser)


def build_analysis_orchestrator_service(
    *,
    settings: AnalyzerSettings,
    executor: AnalysisTaskExecutor,
    repository: AnalysisJobRepository | None = None,
    page_loader: PageLoader | None = None,
) -> AnalysisOrchestratorService:
    return AnalysisOrchestratorService(
        repository=repository or AnalysisJobRepository(),
        page_loader=page_loader or build_page_loader(settings),
        executor=executor,
        job_timeout_seconds=settings.job_timeout_seconds,
        max_concurrent_jobs=settings.max_concurrent_jobs,
    )
