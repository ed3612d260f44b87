"""
tests/test_analysis_orchestrator_service.py

Lifecycle tests for AnalysisOrchestratorService driven with asyncio.run and
fake page loaders.

Coverage
--------
- Submission validation happens before job creation
- Submission returns before extraction finishes
- Completed, navigation-failed, extraction-failed and timed-out jobs
- Loader TimeoutError kept apart from the per-job deadline
- Page release on success and failure
- Independent jobs finish out of submission order
"""

from __future__ import annotations

import asyncio

import pytest

from page_analyzer.domain.analysis import AnalysisJob, AnalysisJobStatus
from page_analyzer.errors import ExtractionError, NavigationError, SubmissionValidationError
from page_analyzer.extraction.base import PageHandle, PageLoader
from page_analyzer.extraction.extractor import PageExtractor
from page_analyzer.repositories.analysis_job_repository import AnalysisJobRepository
from page_analyzer.services.analysis_orchestrator_service import (
    AnalysisOrchestratorService,
    AsyncioTaskExecutor,
)

URL = "https://example.com"
PAGE = '<a href="/">Home</a><a href="/empty"></a><button id="submit-btn">Go</button>'


def _service(loader, **kwargs) -> AnalysisOrchestratorService:
    return AnalysisOrchestratorService(
        repository=AnalysisJobRepository(),
        page_loader=loader,
        executor=AsyncioTaskExecutor(),
        **kwargs,
    )


async def _wait_for_terminal(service: AnalysisOrchestratorService, job_id: str) -> AnalysisJob:
    for _ in range(500):
        job = service.get_job_status(job_id)
        if job is not None and job.is_terminal:
            return job
        await asyncio.sleep(0.005)
    raise AssertionError(f"job {job_id} never reached a terminal state")


class _FailingExtractor(PageExtractor):
    async def extract(self, page: PageHandle):
        raise ExtractionError("Execution context was destroyed")


class _TimingOutLoader(PageLoader):
    async def load(self, url: str) -> PageHandle:
        raise TimeoutError("connect timed out")

    async def release(self, handle: PageHandle) -> None:
        pass


class _RecordingExecutor:
    def __init__(self) -> None:
        self.submitted: list[tuple] = []

    def submit(self, task, *args, **kwargs) -> None:
        self.submitted.append((task, args))


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


class TestSubmit:
    @pytest.mark.parametrize("url", [None, "", "   "])
    def test_missing_url_is_rejected_before_job_creation(self, make_loader, url) -> None:
        repository = AnalysisJobRepository()
        executor = _RecordingExecutor()
        service = AnalysisOrchestratorService(
            repository=repository,
            page_loader=make_loader({}),
            executor=executor,
        )

        with pytest.raises(SubmissionValidationError, match="URL is required"):
            service.submit(url)

        assert repository.list_jobs() == []
        assert executor.submitted == []

    def test_submit_creates_one_job_and_schedules_it(self, make_loader) -> None:
        repository = AnalysisJobRepository()
        executor = _RecordingExecutor()
        service = AnalysisOrchestratorService(
            repository=repository,
            page_loader=make_loader({URL: PAGE}),
            executor=executor,
        )

        job = service.submit(f"  {URL}  ")

        assert job.status == AnalysisJobStatus.PROCESSING
        assert job.url == URL
        assert [stored.job_id for stored in repository.list_jobs()] == [job.job_id]
        assert executor.submitted == [(service.run_job, (job.job_id, URL))]

    def test_submit_returns_before_extraction_completes(self, make_loader) -> None:
        async def scenario() -> None:
            gate = asyncio.Event()
            loader = make_loader({URL: PAGE}, gate=gate)
            service = _service(loader)

            job = service.submit(URL)
            await asyncio.sleep(0.01)
            assert service.get_job_status(job.job_id).status == AnalysisJobStatus.PROCESSING
            assert loader.loaded == []

            gate.set()
            finished = await _wait_for_terminal(service, job.job_id)
            assert finished.status == AnalysisJobStatus.COMPLETED

        asyncio.run(scenario())

    def test_scheduling_failure_marks_job_failed(self, make_loader) -> None:
        class _BrokenExecutor:
            def submit(self, task, *args, **kwargs) -> None:
                raise RuntimeError("no event loop")

        repository = AnalysisJobRepository()
        service = AnalysisOrchestratorService(
            repository=repository,
            page_loader=make_loader({}),
            executor=_BrokenExecutor(),
        )

        with pytest.raises(RuntimeError):
            service.submit(URL)

        [job] = repository.list_jobs()
        assert job.status == AnalysisJobStatus.FAILED
        assert job.error == "Failed to schedule page analysis job."


# ---------------------------------------------------------------------------
# Background execution
# ---------------------------------------------------------------------------


class TestRunJob:
    def test_completed_job_has_result_and_releases_page(self, make_loader) -> None:
        async def scenario() -> AnalysisJob:
            loader = make_loader({URL: PAGE})
            service = _service(loader)
            job = service.submit(URL)
            finished = await _wait_for_terminal(service, job.job_id)
            assert loader.released == [URL]
            return finished

        job = asyncio.run(scenario())

        assert job.status == AnalysisJobStatus.COMPLETED
        assert job.error is None
        assert job.result["url"] == URL
        assert job.result["links"]["count"] == 2
        assert job.result["locators"]["buttons"] == [
            {"text": "Go", "css": "#submit-btn", "xpath": '//*[@id="submit-btn"]'}
        ]

    def test_unreachable_url_fails_without_result(self, make_loader) -> None:
        async def scenario() -> AnalysisJob:
            loader = make_loader({})
            service = _service(loader)
            job = service.submit("https://unreachable.invalid")
            finished = await _wait_for_terminal(service, job.job_id)
            assert loader.released == []
            return finished

        job = asyncio.run(scenario())

        assert job.status == AnalysisJobStatus.FAILED
        assert job.result is None
        assert job.error.startswith("NavigationError: ")
        assert "ERR_NAME_NOT_RESOLVED" in job.error

    def test_extraction_failure_fails_job_and_still_releases_page(self, make_loader) -> None:
        async def scenario() -> AnalysisJob:
            loader = make_loader({URL: PAGE})
            service = _service(loader, extractor=_FailingExtractor())
            job = service.submit(URL)
            finished = await _wait_for_terminal(service, job.job_id)
            assert loader.released == [URL]
            return finished

        job = asyncio.run(scenario())

        assert job.status == AnalysisJobStatus.FAILED
        assert job.result is None
        assert job.error == "ExtractionError: Execution context was destroyed"

    def test_job_timeout_fails_job(self, make_loader) -> None:
        async def scenario() -> AnalysisJob:
            loader = make_loader({URL: PAGE}, gate=asyncio.Event())
            service = _service(loader, job_timeout_seconds=0.05)
            job = service.submit(URL)
            return await _wait_for_terminal(service, job.job_id)

        job = asyncio.run(scenario())

        assert job.status == AnalysisJobStatus.FAILED
        assert job.result is None
        assert job.error == "TimeoutError: analysis exceeded 0.05 seconds"

    @pytest.mark.parametrize("job_timeout_seconds", [None, 5.0])
    def test_loader_timeout_fails_job_with_its_own_message(self, job_timeout_seconds) -> None:
        async def scenario() -> AnalysisJob:
            service = _service(_TimingOutLoader(), job_timeout_seconds=job_timeout_seconds)
            job = service.submit(URL)
            return await _wait_for_terminal(service, job.job_id)

        job = asyncio.run(scenario())

        assert job.status == AnalysisJobStatus.FAILED
        assert job.result is None
        assert job.error == "TimeoutError: connect timed out"

    def test_job_within_deadline_completes(self, make_loader) -> None:
        async def scenario() -> AnalysisJob:
            loader = make_loader({URL: PAGE})
            service = _service(loader, job_timeout_seconds=5.0)
            job = service.submit(URL)
            finished = await _wait_for_terminal(service, job.job_id)
            assert loader.released == [URL]
            return finished

        job = asyncio.run(scenario())

        assert job.status == AnalysisJobStatus.COMPLETED
        assert job.result["links"]["count"] == 2

    def test_release_failure_does_not_fail_completed_job(self, make_loader) -> None:
        async def scenario() -> AnalysisJob:
            loader = make_loader({URL: PAGE})

            async def broken_release(handle) -> None:
                raise RuntimeError("browser already closed")

            loader.release = broken_release
            service = _service(loader)
            job = service.submit(URL)
            return await _wait_for_terminal(service, job.job_id)

        assert asyncio.run(scenario()).status == AnalysisJobStatus.COMPLETED

    def test_jobs_run_independently(self, make_loader) -> None:
        slow_url = "https://slow.example.com"

        async def scenario() -> None:
            gate = asyncio.Event()
            slow_loader = make_loader({slow_url: PAGE}, gate=gate)
            fast_loader = make_loader({URL: PAGE})

            class _RoutingLoader(type(fast_loader)):
                async def load(self, url: str) -> PageHandle:
                    target = slow_loader if url == slow_url else fast_loader
                    return await target.load(url)

            service = _service(_RoutingLoader({}))
            slow_job = service.submit(slow_url)
            fast_job = service.submit(URL)

            finished = await _wait_for_terminal(service, fast_job.job_id)
            assert finished.status == AnalysisJobStatus.COMPLETED
            assert service.get_job_status(slow_job.job_id).status == AnalysisJobStatus.PROCESSING

            gate.set()
            assert (await _wait_for_terminal(service, slow_job.job_id)).status == AnalysisJobStatus.COMPLETED

        asyncio.run(scenario())

    def test_terminal_lookups_are_stable(self, make_loader) -> None:
        async def scenario() -> tuple[AnalysisJob, AnalysisJob]:
            service = _service(make_loader({URL: PAGE}))
            job = service.submit(URL)
            first = await _wait_for_terminal(service, job.job_id)
            await asyncio.sleep(0.01)
            return first, service.get_job_status(job.job_id)

        first, second = asyncio.run(scenario())

        assert first == second
        assert first.result == second.result


def test_analyze_returns_result_inline(make_loader) -> None:
    service = _service(make_loader({URL: PAGE}))

    result = asyncio.run(service.analyze(URL))

    assert result["links"]["count"] == len(result["links"]["items"]) == 2
    assert result["icons"] == {"count": 0, "items": []}


def test_analyze_raises_navigation_error(make_loader) -> None:
    service = _service(make_loader({}))

    with pytest.raises(NavigationError):
        asyncio.run(service.analyze("https://unreachable.invalid"))


def test_executor_shutdown_cancels_pending_jobs(make_loader) -> None:
    async def scenario() -> AnalysisJob:
        executor = AsyncioTaskExecutor()
        service = AnalysisOrchestratorService(
            repository=AnalysisJobRepository(),
            page_loader=make_loader({URL: PAGE}, gate=asyncio.Event()),
            executor=executor,
        )
        job = service.submit(URL)
        await asyncio.sleep(0.01)
        assert executor.pending == 1

        await executor.shutdown()
        assert executor.pending == 0
        return service.get_job_status(job.job_id)

    job = asyncio.run(scenario())

    assert job.status == AnalysisJobStatus.FAILED
    assert job.error == "CancelledError: analysis cancelled"
