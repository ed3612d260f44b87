"""
In-memory repository for analysis job lifecycle state and status lookup.
"""

from __future__ import annotations

import copy
import threading
import uuid
from dataclasses import replace
from typing import Any

from page_analyzer.domain.analysis import AnalysisJob, AnalysisJobStatus, utc_now
from page_analyzer.errors import JobNotFoundError, JobStateError


class AnalysisJobRepository:
    """
    Process-lifetime job store.

    Records are immutable snapshots; every transition swaps the whole record
    under the lock, so readers never observe a partially updated job.
    """

    def __init__(self) -> None:
        self._jobs: dict[str, AnalysisJob] = {}
        self._lock = threading.Lock()

    def create_job(self, *, url: str) -> AnalysisJob:
        job = AnalysisJob(job_id=uuid.uuid4().hex, url=url)
        with self._lock:
            self._jobs[job.job_id] = job
        return job

    def get_job(self, job_id: str) -> AnalysisJob | None:
        with self._lock:
            job = self._jobs.get(job_id)
        return _detached(job) if job is not None else None

    def list_jobs(
        self,
        *,
        limit: int = 100,
        status: str | None = None,
    ) -> list[AnalysisJob]:
        with self._lock:
            jobs = list(reversed(self._jobs.values()))

        if status:
            jobs = [job for job in jobs if job.status == status]
        return [_detached(job) for job in jobs[: max(1, limit)]]

    def mark_completed(self, *, job_id: str, result: dict[str, Any]) -> AnalysisJob:
        return self._transition(
            job_id=job_id,
            status=AnalysisJobStatus.COMPLETED,
            result=copy.deepcopy(result),
            error=None,
        )

    def mark_failed(self, *, job_id: str, error_message: str) -> AnalysisJob:
        return self._transition(
            job_id=job_id,
            status=AnalysisJobStatus.FAILED,
            result=None,
            error=error_message,
        )

    def _transition(
        self,
        *,
        job_id: str,
        status: str,
        result: dict[str, Any] | None,
        error: str | None,
    ) -> AnalysisJob:
        with self._lock:
            current = self._jobs.get(job_id)
            if current is None:
                raise JobNotFoundError(f"Analysis job not found: {job_id}")
            if current.is_terminal:
                raise JobStateError(
                    f"Analysis job {job_id} is already {current.status}; cannot mark {status}."
                )
            updated = replace(
                current,
                status=status,
                result=result,
                error=error,
                completed_at=utc_now(),
            )
            self._jobs[job_id] = updated
        return _detached(updated)


def _detached(job: AnalysisJob) -> AnalysisJob:
    # Callers get a private copy of the result; the stored record never changes.
    if job.result is None:
        return job
    return replace(job, result=copy.deepcopy(job.result))
